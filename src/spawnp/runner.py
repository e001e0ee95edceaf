"""Run one command as a child process through :py:mod:`asyncio.subprocess`.

spawnp.runner
~~~~~~~~~~~~~

>>> import asyncio
>>> result = asyncio.run(spawn_command('echo hello', extra={'stdout': True}))
>>> result.stdout
b'hello\\n'
>>> result.returncode
0

Notes
-----
Captured chunks are kept in memory until the call returns. There is no upper
bound, so capturing is meant for short-lived commands.
"""

from __future__ import annotations

import asyncio
import contextlib
import dataclasses
import logging
import subprocess
import typing as t

from spawnp import exc
from spawnp.command import ParsedCommand, parse_command
from spawnp.constants import CHUNK_SIZE

if t.TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from typing import TypeAlias

    OnChild: TypeAlias = Callable[[asyncio.subprocess.Process], None]

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class Extra:
    """Capture flags and child callback for a command run.

    Attributes
    ----------
    stdout : bool
        collect standard output chunks
    stderr : bool
        collect standard error chunks
    on_child : callable, optional
        called with the :class:`asyncio.subprocess.Process` right after it is
        created, before any output is read. Setting it also opens a pipe to the
        child's standard input (unless ``stdin`` is given in the options).
    """

    stdout: bool = False
    stderr: bool = False
    on_child: OnChild | None = None

    @classmethod
    def from_value(cls, value: Extra | Mapping[str, t.Any] | None) -> Extra:
        """Return an :class:`Extra` for an instance, a mapping or ``None``.

        >>> Extra.from_value({'stdout': True})
        Extra(stdout=True, stderr=False, on_child=None)
        >>> Extra.from_value(None)
        Extra(stdout=False, stderr=False, on_child=None)
        """
        if value is None:
            return cls()
        if isinstance(value, Extra):
            return value
        values = dict(value)
        if "onChild" in values:
            values["on_child"] = values.pop("onChild")
        return cls(**values)


@dataclasses.dataclass
class ExecutionResult:
    """Outcome of a command that exited with status zero.

    Attributes
    ----------
    child : :class:`asyncio.subprocess.Process`, optional
        the finished process, ``None`` when nothing ran (empty pipeline)
    stdouts : list[bytes]
        captured standard output chunks, in arrival order
    stderrs : list[bytes]
        captured standard error chunks, in arrival order
    """

    child: asyncio.subprocess.Process | None
    stdouts: list[bytes] = dataclasses.field(default_factory=list)
    stderrs: list[bytes] = dataclasses.field(default_factory=list)

    @property
    def stdout(self) -> bytes:
        """Return captured standard output joined together."""
        return b"".join(self.stdouts)

    @property
    def stderr(self) -> bytes:
        """Return captured standard error joined together."""
        return b"".join(self.stderrs)

    @property
    def returncode(self) -> int | None:
        """Return exit status of the child, if one ran."""
        if self.child is None:
            return None
        return self.child.returncode


async def _capture(stream: asyncio.StreamReader, chunks: list[bytes]) -> None:
    while True:
        chunk = await stream.read(CHUNK_SIZE)
        if not chunk:
            break
        chunks.append(chunk)


async def create_child(
    parsed: ParsedCommand,
    options: Mapping[str, t.Any] | None = None,
    extra: Extra | Mapping[str, t.Any] | None = None,
) -> asyncio.subprocess.Process:
    """Spawn the process for ``parsed`` and hand it to ``on_child``.

    Parameters
    ----------
    parsed : :class:`~spawnp.command.ParsedCommand`
        what to execute
    options : mapping, optional
        keyword arguments for :func:`asyncio.create_subprocess_exec`, they
        override the default ``stdin``, ``stdout`` and ``stderr`` pipes
    extra : :class:`Extra` or mapping, optional

    Raises
    ------
    :exc:`spawnp.exc.BadCommand`
        the process could not be created

    If ``on_child`` raises, the process is killed and reaped before the error
    propagates.
    """
    extra = Extra.from_value(extra)

    kwargs: dict[str, t.Any] = {
        "stdin": asyncio.subprocess.PIPE
        if extra.on_child is not None
        else asyncio.subprocess.DEVNULL,
        "stdout": asyncio.subprocess.PIPE,
        "stderr": asyncio.subprocess.PIPE,
    }
    kwargs.update(options or {})

    try:
        process = await asyncio.create_subprocess_exec(
            parsed.executable,
            *parsed.args,
            **kwargs,
        )
    except OSError as e:
        logger.debug(
            f"Exception for {subprocess.list2cmdline(parsed.argv)}",
            exc_info=True,
        )
        raise exc.BadCommand(
            command=parsed.command,
            command_args=parsed.args,
            stderrs=[],
            errno=e.errno,
            reason=e.strerror,
        ) from e

    logger.debug(f"spawned pid {process.pid}: {subprocess.list2cmdline(parsed.argv)}")

    if extra.on_child is not None:
        try:
            extra.on_child(process)
        except BaseException:
            logger.debug(f"on_child failed, killing pid {process.pid}")
            with contextlib.suppress(ProcessLookupError):
                process.kill()
            await process.wait()
            raise

    return process


async def wait_child(
    process: asyncio.subprocess.Process,
    parsed: ParsedCommand,
    extra: Extra | Mapping[str, t.Any] | None = None,
) -> ExecutionResult:
    """Capture requested output of ``process`` and wait for it to exit.

    Raises
    ------
    :exc:`spawnp.exc.CommandExitError`
        the process exited with a non-zero status
    """
    extra = Extra.from_value(extra)

    stdouts: list[bytes] = []
    stderrs: list[bytes] = []

    readers = []
    if extra.stdout and process.stdout is not None:
        readers.append(_capture(process.stdout, stdouts))
    if extra.stderr and process.stderr is not None:
        readers.append(_capture(process.stderr, stderrs))

    await asyncio.gather(*readers)
    returncode = await process.wait()

    logger.debug(
        f"pid {process.pid} exited with {returncode}: "
        f"{subprocess.list2cmdline(parsed.argv)}",
    )

    if returncode != 0:
        raise exc.CommandExitError(
            returncode,
            command=parsed.command,
            command_args=parsed.args,
            stderrs=stderrs,
        )

    return ExecutionResult(child=process, stdouts=stdouts, stderrs=stderrs)


async def spawn_command(
    command: str,
    args: t.Sequence[t.Any] | None = None,
    options: Mapping[str, t.Any] | None = None,
    extra: Extra | Mapping[str, t.Any] | None = None,
) -> ExecutionResult:
    """Run a single command string and wait for it.

    Parameters
    ----------
    command : str
        command string, see :func:`~spawnp.command.parse_command`
    args : sequence, optional
        arguments appended after those embedded in ``command``
    options : mapping, optional
        passed through to :func:`asyncio.create_subprocess_exec`
    extra : :class:`Extra` or mapping, optional
        capture flags and ``on_child`` callback

    Returns
    -------
    :class:`ExecutionResult`

    Raises
    ------
    :exc:`spawnp.exc.BadCommand`
        the process could not be created
    :exc:`spawnp.exc.CommandExitError`
        the process exited with a non-zero status
    """
    extra = Extra.from_value(extra)
    parsed = parse_command(command, args)
    process = await create_child(parsed, options, extra)
    return await wait_child(process, parsed, extra)
