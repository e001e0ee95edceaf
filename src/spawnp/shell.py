"""Run commands through the shell and buffer their output.

spawnp.shell
~~~~~~~~~~~~

This is a separate code path from :func:`spawnp.run`. Commands are handed to
the system shell with :func:`asyncio.create_subprocess_shell`, so quoting,
globbing and ``|`` work as they would in a terminal. Output is buffered and
returned as text.

>>> import asyncio
>>> asyncio.run(exec_shell('echo "hello world" | tr a-z A-Z'))
'HELLO WORLD\\n'

>>> asyncio.run(exec_shell(['echo one', 'echo two']))
['one\\n', 'two\\n']

Failures are reported with the standard library's
:exc:`subprocess.CalledProcessError`:

>>> asyncio.run(exec_shell('exit 3'))
Traceback (most recent call last):
...
subprocess.CalledProcessError: Command 'exit 3' returned non-zero exit status 3.
"""

from __future__ import annotations

import asyncio
import codecs
import logging
import subprocess
import sys
import typing as t

from spawnp.constants import CHUNK_SIZE, ENCODING, ENCODING_ERRORS, STDIO_INHERIT

if t.TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)


async def _buffer(
    stream: asyncio.StreamReader,
    chunks: list[bytes],
    tee: t.TextIO | None = None,
) -> None:
    decoder = codecs.getincrementaldecoder(ENCODING)(errors=ENCODING_ERRORS)
    while True:
        chunk = await stream.read(CHUNK_SIZE)
        if not chunk:
            break
        chunks.append(chunk)
        if tee is not None:
            tee.write(decoder.decode(chunk))
            tee.flush()
    if tee is not None:
        tee.write(decoder.decode(b"", final=True))
        tee.flush()


async def exec_shell(
    command: str | t.Sequence[t.Any],
    options: Mapping[str, t.Any] | None = None,
) -> str | list[t.Any]:
    """Run ``command`` in the shell and return its standard output.

    Parameters
    ----------
    command : str or sequence
        shell command line, or a list of them to run one after another
        (entries may be nested lists)
    options : mapping, optional
        passed through to :func:`asyncio.create_subprocess_shell`, except
        ``stdout`` and ``stderr``, which are always piped and buffered.
        ``stdio='inherit'`` additionally streams the child's output to
        :data:`sys.stdout` / :data:`sys.stderr` while it is buffered.

    Returns
    -------
    str
        decoded standard output, for a single command
    list
        one entry per command, in order, for a sequence

    Raises
    ------
    :exc:`subprocess.CalledProcessError`
        the command exited with a non-zero status
    :exc:`OSError`
        the shell could not be started
    """
    if not isinstance(command, str):
        results: list[t.Any] = []
        for entry in command:
            results.append(await exec_shell(entry, options))
        return results

    kwargs: dict[str, t.Any] = {"stdin": asyncio.subprocess.DEVNULL}
    kwargs.update(options or {})
    inherit = kwargs.pop("stdio", None) == STDIO_INHERIT
    kwargs["stdout"] = asyncio.subprocess.PIPE
    kwargs["stderr"] = asyncio.subprocess.PIPE

    process = await asyncio.create_subprocess_shell(command, **kwargs)
    logger.debug(f"spawned shell pid {process.pid}: {command}")

    stdout_chunks: list[bytes] = []
    stderr_chunks: list[bytes] = []
    assert process.stdout is not None
    assert process.stderr is not None
    await asyncio.gather(
        _buffer(process.stdout, stdout_chunks, sys.stdout if inherit else None),
        _buffer(process.stderr, stderr_chunks, sys.stderr if inherit else None),
    )
    returncode = await process.wait()

    stdout = b"".join(stdout_chunks).decode(ENCODING, errors=ENCODING_ERRORS)
    stderr = b"".join(stderr_chunks).decode(ENCODING, errors=ENCODING_ERRORS)

    logger.debug(f"shell pid {process.pid} exited with {returncode}: {command}")

    if returncode != 0:
        raise subprocess.CalledProcessError(
            returncode,
            command,
            output=stdout,
            stderr=stderr,
        )

    return stdout
