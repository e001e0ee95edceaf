"""Dispatch command specifications and run sequences.

spawnp.common
~~~~~~~~~~~~~

:func:`run` is the main entry point. It looks at the shape of the command
specification and runs it as a single process, a pipeline, or a sequence:

>>> import asyncio
>>> result = asyncio.run(run('echo hello', extra={'stdout': True}))
>>> result.stdout
b'hello\\n'

>>> [r.returncode for r in asyncio.run(run(['true', 'echo done']))]
[0, 0]

>>> asyncio.run(passes('false'))
False
"""

from __future__ import annotations

import logging
import typing as t

from spawnp import exc
from spawnp.command import Pipeline, Sequential
from spawnp.pipeline import run_pipeline
from spawnp.runner import ExecutionResult, Extra, spawn_command

if t.TYPE_CHECKING:
    from collections.abc import Mapping

    from spawnp.command import CommandSpec

logger = logging.getLogger(__name__)


@t.overload
async def run(
    command: str | Pipeline,
    args: t.Sequence[t.Any] | None = ...,
    options: Mapping[str, t.Any] | None = ...,
    extra: Extra | Mapping[str, t.Any] | None = ...,
) -> ExecutionResult: ...


@t.overload
async def run(
    command: Sequential | list[t.Any] | tuple[t.Any, ...],
    args: t.Sequence[t.Any] | None = ...,
    options: Mapping[str, t.Any] | None = ...,
    extra: Extra | Mapping[str, t.Any] | None = ...,
) -> list[t.Any]: ...


async def run(
    command: CommandSpec,
    args: t.Sequence[t.Any] | None = None,
    options: Mapping[str, t.Any] | None = None,
    extra: Extra | Mapping[str, t.Any] | None = None,
) -> ExecutionResult | list[t.Any]:
    """Run a command specification.

    Parameters
    ----------
    command : str, :class:`~spawnp.command.Pipeline`, :class:`~spawnp.command.Sequential`, list or tuple
        - ``str``: one process
        - :class:`~spawnp.command.Pipeline`: stages chained stdout to stdin
        - :class:`~spawnp.command.Sequential`, ``list``, ``tuple``: entries run
          one after another, each entry may be any of these shapes
    args : sequence, optional
        arguments appended to every command
    options : mapping, optional
        passed through to :func:`asyncio.create_subprocess_exec`
    extra : :class:`~spawnp.runner.Extra` or mapping, optional
        capture flags and ``on_child`` callback

    Returns
    -------
    :class:`~spawnp.runner.ExecutionResult`
        for a string or pipeline
    list
        for a sequence, one result per entry in input order

    Raises
    ------
    :exc:`spawnp.exc.BadCommand`
        a process could not be created
    :exc:`spawnp.exc.CommandExitError`
        a process exited with a non-zero status
    :exc:`spawnp.exc.UnexpectedCommand`
        ``command`` has an unsupported type
    """
    extra = Extra.from_value(extra)

    if isinstance(command, str):
        return await spawn_command(command, args, options, extra)
    if isinstance(command, Pipeline):
        return await run_pipeline(command, args, options, extra)
    if isinstance(command, (Sequential, list, tuple)):
        return await _run_sequence(command, args, options, extra)
    raise exc.UnexpectedCommand(command)


async def _run_sequence(
    commands: t.Sequence[t.Any],
    args: t.Sequence[t.Any] | None,
    options: Mapping[str, t.Any] | None,
    extra: Extra,
) -> list[t.Any]:
    results: list[t.Any] = []
    for index in range(len(commands)):
        logger.debug(f"sequence step {index + 1}/{len(commands)}")
        results.append(await run(commands[index], args, options, extra))
    return results


async def passes(
    command: CommandSpec,
    args: t.Sequence[t.Any] | None = None,
    options: Mapping[str, t.Any] | None = None,
    extra: Extra | Mapping[str, t.Any] | None = None,
) -> bool:
    """Return True if ``command`` runs to completion with status zero.

    Takes the same arguments as :func:`run`.

    Raises
    ------
    :exc:`spawnp.exc.BadCommand`
        a process could not be created, this is not reported as ``False``

    Examples
    --------
    >>> asyncio.run(passes('true'))
    True

    >>> asyncio.run(passes('no-such-command-spawnp'))
    Traceback (most recent call last):
    ...
    spawnp.exc.BadCommand: bad command: 'no-such-command-spawnp' (No such file or directory)
    """
    try:
        await run(command, args, options, extra)
    except exc.CommandExitError:
        return False
    return True
