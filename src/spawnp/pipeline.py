"""Chain commands like a shell pipe.

spawnp.pipeline
~~~~~~~~~~~~~~~

Each stage's standard output is wired to the next stage's standard input
through an OS pipe, so data streams between the processes while they run.
Every stage is watched for failure, not only the last one.

>>> import asyncio
>>> from spawnp.command import pipe_line
>>> result = asyncio.run(
...     run_pipeline(pipe_line(['echo hi', 'tr a-z A-Z']), extra={'stdout': True})
... )
>>> result.stdout
b'HI\\n'
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import typing as t

from spawnp.command import Pipeline, parse_command, pipe_line
from spawnp.runner import ExecutionResult, Extra, create_child, wait_child

if t.TYPE_CHECKING:
    from collections.abc import Mapping

    from spawnp.command import ParsedCommand

logger = logging.getLogger(__name__)

_detached: set[asyncio.Future[t.Any]] = set()


def _collect(watcher: asyncio.Future[t.Any]) -> None:
    _detached.discard(watcher)
    if watcher.cancelled():
        return
    error = watcher.exception()
    if error is not None:
        logger.debug(f"pipeline stage finished after the pipeline settled: {error}")


def _detach(watcher: asyncio.Future[t.Any]) -> None:
    """Let a stage outlive the pipeline while still retrieving its outcome."""
    _detached.add(watcher)
    watcher.add_done_callback(_collect)


async def _spawn_stages(
    stages: list[ParsedCommand],
    options: Mapping[str, t.Any],
    extra: Extra,
) -> list[asyncio.subprocess.Process]:
    """Spawn ``stages`` in order, each reading the previous one's output."""
    processes: list[asyncio.subprocess.Process] = []
    upstream: int | None = None

    try:
        for index, parsed in enumerate(stages):
            stage_options = dict(options)
            downstream: int | None = None
            if upstream is not None:
                stage_options["stdin"] = upstream
            if index < len(stages) - 1:
                read_fd, downstream = os.pipe()
                stage_options["stdout"] = downstream
            else:
                read_fd = None

            try:
                process = await create_child(parsed, stage_options, extra)
            except BaseException:
                if read_fd is not None:
                    os.close(read_fd)
                raise
            finally:
                # the children hold their own copies now
                if upstream is not None:
                    os.close(upstream)
                if downstream is not None:
                    os.close(downstream)

            processes.append(process)
            upstream = read_fd
    except BaseException:
        await _terminate(processes)
        raise

    logger.debug(f"wired {len(processes)} pipeline stages")
    return processes


async def _terminate(
    processes: list[asyncio.subprocess.Process],
    watchers: t.Sequence[asyncio.Future[t.Any]] = (),
) -> None:
    """Stop stages that are still running and reap them."""
    for process in processes:
        if process.returncode is None:
            logger.debug(f"terminating pipeline stage pid {process.pid}")
            with contextlib.suppress(ProcessLookupError):
                process.terminate()

    if watchers:
        # outcome already decided, late stage errors are expected here
        await asyncio.gather(*watchers, return_exceptions=True)
    else:
        await asyncio.gather(*(process.wait() for process in processes))


async def run_pipeline(
    pipeline: Pipeline | t.Sequence[str],
    args: t.Sequence[t.Any] | None = None,
    options: Mapping[str, t.Any] | None = None,
    extra: Extra | Mapping[str, t.Any] | None = None,
) -> ExecutionResult:
    """Run ``pipeline`` and return the result of its last stage.

    Parameters
    ----------
    pipeline : :class:`~spawnp.command.Pipeline` or sequence of str
        stages, in order
    args : sequence, optional
        arguments appended to every stage
    options : mapping, optional
        passed through to :func:`asyncio.create_subprocess_exec` for every
        stage, the ``stdin`` / ``stdout`` of connected ends are overridden
    extra : :class:`~spawnp.runner.Extra` or mapping, optional
        ``on_child`` is called for every stage, stdout capture applies to the
        last stage

    Returns
    -------
    :class:`~spawnp.runner.ExecutionResult`
        for the last stage, or an empty result if ``pipeline`` is empty

    Raises
    ------
    :exc:`spawnp.exc.BadCommand`
        a stage could not be created
    :exc:`spawnp.exc.CommandExitError`
        a stage exited with a non-zero status before the last stage succeeded

    Notes
    -----
    When a stage fails, stages that are still running are terminated. When the
    last stage succeeds, earlier stages are left to finish on their own.

    Examples
    --------
    >>> asyncio.run(run_pipeline([]))
    ExecutionResult(child=None, stdouts=[], stderrs=[])
    """
    pipeline = pipe_line(pipeline)
    extra = Extra.from_value(extra)

    if not pipeline:
        return ExecutionResult(child=None)

    stages = [parse_command(command, args) for command in pipeline]
    processes = await _spawn_stages(stages, options or {}, extra)

    watchers = [
        asyncio.ensure_future(wait_child(process, parsed, extra))
        for process, parsed in zip(processes, stages)
    ]
    last = watchers[-1]

    pending: set[asyncio.Future[t.Any]] = set(watchers)
    try:
        while last in pending:
            done, pending = await asyncio.wait(
                pending,
                return_when=asyncio.FIRST_COMPLETED,
            )
            for watcher in watchers:
                if watcher in done and watcher.exception() is not None:
                    raise t.cast(BaseException, watcher.exception())
    except BaseException:
        await _terminate(processes, watchers)
        raise

    # upstream stages may still be draining, they finish on their own
    for watcher in pending:
        _detach(watcher)
    return last.result()
