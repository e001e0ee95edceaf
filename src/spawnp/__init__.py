"""spawnp, an asyncio wrapper for spawning commands, sequences and pipelines."""

from . import exc
from .__about__ import (
    __author__,
    __copyright__,
    __description__,
    __email__,
    __license__,
    __package_name__,
    __title__,
    __version__,
)
from .command import ParsedCommand, Pipeline, Sequential, parse_command, pipe_line
from .common import passes, run
from .pipeline import run_pipeline
from .runner import ExecutionResult, Extra, spawn_command
from .shell import exec_shell

__all__ = (
    "ExecutionResult",
    "Extra",
    "ParsedCommand",
    "Pipeline",
    "Sequential",
    "__author__",
    "__copyright__",
    "__description__",
    "__email__",
    "__license__",
    "__package_name__",
    "__title__",
    "__version__",
    "exc",
    "exec_shell",
    "parse_command",
    "passes",
    "pipe_line",
    "run",
    "run_pipeline",
    "spawn_command",
)
