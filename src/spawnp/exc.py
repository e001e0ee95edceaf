"""Provide exceptions used by spawnp.

spawnp.exc
~~~~~~~~~~

Every error raised by spawnp derives from :exc:`SpawnpException`. Failures of
a spawned command derive from :exc:`CommandError` and carry a ``type`` tag
(see :class:`spawnp.constants.ErrorType`) so callers can tell a command that
could not start from a command that ran and failed.

Notes
-----
Errors raised by :func:`spawnp.exec_shell` are the standard library's
:exc:`subprocess.CalledProcessError` and are not part of this hierarchy.
"""

from __future__ import annotations

import typing as t

from spawnp.constants import ErrorType


class SpawnpException(Exception):
    """Base exception for all spawnp errors."""


class UnexpectedCommand(SpawnpException, TypeError):
    """Raised if a command specification is not a string, sequence or pipeline."""

    def __init__(self, command: t.Any, *args: object) -> None:
        super().__init__(f"unexpected command {command!r}")
        self.command = command


class CommandError(SpawnpException):
    """Base exception for a command that failed to start or to finish cleanly.

    Attributes
    ----------
    type : ErrorType
        ``bad_command`` or ``error_exist``
    code : int, optional
        exit status, when the process ran
    command : str, optional
        command string as given by the caller
    command_args : list[str]
        argument list the executable received
    stderrs : list[bytes]
        standard error chunks captured before the failure
    """

    type: t.ClassVar[ErrorType]

    def __init__(
        self,
        message: str,
        command: str | None = None,
        command_args: t.Sequence[str] | None = None,
        stderrs: list[bytes] | None = None,
        code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.command = command
        self.command_args = list(command_args or [])
        self.stderrs = stderrs if stderrs is not None else []
        self.code = code


class BadCommand(CommandError):
    """Raised if the process could not be created (unknown executable, permissions).

    The originating :exc:`OSError` is available as ``__cause__``.
    """

    type = ErrorType.BadCommand

    def __init__(
        self,
        command: str | None = None,
        command_args: t.Sequence[str] | None = None,
        stderrs: list[bytes] | None = None,
        errno: int | None = None,
        reason: str | None = None,
    ) -> None:
        message = f"bad command: {command!r}"
        if reason:
            message += f" ({reason})"
        super().__init__(
            message,
            command=command,
            command_args=command_args,
            stderrs=stderrs,
        )
        self.errno = errno


class CommandExitError(CommandError):
    """Raised if the process exited with a non-zero status."""

    type = ErrorType.ErrorExist

    def __init__(
        self,
        code: int,
        command: str | None = None,
        command_args: t.Sequence[str] | None = None,
        stderrs: list[bytes] | None = None,
    ) -> None:
        super().__init__(
            f"child process exited with code {code}",
            command=command,
            command_args=command_args,
            stderrs=stderrs,
            code=code,
        )
