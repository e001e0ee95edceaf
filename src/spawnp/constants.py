"""Constant variables for spawnp."""

from __future__ import annotations

import enum


class ErrorType(str, enum.Enum):
    """Classification tag carried by :exc:`spawnp.exc.CommandError`."""

    BadCommand = "bad_command"
    ErrorExist = "error_exist"


#: Largest chunk read from a captured stream in one go
CHUNK_SIZE = 65536

#: Encoding used to decode buffered shell output
ENCODING = "utf-8"

#: Error handler used when decoding shell output
ENCODING_ERRORS = "backslashreplace"

#: ``stdio`` option value that tees shell output to the calling process
STDIO_INHERIT = "inherit"
