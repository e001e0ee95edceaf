"""Fixtures for spawnp tests."""

from __future__ import annotations

import os
import shutil
import typing as t

import pytest

if t.TYPE_CHECKING:
    import asyncio
    import pathlib


REQUIRED_PROGRAMS = [
    "cat",
    "echo",
    "false",
    "head",
    "ls",
    "printf",
    "pwd",
    "sh",
    "sleep",
    "touch",
    "tr",
    "true",
]


@pytest.fixture(autouse=True, scope="session")
def require_programs() -> None:
    """Skip the run if the POSIX utilities used as child processes are missing."""
    missing = [name for name in REQUIRED_PROGRAMS if shutil.which(name) is None]
    if missing:
        pytest.skip(f"missing programs: {', '.join(missing)}")


@pytest.fixture
def children() -> list[asyncio.subprocess.Process]:
    """Collect processes handed to ``on_child``."""
    return []


@pytest.fixture
def child_env(tmp_path: pathlib.Path) -> dict[str, str]:
    """Minimal environment for spawned commands."""
    return {"PATH": os.environ.get("PATH", os.defpath), "HOME": str(tmp_path)}
