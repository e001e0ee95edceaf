"""Tests for running a single child process."""

from __future__ import annotations

import asyncio
import errno
import logging
import typing as t

import pytest

from spawnp import exc
from spawnp.command import parse_command
from spawnp.constants import CHUNK_SIZE, ErrorType
from spawnp.runner import (
    ExecutionResult,
    Extra,
    create_child,
    spawn_command,
    wait_child,
)

if t.TYPE_CHECKING:
    import pathlib


@pytest.mark.asyncio
async def test_echo_captures_stdout() -> None:
    """Captured stdout chunks join to the command's output."""
    result = await spawn_command("echo hello", [], {}, Extra(stdout=True))

    assert isinstance(result, ExecutionResult)
    assert b"".join(result.stdouts) == b"hello\n"
    assert result.stdout == b"hello\n"
    assert result.stderrs == []
    assert result.returncode == 0
    assert isinstance(result.child, asyncio.subprocess.Process)


@pytest.mark.asyncio
async def test_no_capture_by_default() -> None:
    """Without capture flags both collections stay empty."""
    result = await spawn_command("echo hello")

    assert result.stdouts == []
    assert result.stderrs == []
    assert result.stdout == b""


@pytest.mark.asyncio
async def test_args_follow_embedded_tokens() -> None:
    """Explicit arguments come after the ones inside the command string."""
    result = await spawn_command("echo a", ["b", 3], extra={"stdout": True})

    assert result.stdout == b"a b 3\n"


@pytest.mark.asyncio
async def test_stderr_capture() -> None:
    """stderr chunks are collected when requested."""
    result = await spawn_command(
        "sh -c",
        ["echo out; echo err >&2"],
        extra=Extra(stdout=True, stderr=True),
    )

    assert result.stdout == b"out\n"
    assert result.stderr == b"err\n"


@pytest.mark.asyncio
async def test_large_output_arrives_in_chunks() -> None:
    """Output larger than one read is captured in order, chunk by chunk."""
    size = CHUNK_SIZE * 4 + 123
    result = await spawn_command(
        "sh -c",
        [f"head -c {size} /dev/zero | tr '\\0' x"],
        extra={"stdout": True},
    )

    assert len(result.stdout) == size
    assert set(result.stdout) == {ord("x")}
    assert len(result.stdouts) >= 5
    assert all(len(chunk) <= CHUNK_SIZE for chunk in result.stdouts)


class ExitCodeFixture(t.NamedTuple):
    """Test fixture for non-zero exit statuses."""

    test_id: str
    command: str
    args: list[str]
    code: int


EXIT_CODE_FIXTURES: list[ExitCodeFixture] = [
    ExitCodeFixture(test_id="false", command="false", args=[], code=1),
    ExitCodeFixture(test_id="exit_3", command="sh -c", args=["exit 3"], code=3),
    ExitCodeFixture(test_id="exit_255", command="sh -c", args=["exit 255"], code=255),
    ExitCodeFixture(
        test_id="killed_by_signal",
        command="sh -c",
        args=["kill -TERM $$"],
        code=-15,
    ),
]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    list(ExitCodeFixture._fields),
    EXIT_CODE_FIXTURES,
    ids=[test.test_id for test in EXIT_CODE_FIXTURES],
)
async def test_non_zero_exit(
    test_id: str,
    command: str,
    args: list[str],
    code: int,
) -> None:
    """Non-zero exits raise error_exist with the real exit code."""
    with pytest.raises(exc.CommandExitError) as exc_info:
        await spawn_command(command, args)

    error = exc_info.value
    assert error.type == ErrorType.ErrorExist
    assert error.type == "error_exist"
    assert error.code == code
    assert error.command == command
    assert error.command_args == parse_command(command, args).args
    assert str(error) == f"child process exited with code {code}"


@pytest.mark.asyncio
async def test_non_zero_exit_carries_stderr() -> None:
    """Captured stderr up to the failure is attached to the error."""
    with pytest.raises(exc.CommandExitError) as exc_info:
        await spawn_command(
            "sh -c",
            ["echo oops >&2; exit 2"],
            extra={"stderr": True},
        )

    assert b"".join(exc_info.value.stderrs) == b"oops\n"


@pytest.mark.asyncio
async def test_missing_executable() -> None:
    """Unknown executables raise bad_command."""
    with pytest.raises(exc.BadCommand) as exc_info:
        await spawn_command("spawnp-no-such-command --flag", ["x"])

    error = exc_info.value
    assert error.type == "bad_command"
    assert error.code is None
    assert error.errno == errno.ENOENT
    assert error.command == "spawnp-no-such-command --flag"
    assert error.command_args == ["--flag", "x"]
    assert error.stderrs == []
    assert isinstance(error.__cause__, FileNotFoundError)


@pytest.mark.asyncio
async def test_whitespace_only_command() -> None:
    """An empty executable fails at spawn time as bad_command."""
    with pytest.raises(exc.BadCommand):
        await spawn_command("   ")


@pytest.mark.asyncio
async def test_not_executable(tmp_path: pathlib.Path) -> None:
    """Permission failures are bad_command too."""
    script = tmp_path / "script.sh"
    script.write_text("#!/bin/sh\necho hi\n")
    script.chmod(0o644)

    with pytest.raises(exc.BadCommand) as exc_info:
        await spawn_command(str(script))

    assert isinstance(exc_info.value.__cause__, PermissionError)


@pytest.mark.asyncio
async def test_on_child_called_before_output() -> None:
    """on_child sees the live process before anything is captured."""
    seen: list[tuple[asyncio.subprocess.Process, list[bytes]]] = []
    captured: list[bytes] = []

    def on_child(process: asyncio.subprocess.Process) -> None:
        seen.append((process, list(captured)))

    result = await spawn_command(
        "echo hi",
        extra=Extra(stdout=True, on_child=on_child),
    )
    captured.extend(result.stdouts)

    assert len(seen) == 1
    process, captured_then = seen[0]
    assert process is result.child
    assert captured_then == []


@pytest.mark.asyncio
async def test_on_child_writes_stdin() -> None:
    """on_child can feed the child's standard input."""

    def on_child(process: asyncio.subprocess.Process) -> None:
        assert process.stdin is not None
        process.stdin.write(b"ping\n")
        process.stdin.close()

    result = await spawn_command("cat", extra=Extra(stdout=True, on_child=on_child))

    assert result.stdout == b"ping\n"


@pytest.mark.asyncio
async def test_stdin_closed_without_on_child() -> None:
    """Commands reading stdin see EOF unless on_child is given."""
    result = await asyncio.wait_for(
        spawn_command("cat", extra={"stdout": True}),
        timeout=10,
    )

    assert result.stdout == b""


@pytest.mark.asyncio
async def test_on_child_camel_case_alias() -> None:
    """Mappings may spell the callback onChild."""
    children: list[asyncio.subprocess.Process] = []

    await spawn_command("true", extra={"onChild": children.append})

    assert len(children) == 1


@pytest.mark.asyncio
async def test_options_cwd(tmp_path: pathlib.Path) -> None:
    """cwd is passed through to the process."""
    result = await spawn_command(
        "pwd",
        options={"cwd": str(tmp_path)},
        extra={"stdout": True},
    )

    assert result.stdout.decode().strip() == str(tmp_path.resolve())


@pytest.mark.asyncio
async def test_options_env(child_env: dict[str, str]) -> None:
    """env is passed through to the process."""
    result = await spawn_command(
        "sh -c",
        ['printf %s "$SPAWNP_VALUE"'],
        options={"env": {**child_env, "SPAWNP_VALUE": "from-env"}},
        extra={"stdout": True},
    )

    assert result.stdout == b"from-env"


@pytest.mark.asyncio
async def test_options_override_stdout() -> None:
    """Overriding stdout leaves nothing to capture."""
    result = await spawn_command(
        "echo hidden",
        options={"stdout": asyncio.subprocess.DEVNULL},
        extra={"stdout": True},
    )

    assert result.child is not None
    assert result.child.stdout is None
    assert result.stdouts == []


@pytest.mark.asyncio
async def test_create_and_wait_child() -> None:
    """The two halves of spawn_command can be driven separately."""
    parsed = parse_command("echo split")
    process = await create_child(parsed, {}, {"stdout": True})
    result = await wait_child(process, parsed, {"stdout": True})

    assert result.child is process
    assert result.stdout == b"split\n"


@pytest.mark.asyncio
async def test_on_child_error_kills_child(
    children: list[asyncio.subprocess.Process],
) -> None:
    """A raising on_child does not leave the child running."""

    def on_child(process: asyncio.subprocess.Process) -> None:
        children.append(process)
        raise RuntimeError("callback failed")

    with pytest.raises(RuntimeError, match="callback failed"):
        await asyncio.wait_for(
            spawn_command("sleep 30", extra={"on_child": on_child}),
            timeout=15,
        )

    assert len(children) == 1
    assert children[0].returncode is not None


@pytest.mark.asyncio
async def test_debug_logging(caplog: pytest.LogCaptureFixture) -> None:
    """Spawn and exit are logged at DEBUG level."""
    caplog.set_level(logging.DEBUG, logger="spawnp.runner")

    await spawn_command("echo logged")

    messages = [record.getMessage() for record in caplog.records]
    assert any(m.startswith("spawned pid") and "echo logged" in m for m in messages)
    assert any("exited with 0" in m for m in messages)


def test_extra_from_value() -> None:
    """Extra accepts instances, mappings and None."""
    extra = Extra(stdout=True)
    assert Extra.from_value(extra) is extra
    assert Extra.from_value(None) == Extra()
    assert Extra.from_value({"stderr": True}) == Extra(stderr=True)

    with pytest.raises(TypeError):
        Extra.from_value({"bogus": True})


def test_empty_result() -> None:
    """A result without a child has no return code."""
    result = ExecutionResult(child=None)
    assert result.returncode is None
    assert result.stdout == b""
    assert result.stderr == b""
