#!/usr/bin/env python
"""Demonstration of running commands, sequences and pipelines with spawnp.

Run from the project root after installing the package::

    $ python examples/async_demo.py
"""

from __future__ import annotations

import asyncio
import time

from spawnp import Extra, exc, exec_shell, passes, pipe_line, run


async def demo_single_command() -> None:
    """Demo: run one command and capture its output."""
    print("=" * 60)
    print("Demo 1: Single Command")
    print("=" * 60)

    result = await run("uname -s", extra=Extra(stdout=True))
    print(f"kernel: {result.stdout.decode().strip()}")


async def demo_sequence() -> None:
    """Demo: run commands one after another."""
    print("\n" + "=" * 60)
    print("Demo 2: Sequence")
    print("=" * 60)

    results = await run(["echo first", "echo second"], extra={"stdout": True})
    for index, result in enumerate(results, start=1):
        print(f"  step {index}: {result.stdout.decode().strip()}")


async def demo_pipeline() -> None:
    """Demo: chain commands like a shell pipe."""
    print("\n" + "=" * 60)
    print("Demo 3: Pipeline")
    print("=" * 60)

    result = await run(
        pipe_line(["printf spawnp", "tr a-z A-Z"]),
        extra={"stdout": True},
    )
    print(f"  upper-cased: {result.stdout.decode()}")


async def demo_errors() -> None:
    """Demo: tell failed commands from missing ones."""
    print("\n" + "=" * 60)
    print("Demo 4: Errors")
    print("=" * 60)

    print(f"  passes('true'): {await passes('true')}")
    print(f"  passes('false'): {await passes('false')}")

    try:
        await run("spawnp-demo-missing-command")
    except exc.BadCommand as e:
        print(f"  {e.type.value}: {e}")


async def demo_concurrent() -> None:
    """Demo: independent runs overlap on the event loop."""
    print("\n" + "=" * 60)
    print("Demo 5: Concurrent Runs")
    print("=" * 60)

    start = time.perf_counter()
    await asyncio.gather(*(run("sleep 0.3") for _ in range(3)))
    elapsed = time.perf_counter() - start
    print(f"  3 x 'sleep 0.3' took {elapsed:.2f}s")


async def demo_shell() -> None:
    """Demo: buffered shell execution."""
    print("\n" + "=" * 60)
    print("Demo 6: Shell")
    print("=" * 60)

    output = await exec_shell("echo 'quoted words' | wc -w")
    print(f"  word count: {output.strip()}")


async def main() -> None:
    """Run all demos."""
    await demo_single_command()
    await demo_sequence()
    await demo_pipeline()
    await demo_errors()
    await demo_concurrent()
    await demo_shell()


if __name__ == "__main__":
    asyncio.run(main())
