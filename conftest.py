"""Pytest configuration: plugin-free asyncio runner and shared directory fixtures."""

from __future__ import annotations

import asyncio
import inspect
import os
from pathlib import Path

import pytest


@pytest.hookimpl(tryfirst=True)
def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "asyncio: mark a test as running inside an asyncio event loop",
    )


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    """Run ``async def`` tests to completion on a fresh event loop."""

    test_function = pyfuncitem.obj
    if not inspect.iscoroutinefunction(test_function):
        return None

    funcargs = {
        name: pyfuncitem.funcargs[name] for name in pyfuncitem._fixtureinfo.argnames
    }
    loop = asyncio.new_event_loop()
    try:
        asyncio.set_event_loop(loop)
        loop.run_until_complete(test_function(**funcargs))
        loop.run_until_complete(loop.shutdown_asyncgens())
        loop.run_until_complete(loop.shutdown_default_executor())
    finally:
        asyncio.set_event_loop(None)
        loop.close()
    return True


@pytest.fixture
def tree(tmp_path: Path) -> Path:
    """A small directory with a sub folder and two files of distinct age and size.

    ``b.txt`` holds 10 bytes and is the older one, ``a.txt`` holds 20 bytes.
    """
    root = tmp_path / "tree"
    (root / "sub").mkdir(parents=True)
    (root / "b.txt").write_bytes(b"x" * 10)
    (root / "a.txt").write_bytes(b"y" * 20)
    (root / "sub" / "inner.txt").write_text("inside", encoding="utf-8")
    os.utime(root / "b.txt", (1_600_000_000, 1_600_000_000))
    os.utime(root / "a.txt", (1_700_000_000, 1_700_000_000))
    os.utime(root / "sub", (1_650_000_000, 1_650_000_000))
    return root
