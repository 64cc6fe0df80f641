"""Fixtures for the procrelay test suite."""

from __future__ import annotations

import logging
import os
import pathlib
import sys
import typing as t

import pytest

logger = logging.getLogger(__name__)

PROC_FD_DIR = pathlib.Path("/proc/self/fd")


def _open_fds() -> set[int]:
    return {int(entry.name) for entry in PROC_FD_DIR.iterdir()}


@pytest.fixture
def open_fds() -> t.Callable[[], set[int]]:
    """Return a callable listing this process's open file descriptors."""
    if not PROC_FD_DIR.is_dir():
        pytest.skip("descriptor listing needs /proc/self/fd")
    return _open_fds


@pytest.fixture
def python_cmd() -> t.Callable[[str], list[str]]:
    """Build an argv running a snippet with the current interpreter."""

    def make(code: str) -> list[str]:
        return [sys.executable, "-c", code]

    return make


@pytest.fixture(autouse=True)
def restore_cwd() -> t.Iterator[None]:
    """Guard against tests leaking a working directory change."""
    cwd = os.getcwd()
    yield
    if os.getcwd() != cwd:
        logger.warning("test changed cwd to %s", os.getcwd())
        os.chdir(cwd)
