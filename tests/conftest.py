"""
Pytest configuration and shared fixtures.

This file is automatically loaded by pytest and provides
common fixtures and configuration for all test files.
"""
from __future__ import annotations
import os
import pytest
from pathlib import Path
from typing import List, Tuple

from filetailer.engine import TailerRun
from filetailer.listener import TailerListener
from filetailer.session import TailSession


class RecordingListener(TailerListener):
    """Listener that records every callback, in order."""

    def __init__(self) -> None:
        self.events: List[Tuple[str, object]] = []
        self.tailers: List[object] = []

    def init(self, tailer) -> None:
        self.tailers.append(tailer)

    def handle_line(self, line: str) -> None:
        self.events.append(("line", line))

    def file_not_found(self) -> None:
        self.events.append(("not_found", None))

    def file_rotated(self) -> None:
        self.events.append(("rotated", None))

    def handle_error(self, exc: Exception) -> None:
        self.events.append(("error", exc))

    @property
    def lines(self) -> List[str]:
        return [v for k, v in self.events if k == "line"]

    def count(self, kind: str) -> int:
        return sum(1 for k, _ in self.events if k == kind)

    def clear(self) -> None:
        self.events.clear()


def bump_mtime(path: Path, seconds: int = 10) -> None:
    """Push the modification time forward so 'newer' checks are deterministic."""
    st = os.stat(path)
    ns = st.st_mtime_ns + seconds * 1_000_000_000
    os.utime(path, ns=(ns, ns))


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture(scope="session")
def config_path(project_root):
    """Return path to the example tail configuration."""
    return project_root / "configs" / "tail.yaml"


@pytest.fixture
def listener():
    """A fresh recording listener."""
    return RecordingListener()


@pytest.fixture
def log_path(tmp_path):
    """Path of a not-yet-created log file inside a temp directory."""
    return tmp_path / "app.log"


@pytest.fixture
def make_cycle(listener):
    """Factory: build a session for a path and return (session, cycle)."""
    sessions: List[TailSession] = []

    def _make(path, **kwargs):
        session = TailSession(path=str(path), **kwargs)
        sessions.append(session)
        return session, TailerRun(session, listener)

    yield _make

    for s in sessions:
        s.close()
