from __future__ import annotations
from typing import Any


class TailerListener:
    """
    Receives what a tailer sees. Every method is a no-op here; subclass and
    override the ones you care about.
    """

    def init(self, tailer: Any) -> None:
        """Called once by the Tailer harness that will drive this listener."""

    def handle_line(self, line: str) -> None:
        """A complete line, terminator stripped, in file order."""

    def file_not_found(self) -> None:
        """The file could not be opened, or vanished while being followed."""

    def file_rotated(self) -> None:
        """The file shrank; reported before any line of the new file."""

    def handle_error(self, exc: Exception) -> None:
        """A failure inside a poll cycle. The next cycle retries."""
