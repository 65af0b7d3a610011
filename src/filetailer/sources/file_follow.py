from __future__ import annotations
from collections import deque
from typing import Deque, Iterator, List
import logging
import time

from ..engine import TailerRun
from ..listener import TailerListener
from ..session import DEFAULT_BUFFER_SIZE, TailSession


logger = logging.getLogger(__name__)


class _QueueListener(TailerListener):
    def __init__(self, path: str) -> None:
        self.path = path
        self.lines: Deque[str] = deque()
        self.errors: List[Exception] = []

    def handle_line(self, line: str) -> None:
        self.lines.append(line)

    def file_not_found(self) -> None:
        logger.debug("waiting for %s to appear", self.path)

    def file_rotated(self) -> None:
        logger.debug("%s rotated, following the new file", self.path)

    def handle_error(self, exc: Exception) -> None:
        self.errors.append(exc)


def follow_file(
    path: str,
    *,
    start_at_end: bool = True,
    poll_interval: float = 0.2,
    encoding: str = "utf-8",
    errors: str = "replace",
    buffer_size: int = DEFAULT_BUFFER_SIZE,
    reopen: bool = False,
) -> Iterator[str]:
    """
    Follow a text file like `tail -F`.
    Yields complete lines without their terminator, forever.
    A missing file is waited for; rotation and in-place rewrites are
    followed. Errors reported by the poll cycle are raised here.
    Closing the generator closes the file.
    """
    listener = _QueueListener(path)
    session = TailSession(
        path=path,
        encoding=encoding,
        errors=errors,
        buffer_size=buffer_size,
        start_at_end=start_at_end,
        reopen_each_cycle=reopen,
    )
    cycle = TailerRun(session, listener)
    try:
        while True:
            cycle.run()
            while listener.lines:
                yield listener.lines.popleft()
            if listener.errors:
                raise listener.errors.pop(0)
            time.sleep(poll_interval)
    finally:
        session.close()
