from __future__ import annotations
import logging
import threading

from .config import TailConfig, build_session
from .engine import TailerRun
from .listener import TailerListener
from .session import TailSession


logger = logging.getLogger(__name__)


class Tailer:
    """
    Fixed-delay driver for TailerRun: poll, wait ``delay`` seconds, repeat.

    ``run()`` blocks the calling thread until ``stop()`` is called (from a
    listener or another thread) or ``max_cycles`` polls have run. It does not
    start threads of its own; wrap it in one if you need to.
    """

    def __init__(self, session: TailSession, listener: TailerListener, delay: float = 1.0) -> None:
        self.session = session
        self.listener = listener
        self.delay = delay
        self._cycle = TailerRun(session, listener)
        self._stop = threading.Event()
        listener.init(self)

    @classmethod
    def from_config(cls, cfg: TailConfig, listener: TailerListener) -> "Tailer":
        return cls(build_session(cfg), listener, delay=cfg.delay)

    @property
    def path(self) -> str:
        return self.session.path

    @property
    def running(self) -> bool:
        return not self._stop.is_set()

    def run(self, max_cycles: int = 0) -> int:
        """Poll until stopped; returns the number of cycles run. Closes the session on exit."""
        cycles = 0
        logger.debug("tailing %s every %.3fs", self.session.path, self.delay)
        try:
            while not self._stop.is_set():
                self._cycle.run()
                cycles += 1
                if max_cycles and cycles >= max_cycles:
                    break
                self._stop.wait(self.delay)
        finally:
            self.session.close()
        return cycles

    def stop(self) -> None:
        """Let the current cycle finish, then return from ``run()``."""
        self._stop.set()
