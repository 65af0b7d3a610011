from __future__ import annotations
import codecs
from dataclasses import dataclass, field
from typing import BinaryIO, Optional

from .utils import close_quietly


DEFAULT_BUFFER_SIZE = 4096


@dataclass
class TailSession:
    """
    Everything a poll cycle needs to remember about one tailed file.

    The configuration half (path, decoding, buffer size, start and reopen
    policy) is fixed at construction. The runtime half is only written by
    ``TailerRun``.

    ``pending_line_bytes`` and ``seen_lone_cr`` are for inspection only: they
    mirror the file bytes at ``[position, position + len(pending_line_bytes))``
    left over by the last scan. The next cycle seeks back to ``position`` and
    reads those bytes again, so they must never be fed back into a scan.
    ``rotation_pending`` is set once a rotation has been announced and
    cleared when the switch to the new file completes.

    Not thread safe: exactly one cycle may use a session at a
    time, and running two at once is undefined behaviour.
    """
    path: str
    encoding: str = "utf-8"
    errors: str = "replace"
    buffer_size: int = DEFAULT_BUFFER_SIZE
    start_at_end: bool = False
    reopen_each_cycle: bool = False

    position: int = field(default=0, init=False)
    last_modified: int = field(default=0, init=False)  # st_mtime_ns
    handle: Optional[BinaryIO] = field(default=None, init=False, repr=False)
    pending_line_bytes: bytearray = field(default_factory=bytearray, init=False, repr=False)
    seen_lone_cr: bool = field(default=False, init=False)
    opened_once: bool = field(default=False, init=False)
    rotation_pending: bool = field(default=False, init=False)
    read_buffer: bytearray = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if int(self.buffer_size) <= 0:
            raise ValueError(f"buffer_size must be a positive number of bytes, got {self.buffer_size}")
        try:
            codecs.lookup(self.encoding)
        except LookupError:
            raise ValueError(f"Unknown encoding: {self.encoding}")
        self.buffer_size = int(self.buffer_size)
        self.read_buffer = bytearray(self.buffer_size)

    @property
    def is_open(self) -> bool:
        return self.handle is not None

    def close(self) -> None:
        close_quietly(self.handle)
        self.handle = None

    def __enter__(self) -> "TailSession":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
