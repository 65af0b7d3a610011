from __future__ import annotations
import logging
import os
from typing import BinaryIO

from .listener import TailerListener
from .scanner import LineScanner
from .session import TailSession
from .utils import close_quietly, file_length, is_file_newer, modified_ns


logger = logging.getLogger(__name__)


class TailerRun:
    """
    One poll cycle over a TailSession.

    Each ``run()`` opens the file if needed, works out what happened to it
    since the previous cycle and reports new lines to the listener:

    * shorter than our position  -> rotated: drain the old handle, switch to
      the new file at offset 0
    * longer than our position   -> grown: read the new bytes
    * same length, newer mtime   -> rewritten in place: rescan from offset 0
    * anything else              -> unchanged, nothing to do

    ``run()`` never raises. Failures go to ``listener.handle_error()`` and the
    session keeps the last confirmed position so the next cycle can retry.
    Driving it on a schedule is up to the caller (see ``filetailer.tailer``).
    """

    def __init__(self, session: TailSession, listener: TailerListener) -> None:
        self.session = session
        self.listener = listener

    def __call__(self) -> None:
        self.run()

    def run(self) -> None:
        try:
            self._cycle()
        except Exception as e:
            logger.debug("poll cycle on %s failed: %r", self.session.path, e)
            self.listener.handle_error(e)

    # -------------------------
    # Cycle
    # -------------------------
    def _cycle(self) -> None:
        s = self.session
        if s.handle is None and not self._open():
            return

        # mtime before length: a write landing between the two stats must not
        # look like "same length, not newer"
        newer = is_file_newer(s.path, s.last_modified)
        try:
            length = file_length(s.path)
        except FileNotFoundError:
            logger.debug("%s vanished, keeping old handle at %d", s.path, s.position)
            self.listener.file_not_found()
            return

        if s.rotation_pending or length < s.position:
            logger.debug("%s rotated (length %d < position %d)", s.path, length, s.position)
            self._rotate()
        elif length > s.position:
            self._scan(s.position, length)
            s.last_modified = modified_ns(s.path)
        elif newer:
            logger.debug("%s rewritten in place, rescanning from 0", s.path)
            s.position = 0
            self._scan(0, length)
            s.last_modified = modified_ns(s.path)

        if s.reopen_each_cycle:
            s.close()
            self._reopen()

    def _open(self) -> bool:
        s = self.session
        try:
            s.handle = open(s.path, "rb")
        except FileNotFoundError:
            self.listener.file_not_found()
            return False

        st = os.fstat(s.handle.fileno())
        if not s.opened_once:
            s.position = st.st_size if s.start_at_end else 0
            s.last_modified = st.st_mtime_ns
            s.opened_once = True
        s.handle.seek(s.position)
        logger.debug("opened %s at %d", s.path, s.position)
        return True

    def _reopen(self) -> None:
        s = self.session
        s.handle = open(s.path, "rb")
        s.handle.seek(s.position)

    def _rotate(self) -> None:
        s = self.session
        # a drain cut short by a failure resumes next cycle without a second announcement
        if not s.rotation_pending:
            self.listener.file_rotated()
            s.rotation_pending = True
        save = s.handle
        try:
            fresh = open(s.path, "rb")
        except FileNotFoundError:
            # gone again between stat and open; keep reading the old file
            self.listener.file_not_found()
            return

        # finish what was written to the old file before switching
        scanner = LineScanner(s.encoding, s.errors, s.position)
        try:
            save.seek(s.position)
            limit = os.fstat(save.fileno()).st_size
            self._read_lines(save, scanner, limit)
        except OSError as e:
            self.listener.handle_error(e)
        except Exception:
            s.position = scanner.rewind_offset
            close_quietly(fresh)
            raise

        close_quietly(save)
        s.handle = fresh
        s.position = 0
        s.pending_line_bytes = bytearray()
        s.seen_lone_cr = False
        s.rotation_pending = False

    def _scan(self, start: int, limit: int) -> None:
        s = self.session
        s.handle.seek(start)
        scanner = LineScanner(s.encoding, s.errors, start)
        try:
            self._read_lines(s.handle, scanner, limit)
        finally:
            s.position = scanner.rewind_offset
            s.pending_line_bytes = scanner.pending
            s.seen_lone_cr = scanner.seen_cr
        s.handle.seek(s.position)

    def _read_lines(self, handle: BinaryIO, scanner: LineScanner, limit: int) -> None:
        """Feed ``handle`` from its cursor up to ``limit`` through ``scanner``."""
        buf = memoryview(self.session.read_buffer)
        remaining = limit - handle.tell()
        while remaining > 0:
            num = handle.readinto(buf[:min(remaining, len(buf))])
            if not num:
                break
            for line in scanner.feed(buf[:num]):
                self.listener.handle_line(line)
            remaining -= num
        logger.debug("scanned %s up to %d, confirmed %d", self.session.path, scanner.offset, scanner.rewind_offset)
