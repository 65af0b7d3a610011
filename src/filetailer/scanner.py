from __future__ import annotations
import re
from typing import Iterator, Union


_TERMINATOR = re.compile(rb"[\r\n]")
_LF = 0x0A
_CR = 0x0D

Chunk = Union[bytes, bytearray, memoryview]


class LineScanner:
    """
    Incremental splitter for one read pass over a file.

    Bytes are fed chunk by chunk with ``feed()``; complete lines come out
    decoded and without their terminator. LF, CRLF and a lone CR are all
    terminators, but a CR at the end of the data seen so far stays pending
    until the next byte tells whether it starts a CRLF pair.

    ``rewind_offset`` is the file offset of the first byte that does not
    belong to a completed line. The caller seeks back to it after the pass so
    the unterminated tail is read again on the next poll.

    Two consecutive CRs keep the first one as line data ("a\\r\\rb" yields
    "a\\r" then "b"). Existing consumers depend on that, so keep it.
    """

    def __init__(self, encoding: str = "utf-8", errors: str = "replace", offset: int = 0) -> None:
        self.encoding = encoding
        self.errors = errors
        self.offset = offset
        self.rewind_offset = offset
        self.pending = bytearray()
        self.seen_cr = False

    def feed(self, chunk: Chunk) -> Iterator[str]:
        """
        Consume ``chunk`` and yield every line it completes.

        ``rewind_offset`` moves past a line only once the consumer asks for
        the next item, so a consumer that raises while handling a line leaves
        the offset in front of that line.
        """
        data = bytes(chunk)
        base = self.offset
        # advance first: a generator abandoned half way must not rescan the chunk
        self.offset = base + len(data)
        start = 0
        for m in _TERMINATOR.finditer(data):
            i = m.start()
            if i > start:
                yield from self._data(data, start, i, base)
            if data[i] == _LF:
                self.seen_cr = False
                yield self._decode()
                self._complete(base + i + 1)
            else:
                if self.seen_cr:
                    self.pending.append(_CR)
                self.seen_cr = True
            start = i + 1
        if start < len(data):
            yield from self._data(data, start, len(data), base)

    def _data(self, data: bytes, start: int, end: int, base: int) -> Iterator[str]:
        # only the first byte of a run can close a line left open by a lone CR
        if self.seen_cr:
            self.seen_cr = False
            yield self._decode()
            self._complete(base + start)
        self.pending += data[start:end]

    def _decode(self) -> str:
        return self.pending.decode(self.encoding, self.errors)

    def _complete(self, rewind_offset: int) -> None:
        self.pending = bytearray()
        self.rewind_offset = rewind_offset
