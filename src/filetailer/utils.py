from __future__ import annotations
import logging
import os
from typing import Optional


logger = logging.getLogger(__name__)


def file_length(path: str) -> int:
    """Current size of ``path`` in bytes. Raises FileNotFoundError if it is gone."""
    return os.stat(path).st_size


def modified_ns(path: str) -> int:
    """Modification time of ``path`` in integer nanoseconds, 0 if it does not exist."""
    try:
        return os.stat(path).st_mtime_ns
    except FileNotFoundError:
        return 0


def is_file_newer(path: str, reference_ns: int) -> bool:
    """True if ``path`` exists and was modified strictly after ``reference_ns``."""
    try:
        return os.stat(path).st_mtime_ns > reference_ns
    except FileNotFoundError:
        return False


def close_quietly(f: Optional[object]) -> None:
    if f is None:
        return
    try:
        f.close()
    except Exception as e:
        logger.debug("ignoring error while closing %r: %s", f, e)
