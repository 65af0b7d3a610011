from __future__ import annotations
from dataclasses import dataclass, fields, replace
from typing import Any
import codecs
import yaml

from .session import DEFAULT_BUFFER_SIZE, TailSession


_ERROR_HANDLERS = ("strict", "replace", "ignore", "backslashreplace", "surrogateescape")


@dataclass
class TailConfig:
    version: int = 1
    file: str = ""
    encoding: str = "utf-8"
    errors: str = "replace"
    buffer_size: int = DEFAULT_BUFFER_SIZE
    start_at_end: bool = True
    reopen: bool = False
    delay: float = 1.0


def _validate(cfg: TailConfig, source: str) -> TailConfig:
    if cfg.buffer_size <= 0:
        raise ValueError(f"Invalid 'buffer_size' in {source}: must be positive, got {cfg.buffer_size}")
    if cfg.delay < 0:
        raise ValueError(f"Invalid 'delay' in {source}: must not be negative, got {cfg.delay}")
    try:
        codecs.lookup(cfg.encoding)
    except LookupError:
        raise ValueError(f"Invalid 'encoding' in {source}: unknown codec {cfg.encoding!r}")
    if cfg.errors not in _ERROR_HANDLERS:
        raise ValueError(
            f"Invalid 'errors' in {source}: {cfg.errors!r}\n"
            f"Expected one of: {', '.join(_ERROR_HANDLERS)}"
        )
    return cfg


def load_config(path: str) -> TailConfig:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        raise FileNotFoundError(
            f"Configuration file not found: {path}\n"
            f"Please ensure the file exists or specify a different config with --config"
        )
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in configuration file {path}: {e}")

    if not isinstance(data, dict):
        raise ValueError(f"Configuration file {path} must contain a mapping at the top level")
    tail = data.get("tail", {}) or {}
    if not isinstance(tail, dict):
        raise ValueError(f"Section 'tail' in {path} must be a mapping")

    known = {f.name for f in fields(TailConfig)} - {"version"}
    unknown = sorted(set(tail) - known)
    if unknown:
        raise ValueError(f"Unknown key(s) in 'tail' section of {path}: {', '.join(unknown)}")

    # Coerce scalar types so "4096" and 4096 both work
    try:
        cfg = TailConfig(
            version=int(data.get("version", 1)),
            file=str(tail.get("file", "") or ""),
            encoding=str(tail.get("encoding", "utf-8")),
            errors=str(tail.get("errors", "replace")),
            buffer_size=int(tail.get("buffer_size", DEFAULT_BUFFER_SIZE)),
            start_at_end=bool(tail.get("start_at_end", True)),
            reopen=bool(tail.get("reopen", False)),
            delay=float(tail.get("delay", 1.0)),
        )
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid value in configuration file {path}: {e}")

    return _validate(cfg, path)


def apply_overrides(cfg: TailConfig, **values: Any) -> TailConfig:
    """Return a copy of ``cfg`` with every non-None value in ``values`` applied."""
    changes = {k: v for k, v in values.items() if v is not None}
    return _validate(replace(cfg, **changes), "command line options")


def build_session(cfg: TailConfig) -> TailSession:
    if not cfg.file:
        raise ValueError("No file to tail: set 'file' in the 'tail' section or pass --file")
    return TailSession(
        path=cfg.file,
        encoding=cfg.encoding,
        errors=cfg.errors,
        buffer_size=cfg.buffer_size,
        start_at_end=cfg.start_at_end,
        reopen_each_cycle=cfg.reopen,
    )
