"""Simple logging utilities used across the recipe-sync toolchain."""
from __future__ import annotations

import sys
import time
from pathlib import Path
from typing import Optional, TextIO

__all__ = [
    "attach_log_file",
    "close",
    "debug",
    "err",
    "get_log_path",
    "info",
    "ok",
    "warn",
]

LOG_FILENAME = "recipe_sync.log"

_log_file: Optional[TextIO] = None
_log_path: Optional[Path] = None


def _timestamp() -> str:
    return time.strftime("%Y-%m-%d %H:%M:%S")


def _write_line(level: str, message: str, stream: Optional[TextIO] = None) -> None:
    line = f"{_timestamp()} {level} {message}"
    print(line, file=stream or sys.stdout)
    if _log_file is not None:
        try:
            _log_file.write(line + "\n")
            _log_file.flush()
        except (OSError, ValueError):
            # Logging errors must never crash the sync.
            pass


def info(message: str) -> None:
    _write_line("ℹ️", message)


def ok(message: str) -> None:
    _write_line("✅", message)


def warn(message: str) -> None:
    _write_line("⚠️", message, sys.stderr)


def err(message: str) -> None:
    _write_line("💥", message, sys.stderr)


def debug(message: str) -> None:
    _write_line("🐞", message)


def attach_log_file(logs_dir: Path) -> Optional[Path]:
    """Mirror every log line into ``<logs_dir>/recipe_sync.log``."""

    global _log_file, _log_path

    logs_dir = Path(logs_dir)
    log_path = logs_dir / LOG_FILENAME
    try:
        logs_dir.mkdir(parents=True, exist_ok=True)
        _log_file = log_path.open("a", encoding="utf-8")
    except OSError as exc:
        print(f"💥 Не удалось открыть файл лога {log_path}: {exc}", file=sys.stderr)
        _log_file = None
        return None

    _log_path = log_path
    header = (
        f"{'=' * 80}\n"
        f"🕓 {_timestamp()} — recipe-sync log started\n"
        f"{'=' * 80}\n"
    )
    _log_file.write(header)
    _log_file.flush()
    info(f"Лог-файл: {log_path}")
    return log_path


def get_log_path() -> Optional[Path]:
    return _log_path


def close() -> None:
    global _log_file, _log_path
    if _log_file is None:
        return
    footer = (
        f"{'=' * 80}\n"
        f"🏁 Завершение recipe-sync\n"
        f"{'=' * 80}\n\n"
    )
    try:
        _log_file.write(footer)
        _log_file.close()
    except (OSError, ValueError):
        pass
    finally:
        _log_file = None
        _log_path = None
