# -*- coding: utf-8 -*-
"""
utils.py — файловые утилиты recipe-sync.
Атомарное копирование, сравнение файлов и форматирование времени.
"""
from __future__ import annotations

import filecmp
import os
import shutil
import tempfile
import time
from pathlib import Path

__all__ = ["atomic_copy", "files_equal", "get_elapsed_time"]


# === Атомарное копирование с перезаписью ===
def atomic_copy(src: Path, dst: Path) -> None:
    """
    Copy *src* over *dst* so that *dst* is never seen half written.

    The data goes to a temporary file next to *dst* which is then renamed onto
    the final name. The temporary file is removed if anything fails.

    Like ``cp -f``, a symlinked *dst* is written through (the link stays and
    its target gets the new content) and an existing *dst* keeps its mode.
    """
    src = Path(src)
    dst = Path(dst).resolve()
    mode_from = dst if dst.exists() else src
    fd, tmp_name = tempfile.mkstemp(prefix=f".{dst.name}.", suffix=".tmp", dir=dst.parent)
    os.close(fd)
    try:
        shutil.copyfile(src, tmp_name)
        shutil.copymode(mode_from, tmp_name)
        os.replace(tmp_name, dst)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


# === Побайтовое сравнение ===
def files_equal(first: Path, second: Path) -> bool:
    """Return ``True`` when both files exist and hold the same bytes."""
    if not Path(first).is_file() or not Path(second).is_file():
        return False
    return filecmp.cmp(first, second, shallow=False)


# === Форматирование времени выполнения ===
def get_elapsed_time(start_time: float) -> str:
    """
    Возвращает красиво отформатированное время выполнения:
    1.23s, 12.5s, 1m 03s, 2m 41s
    """
    elapsed = time.time() - start_time
    if elapsed < 60:
        return f"{elapsed:.2f}s"
    minutes, seconds = divmod(int(elapsed), 60)
    return f"{minutes}m {seconds:02d}s"
