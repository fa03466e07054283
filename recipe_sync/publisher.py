"""Publishing of generated manifest fragments into the packaging layer."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple

from recipe_sync import logger, utils
from recipe_sync.errors import PublishFailed

__all__ = [
    "ADDED",
    "UNCHANGED",
    "UPDATED",
    "PublishedArtifact",
    "collect_artifacts",
    "publish_artifacts",
]

ADDED = "added"
UPDATED = "updated"
UNCHANGED = "unchanged"

_STATUS_ICONS = {ADDED: "🆕", UPDATED: "♻️", UNCHANGED: "="}


@dataclass(frozen=True)
class PublishedArtifact:
    """One copied file and what the destination held before the copy."""

    name: str
    status: str


def collect_artifacts(source_dir: Path, pattern: str = "*.inc") -> List[Path]:
    """Return the regular files in *source_dir* matching *pattern*, sorted by name."""

    source_dir = Path(source_dir)
    if not source_dir.is_dir():
        raise PublishFailed(f"Каталог с артефактами не найден: {source_dir}")
    return sorted(p for p in source_dir.glob(pattern) if p.is_file())


def _compare(source: Path, target: Path) -> str:
    if not target.exists():
        return ADDED
    if utils.files_equal(source, target):
        return UNCHANGED
    return UPDATED


def publish_artifacts(
    source_dir: Path,
    dest_dir: Path,
    pattern: str = "*.inc",
    allow_empty: bool = False,
) -> List[PublishedArtifact]:
    """Force-copy every file matching *pattern* from *source_dir* into *dest_dir*.

    Destination files with the same name are overwritten whatever they
    contain; the recorded status is informational only. Each file is copied
    atomically. A failure on one file does not stop the others: all failures
    are reported together in a single :class:`PublishFailed` and files that
    were already copied stay in place.

    When nothing matches, the call fails unless *allow_empty* is set, in
    which case it is a no-op returning an empty list.
    """

    source_dir = Path(source_dir)
    dest_dir = Path(dest_dir)
    if not dest_dir.is_dir():
        raise PublishFailed(f"Каталог назначения не существует: {dest_dir}")

    artifacts = collect_artifacts(source_dir, pattern)
    if not artifacts:
        if allow_empty:
            logger.warn(f"Нет файлов '{pattern}' в {source_dir}, публиковать нечего")
            return []
        raise PublishFailed(f"Генератор не создал ни одного файла '{pattern}' в {source_dir}")

    published: List[PublishedArtifact] = []
    failures: List[Tuple[str, str]] = []
    for source in artifacts:
        target = dest_dir / source.name
        try:
            status = _compare(source, target)
            utils.atomic_copy(source, target)
        except OSError as exc:
            logger.err(f"[publisher] Ошибка копирования {source} → {target}: {exc}")
            failures.append((source.name, str(exc)))
            continue
        published.append(PublishedArtifact(name=source.name, status=status))
        logger.info(f"{_STATUS_ICONS[status]} {source.name} → {dest_dir} ({status})")

    if failures:
        raise PublishFailed("Не удалось опубликовать файлы", failures)

    logger.ok(f"📦 Опубликовано файлов: {len(published)}")
    return published
