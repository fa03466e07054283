from __future__ import annotations

import os
from pathlib import Path

import pytest

from recipe_sync import utils
from recipe_sync.errors import PublishFailed
from recipe_sync.publisher import (
    ADDED,
    UNCHANGED,
    UPDATED,
    PublishedArtifact,
    collect_artifacts,
    publish_artifacts,
)


@pytest.fixture
def dirs(tmp_path: Path) -> tuple[Path, Path]:
    source = tmp_path / "proj"
    dest = tmp_path / "layer"
    source.mkdir()
    dest.mkdir()
    return source, dest


def test_publish_overwrites_existing_file(dirs) -> None:
    source, dest = dirs
    (dest / "foo.inc").write_text("A\nold line\n", encoding="utf-8")
    (source / "foo.inc").write_text("B", encoding="utf-8")

    result = publish_artifacts(source, dest)

    assert (dest / "foo.inc").read_text(encoding="utf-8") == "B"
    assert result == [PublishedArtifact(name="foo.inc", status=UPDATED)]


def test_publish_records_comparison_status(dirs) -> None:
    source, dest = dirs
    (source / "a.inc").write_text("new", encoding="utf-8")
    (source / "b.inc").write_text("same", encoding="utf-8")
    (dest / "b.inc").write_text("same", encoding="utf-8")

    result = publish_artifacts(source, dest)

    assert [(a.name, a.status) for a in result] == [("a.inc", ADDED), ("b.inc", UNCHANGED)]
    assert (dest / "a.inc").read_text(encoding="utf-8") == "new"


def test_publish_only_takes_matching_regular_files(dirs) -> None:
    source, dest = dirs
    (source / "deps.inc").write_text("RECIPE=1", encoding="utf-8")
    (source / "app_0.1.0.bb").write_text("bb", encoding="utf-8")
    (source / "Cargo.toml").write_text("[package]", encoding="utf-8")
    (source / "dir.inc").mkdir()

    result = publish_artifacts(source, dest)

    assert [a.name for a in result] == ["deps.inc"]
    assert sorted(p.name for p in dest.iterdir()) == ["deps.inc"]


def test_publish_leaves_no_temporary_files(dirs) -> None:
    source, dest = dirs
    for name in ("x.inc", "y.inc"):
        (source / name).write_bytes(b"\x00binary\xff")

    publish_artifacts(source, dest)

    assert sorted(p.name for p in dest.iterdir()) == ["x.inc", "y.inc"]
    assert (dest / "x.inc").read_bytes() == b"\x00binary\xff"


def test_no_matches_fails_by_default(dirs) -> None:
    source, dest = dirs

    with pytest.raises(PublishFailed):
        publish_artifacts(source, dest)


def test_no_matches_is_noop_when_allowed(dirs) -> None:
    source, dest = dirs
    (dest / "keep.inc").write_text("keep", encoding="utf-8")

    assert publish_artifacts(source, dest, allow_empty=True) == []
    assert (dest / "keep.inc").read_text(encoding="utf-8") == "keep"


def test_missing_destination_fails_without_touching_source(dirs) -> None:
    source, dest = dirs
    (source / "deps.inc").write_text("RECIPE=1", encoding="utf-8")
    dest.rmdir()

    with pytest.raises(PublishFailed):
        publish_artifacts(source, dest)

    assert (source / "deps.inc").read_text(encoding="utf-8") == "RECIPE=1"
    assert not dest.exists()


def test_missing_source_fails(tmp_path: Path) -> None:
    (tmp_path / "layer").mkdir()

    with pytest.raises(PublishFailed):
        publish_artifacts(tmp_path / "proj", tmp_path / "layer")


def test_failures_are_aggregated_and_earlier_copies_kept(dirs, monkeypatch: pytest.MonkeyPatch) -> None:
    source, dest = dirs
    for name in ("a.inc", "b.inc", "c.inc"):
        (source / name).write_text(name, encoding="utf-8")

    real_copy = utils.atomic_copy

    def flaky_copy(src: Path, dst: Path) -> None:
        if Path(src).name == "b.inc":
            raise PermissionError("read-only")
        real_copy(src, dst)

    monkeypatch.setattr(utils, "atomic_copy", flaky_copy)

    with pytest.raises(PublishFailed) as excinfo:
        publish_artifacts(source, dest)

    assert [name for name, _ in excinfo.value.failures] == ["b.inc"]
    assert "b.inc" in str(excinfo.value)
    assert sorted(p.name for p in dest.iterdir()) == ["a.inc", "c.inc"]


def test_atomic_copy_cleans_up_on_failure(dirs, monkeypatch: pytest.MonkeyPatch) -> None:
    source, dest = dirs
    (source / "foo.inc").write_text("B", encoding="utf-8")
    (dest / "foo.inc").write_text("A", encoding="utf-8")

    def broken_replace(src, dst) -> None:
        raise OSError("disk full")

    monkeypatch.setattr(os, "replace", broken_replace)

    with pytest.raises(OSError):
        utils.atomic_copy(source / "foo.inc", dest / "foo.inc")

    assert sorted(p.name for p in dest.iterdir()) == ["foo.inc"]
    assert (dest / "foo.inc").read_text(encoding="utf-8") == "A"


def test_collect_artifacts_is_sorted(dirs) -> None:
    source, _ = dirs
    for name in ("z.inc", "a.inc", "m.inc"):
        (source / name).write_text("", encoding="utf-8")

    assert [p.name for p in collect_artifacts(source)] == ["a.inc", "m.inc", "z.inc"]


@pytest.mark.skipif(os.name == "nt", reason="symlinks need POSIX")
def test_publish_writes_through_symlinked_destination(dirs, tmp_path: Path) -> None:
    source, dest = dirs
    shared = tmp_path / "shared"
    shared.mkdir()
    (shared / "foo.inc").write_text("A", encoding="utf-8")
    (dest / "foo.inc").symlink_to(shared / "foo.inc")
    (source / "foo.inc").write_text("B", encoding="utf-8")

    result = publish_artifacts(source, dest)

    assert (dest / "foo.inc").is_symlink()
    assert (shared / "foo.inc").read_text(encoding="utf-8") == "B"
    assert sorted(p.name for p in shared.iterdir()) == ["foo.inc"]
    assert result == [PublishedArtifact(name="foo.inc", status=UPDATED)]


@pytest.mark.skipif(os.name == "nt", reason="POSIX permission bits")
def test_publish_keeps_existing_destination_mode(dirs) -> None:
    source, dest = dirs
    (source / "foo.inc").write_text("B", encoding="utf-8")
    (source / "foo.inc").chmod(0o644)
    (dest / "foo.inc").write_text("A", encoding="utf-8")
    (dest / "foo.inc").chmod(0o600)

    publish_artifacts(source, dest)

    assert (dest / "foo.inc").stat().st_mode & 0o777 == 0o600
    assert (dest / "foo.inc").read_text(encoding="utf-8") == "B"
