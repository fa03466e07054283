from __future__ import annotations

import os
import stat
import sys
from pathlib import Path
from typing import Callable, Dict

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


GeneratorFactory = Callable[[str], Path]


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """A ``REL_DIR`` with an empty project tree and packaging layer."""

    (tmp_path / "proj").mkdir()
    (tmp_path / "layer").mkdir()
    return tmp_path


@pytest.fixture
def sync_env(workspace: Path) -> Dict[str, str]:
    return {
        "REL_DIR": str(workspace),
        "TULIP": "proj",
        "META": "layer",
        "BRANCH": "main",
    }


@pytest.fixture
def make_generator(workspace: Path) -> GeneratorFactory:
    """Install a shell stub at ``<REL_DIR>/cargo-bitbake/precompiled/cargo-bitbake``."""

    if os.name == "nt":  # pragma: no cover - stub generators are POSIX shell scripts
        pytest.skip("stub generator requires a POSIX shell")

    def _make(body: str) -> Path:
        tool_dir = workspace / "cargo-bitbake"
        (tool_dir / "templates").mkdir(parents=True, exist_ok=True)
        (tool_dir / "templates" / "bitbake.inc.template").write_text("{name}\n", encoding="utf-8")
        script = tool_dir / "precompiled" / "cargo-bitbake"
        script.parent.mkdir(parents=True, exist_ok=True)
        script.write_text("#!/bin/sh\n" + body + "\n", encoding="utf-8")
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return script

    return _make
