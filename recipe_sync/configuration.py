"""Configuration for a sync run.

Two sources are combined here:

* the *project* configuration, read once from the process environment
  (``REL_DIR``, ``TULIP``, ``META``, ``CARGO_BITBAKE`` and ``BRANCH``) and
  turned into an immutable :class:`SyncConfig` with absolute paths;
* the *tool* settings, read from ``config/config.yaml`` (or the file named by
  ``RECIPE_SYNC_CONFIG``) into an immutable :class:`ToolSettings`.

Resolving the project configuration has no side effects: nothing is created
and nothing is checked on disk, so a missing variable always fails before the
generator runs or the destination is touched.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

from recipe_sync import logger
from recipe_sync.branch import CI_BRANCH_SUFFIX
from recipe_sync.errors import MissingConfiguration, SettingsError

__all__ = [
    "DEFAULT_GENERATOR_DIR",
    "REQUIRED_VARIABLES",
    "SettingsRepository",
    "SyncConfig",
    "ToolSettings",
    "load_settings",
    "resolve_config",
]

REQUIRED_VARIABLES = ("REL_DIR", "TULIP", "META", "BRANCH")
DEFAULT_GENERATOR_DIR = "cargo-bitbake"
SETTINGS_ENV_VAR = "RECIPE_SYNC_CONFIG"

_DEFAULT_SCRIPT_DIR = Path(__file__).resolve().parent.parent
_CONFIG_FILENAME = "config.yaml"


def _as_dict(data: Any) -> Dict[str, Any]:
    """Return a shallow copy of *data* if it is a mapping."""
    if isinstance(data, Mapping):
        return dict(data)
    return {}


@dataclass(frozen=True)
class SyncConfig:
    """Fully resolved project configuration for one run."""

    rel_dir: Path
    tulip_path: Path
    meta_path: Path
    generator_path: Path
    base_branch: str


def _require(environ: Mapping[str, str], name: str) -> str:
    value = environ.get(name, "")
    if not value:
        raise MissingConfiguration(name)
    return value


def resolve_config(environ: Optional[Mapping[str, str]] = None) -> SyncConfig:
    """Build a :class:`SyncConfig` from *environ* (defaults to ``os.environ``)."""

    if environ is None:
        environ = os.environ

    values = {name: _require(environ, name) for name in REQUIRED_VARIABLES}
    generator_dir = environ.get("CARGO_BITBAKE") or DEFAULT_GENERATOR_DIR

    rel_dir = Path(os.path.abspath(values["REL_DIR"]))
    return SyncConfig(
        rel_dir=rel_dir,
        tulip_path=rel_dir / values["TULIP"],
        meta_path=rel_dir / values["META"],
        generator_path=rel_dir / generator_dir,
        base_branch=values["BRANCH"],
    )


def _expect(value: Any, kind: type | Tuple[type, ...], key: str) -> Any:
    # bool is an int subclass, keep it out of numeric settings
    if isinstance(value, bool) and kind is not bool:
        raise SettingsError(f"Некорректное значение настройки '{key}': {value!r}")
    if not isinstance(value, kind):
        raise SettingsError(f"Некорректное значение настройки '{key}': {value!r}")
    return value


def _section(raw: Mapping[str, Any], name: str) -> Dict[str, Any]:
    data = raw.get(name)
    if data is not None and not isinstance(data, Mapping):
        raise SettingsError(f"Секция '{name}' имеет некорректный формат: {data!r}")
    return _as_dict(data)


@dataclass(frozen=True)
class ToolSettings:
    """Tool level settings; every field has a built-in default."""

    branch_suffix: str = CI_BRANCH_SUFFIX
    executable: str = "precompiled/cargo-bitbake"
    templates: Tuple[str, ...] = ("templates/bitbake.inc.template",)
    timeout: Optional[float] = None
    quiet: bool = False
    pattern: str = "*.inc"
    allow_empty: bool = False
    log_dir: Optional[Path] = None
    source: Optional[Path] = field(default=None, compare=False)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], source: Optional[Path] = None) -> "ToolSettings":
        branch = _section(raw, "branch")
        generator = _section(raw, "generator")
        publish = _section(raw, "publish")
        logging_cfg = _section(raw, "logging")
        defaults = cls()

        templates = generator.get("templates", list(defaults.templates))
        if isinstance(templates, str):
            templates = [templates]
        _expect(templates, list, "generator.templates")
        if not templates:
            raise SettingsError("Список 'generator.templates' не должен быть пустым")
        for template in templates:
            _expect(template, str, "generator.templates")

        timeout = generator.get("timeout")
        if timeout is not None:
            timeout = float(_expect(timeout, (int, float), "generator.timeout"))
            if timeout <= 0:
                raise SettingsError(f"Некорректное значение настройки 'generator.timeout': {timeout!r}")

        log_dir = logging_cfg.get("dir")
        if log_dir is not None:
            log_dir = Path(_expect(log_dir, str, "logging.dir"))

        return cls(
            branch_suffix=_expect(branch.get("suffix", defaults.branch_suffix), str, "branch.suffix"),
            executable=_expect(generator.get("executable", defaults.executable), str, "generator.executable"),
            templates=tuple(templates),
            timeout=timeout,
            quiet=_expect(generator.get("quiet", defaults.quiet), bool, "generator.quiet"),
            pattern=_expect(publish.get("pattern", defaults.pattern), str, "publish.pattern"),
            allow_empty=_expect(publish.get("allow_empty", defaults.allow_empty), bool, "publish.allow_empty"),
            log_dir=log_dir,
            source=source,
        )

    @classmethod
    def from_path(cls, config_path: Path) -> "ToolSettings":
        try:
            with config_path.open("r", encoding="utf-8") as fh:
                data = yaml.safe_load(fh) or {}
        except FileNotFoundError:
            logger.debug(f"[configuration] Файл настроек не найден, используются значения по умолчанию: {config_path}")
            return cls()
        except yaml.YAMLError as exc:
            raise SettingsError(f"Ошибка разбора YAML {config_path}: {exc}") from exc
        except OSError as exc:
            raise SettingsError(f"Ошибка при чтении {config_path}: {exc}") from exc

        if not isinstance(data, Mapping):
            raise SettingsError(f"Некорректный формат YAML: {config_path}")
        return cls.from_mapping(data, source=config_path)


class SettingsRepository:
    """Lazy settings loader with a small in-memory cache."""

    def __init__(self, script_dir: Path, filename: str = _CONFIG_FILENAME) -> None:
        self._script_dir = Path(script_dir)
        self._filename = filename
        self._cache: ToolSettings | None = None

    @property
    def config_path(self) -> Path:
        return self._script_dir / "config" / self._filename

    def load(self) -> ToolSettings:
        if self._cache is None:
            self._cache = ToolSettings.from_path(self.config_path)
        return self._cache


_default_repository = SettingsRepository(_DEFAULT_SCRIPT_DIR)


def load_settings(
    config_path: Path | None = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ToolSettings:
    """Load tool settings from *config_path*, ``RECIPE_SYNC_CONFIG`` or the repo default."""

    if environ is None:
        environ = os.environ
    if config_path is None and environ.get(SETTINGS_ENV_VAR):
        config_path = Path(environ[SETTINGS_ENV_VAR])
    if config_path is None:
        return _default_repository.load()
    return ToolSettings.from_path(Path(config_path))
