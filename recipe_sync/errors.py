"""Error taxonomy for the sync pipeline.

Every error knows the pipeline stage it belongs to and the process exit code
the CLI reports for it, so CI logs can tell the stages apart.
"""
from __future__ import annotations

from typing import Optional, Sequence, Tuple

__all__ = [
    "GeneratorFailed",
    "MissingConfiguration",
    "PublishFailed",
    "SettingsError",
    "SyncError",
]


class SyncError(Exception):
    """Base class for failures of a pipeline stage."""

    stage = "sync"
    exit_code = 1


class SettingsError(SyncError):
    """Raised when the tool settings file is malformed."""

    stage = "settings"
    exit_code = 2


class MissingConfiguration(SyncError):
    """Raised when a required environment variable is absent or empty."""

    stage = "config"
    exit_code = 2

    def __init__(self, variable: str) -> None:
        self.variable = variable
        super().__init__(f"Не задана обязательная переменная окружения: {variable}")


class GeneratorFailed(SyncError):
    """Raised when the recipe generator could not run or exited non-zero."""

    stage = "generator"
    exit_code = 3

    def __init__(self, message: str, returncode: Optional[int] = None) -> None:
        self.returncode = returncode
        if returncode is not None:
            message = f"{message} (код выхода {returncode})"
        super().__init__(message)


class PublishFailed(SyncError):
    """Raised when generated artifacts could not be published."""

    stage = "publish"
    exit_code = 4

    def __init__(self, message: str, failures: Sequence[Tuple[str, str]] = ()) -> None:
        self.failures = list(failures)
        if self.failures:
            details = "; ".join(f"{name}: {reason}" for name, reason in self.failures)
            message = f"{message}: {details}"
        super().__init__(message)
