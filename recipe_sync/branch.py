"""CI-scoped branch naming."""
from __future__ import annotations

__all__ = ["CI_BRANCH_SUFFIX", "derive_branch"]

CI_BRANCH_SUFFIX = "-auto-ci"


def derive_branch(base_branch: str, suffix: str = CI_BRANCH_SUFFIX) -> str:
    """Return *base_branch* with the CI suffix appended.

    The value is not validated: ``derive_branch("")`` is ``"-auto-ci"``.
    """

    return base_branch + suffix
