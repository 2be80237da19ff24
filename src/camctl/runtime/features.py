"""
Process-wide vendor feature gates.

Generated modules wrap every non-core catalogue member, control class, and dispatch
arm in ``if _features.enabled("vendor_<name>"):``. The enabled set is read once, when
a generated module is imported, so it must be activated before that import.

Notes:
    - When nothing was activated, the set comes from CamctlSettings.load().features.
    - ``reset`` exists for tests that import generated modules under different gates.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

__all__ = ["activate", "active", "enabled", "reset"]

logger = logging.getLogger(__name__)

_active: frozenset[str] | None = None


def activate(features: Iterable[str]) -> frozenset[str]:
    """Set the enabled feature names for this process."""
    global _active
    _active = frozenset(f.strip() for f in features if f and f.strip())
    logger.debug("features activated: %s", sorted(_active))
    return _active


def active() -> frozenset[str]:
    """Enabled feature names, loading them from settings on first use."""
    if _active is None:
        from camctl.io.config import CamctlSettings

        return activate(CamctlSettings.load().features)
    return _active


def enabled(name: str) -> bool:
    return name in active()


def reset() -> None:
    global _active
    _active = None
