"""Versioned provisioning state for a Kaku user profile."""

from kaku_onboard.state.store import (
    StateStore,
    VersionState,
    WindowGeometry,
    parse_legacy_geometry,
)

__all__ = [
    "StateStore",
    "VersionState",
    "WindowGeometry",
    "parse_legacy_geometry",
]
