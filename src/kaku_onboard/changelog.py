"""Cumulative "what's new" notes between two config versions.

Notes live in the packaged ``resources/changelog.yaml``, keyed by the config
version that introduced them.
"""

from __future__ import annotations

import importlib.resources
from functools import lru_cache
from typing import Dict, List

import yaml

CURRENT_CONFIG_VERSION = 6


@lru_cache(maxsize=1)
def load_release_notes() -> Dict[int, List[str]]:
    """Return ``{version: [bullet, ...]}`` from the packaged changelog."""
    resource = importlib.resources.files("kaku_onboard") / "resources" / "changelog.yaml"
    data = yaml.safe_load(resource.read_text(encoding="utf-8")) or {}
    return {int(version): [str(item) for item in items or []] for version, items in data.items()}


def announce(
    from_version: int,
    to_version: int = CURRENT_CONFIG_VERSION,
    notes: Dict[int, List[str]] | None = None,
) -> List[str]:
    """Return every bullet for versions in ``(from_version, to_version]``, ascending.

    An inverted range yields an empty list.
    """
    notes = load_release_notes() if notes is None else notes
    bullets: List[str] = []
    for version in sorted(notes):
        if from_version < version <= to_version:
            bullets.extend(notes[version])
    return bullets


__all__ = ["CURRENT_CONFIG_VERSION", "announce", "load_release_notes"]
