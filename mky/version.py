from __future__ import annotations

from importlib import metadata

# Distribution name first, bare import name for ad-hoc installs
_DISTRIBUTIONS = ("mky-engine", "mky")


def tool_version() -> str:
    """Version reported by ``mky --version``; "0.0.0" when running from a source tree."""
    for dist in _DISTRIBUTIONS:
        try:
            return metadata.version(dist)
        except metadata.PackageNotFoundError:
            continue
    return "0.0.0"


__all__ = ["tool_version"]
