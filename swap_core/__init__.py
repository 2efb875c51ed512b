"""
swapdeal core package.

Shared substrate for the ledger simulation and the deal state machine: typed
errors, structured logging, configuration, canonical encoding and hashing.

Only re-exports the version here to keep import-time side effects near zero.
"""

from __future__ import annotations

try:
    from importlib.metadata import PackageNotFoundError, version as _pkg_version

    __version__ = _pkg_version("swapdeal")
except PackageNotFoundError:  # pragma: no cover - running from a checkout
    __version__ = "0.0.0+local"


def get_version() -> str:
    """Return the semantic version string for this package."""
    return __version__


__all__ = ["__version__", "get_version"]
