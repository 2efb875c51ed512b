"""
swap_core.config — deal window defaults, address width and numeric caps.

This module centralizes configuration for deals, the ledger simulation and the
registry. It has NO third-party deps and is safe to import very early.

Configuration precedence:
  1) Explicit overrides passed to `load_config(**overrides)`
  2) Environment variables (SWAPDEAL_*)
  3) Hardcoded safe defaults below

Key env vars (case-insensitive where boolean):
  - SWAPDEAL_DEPOSIT_WINDOW_SECS   (int)   default: 86_400   (1 day)
  - SWAPDEAL_SIGNING_WINDOW_SECS   (int)   default: 86_400   (1 day)
  - SWAPDEAL_ADDRESS_LEN           (int)   default: 20
  - SWAPDEAL_MAX_AMOUNT_BITS       (int)   default: 256
  - SWAPDEAL_ALLOW_SELF_DEALING    (bool)  default: false
  - SWAPDEAL_LOG_FORMAT            (json|text) default: auto (json when not a TTY)
  - SWAPDEAL_LOG_LEVEL             (str)   default: INFO

Usage:
    from swap_core.config import load_config
    CFG = load_config()
    window = CFG.deposit_window_secs
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from functools import lru_cache
from typing import Any, Dict, Optional


# ----------------------------- helpers ---------------------------------------

_BOOL_TRUE = {"1", "true", "t", "yes", "y", "on"}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in _BOOL_TRUE


def _env_int(name: str, default: int, *, min_v: int, max_v: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        v = int(raw, 0)
    except ValueError:
        return default
    if v < min_v:
        return min_v
    if v > max_v:
        return max_v
    return v


def _env_str(name: str, default: Optional[str]) -> Optional[str]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


# ------------------------------- config --------------------------------------


@dataclass(frozen=True)
class SwapConfig:
    # Default deal windows (seconds), used when the factory caller omits offsets
    deposit_window_secs: int
    signing_window_secs: int

    # Address width in bytes for parties, assets and derived deal handles
    address_len: int

    # Amounts are unsigned ints bounded to this many bits
    max_amount_bits: int

    # Permit party_a == party_b at creation
    allow_self_dealing: bool

    # Logging
    log_format: Optional[str]
    log_level: str

    @property
    def max_amount(self) -> int:
        return (1 << self.max_amount_bits) - 1

    def as_dict(self) -> Dict[str, Any]:
        return {
            "deposit_window_secs": self.deposit_window_secs,
            "signing_window_secs": self.signing_window_secs,
            "address_len": self.address_len,
            "max_amount_bits": self.max_amount_bits,
            "allow_self_dealing": self.allow_self_dealing,
            "log_format": self.log_format,
            "log_level": self.log_level,
        }


@lru_cache(maxsize=1)
def _from_env() -> SwapConfig:
    day = 24 * 60 * 60
    return SwapConfig(
        deposit_window_secs=_env_int("SWAPDEAL_DEPOSIT_WINDOW_SECS", day, min_v=0, max_v=10 * 365 * day),
        signing_window_secs=_env_int("SWAPDEAL_SIGNING_WINDOW_SECS", day, min_v=0, max_v=10 * 365 * day),
        address_len=_env_int("SWAPDEAL_ADDRESS_LEN", 20, min_v=8, max_v=32),
        max_amount_bits=_env_int("SWAPDEAL_MAX_AMOUNT_BITS", 256, min_v=64, max_v=512),
        allow_self_dealing=_env_bool("SWAPDEAL_ALLOW_SELF_DEALING", False),
        log_format=_env_str("SWAPDEAL_LOG_FORMAT", None),
        log_level=_env_str("SWAPDEAL_LOG_LEVEL", "INFO") or "INFO",
    )


def load_config(**overrides: Any) -> SwapConfig:
    """
    Build a SwapConfig from environment + safe defaults, then apply overrides.

    The env-derived base is cached; call `reset_config_cache()` after changing
    the environment (tests do this via monkeypatch).
    """
    cfg = _from_env()
    if overrides:
        unknown = set(overrides) - set(cfg.as_dict())
        if unknown:
            raise TypeError(f"unknown config fields: {sorted(unknown)}")
        cfg = replace(cfg, **overrides)
    return cfg


def reset_config_cache() -> None:
    _from_env.cache_clear()


__all__ = ["SwapConfig", "load_config", "reset_config_cache"]
