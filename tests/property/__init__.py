"""
tests.property package bootstrap.

Registers Hypothesis profiles for the deal property suites and selects one:
HYPOTHESIS_PROFILE if set, otherwise "ci" when CI is truthy, else "dev".

- dev    : 100 examples, random
- ci     : 300 examples, derandomized
- stress : 2000 examples, derandomized

Per-test @settings(...) still override max_examples.
"""
from __future__ import annotations

import os

from hypothesis import HealthCheck, settings

settings.register_profile(
    "dev",
    settings(max_examples=100, deadline=None, suppress_health_check=(HealthCheck.too_slow,)),
)
settings.register_profile(
    "ci",
    settings(max_examples=300, deadline=None, derandomize=True, suppress_health_check=(HealthCheck.too_slow,)),
)
settings.register_profile(
    "stress",
    settings(
        max_examples=2000,
        deadline=None,
        derandomize=True,
        suppress_health_check=(HealthCheck.too_slow, HealthCheck.data_too_large),
    ),
)


def _env_truthy(name: str) -> bool:
    return (os.getenv(name) or "").lower() not in ("", "0", "false", "no", "off")


settings.load_profile(os.getenv("HYPOTHESIS_PROFILE") or ("ci" if _env_truthy("CI") else "dev"))
