"""Hypothesis profiles for the podviz suite, selected with ``HYPOTHESIS_PROFILE``."""

from __future__ import annotations

import os

from hypothesis import HealthCheck, Phase, settings

_GENERATE = (Phase.explicit, Phase.reuse, Phase.generate)

# Ring, rate and navigation properties are pure and fast; no deadline keeps
# the threaded store tests from flaking on loaded machines.
settings.register_profile(
    "default",
    max_examples=60,
    deadline=None,
    derandomize=True,
    print_blob=True,
)

settings.register_profile(
    "dev",
    max_examples=25,
    deadline=None,
    phases=_GENERATE,
)

settings.register_profile(
    "ci",
    max_examples=300,
    deadline=None,
    derandomize=True,
    print_blob=True,
    suppress_health_check=[HealthCheck.too_slow],
    phases=(*_GENERATE, Phase.shrink),
)

default_profile = os.getenv("HYPOTHESIS_PROFILE", "default")
if default_profile not in {"default", "dev", "ci"}:
    default_profile = "default"
settings.load_profile(default_profile)

__all__ = ["default_profile"]
