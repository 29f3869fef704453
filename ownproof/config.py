"""
Verifier configuration.

Freshness is a relying-party policy: nothing here is applied unless a caller
passes a FreshnessPolicy, and the defaults impose no staleness rule.

Environment variables read by ``VerifierConfig.from_env``:
  OWNPROOF_DOMAIN     expected domain (set but empty expects an empty domain)
  OWNPROOF_PURPOSE    expected purpose
  OWNPROOF_MAX_AGE    max certificate age in seconds (enables freshness)
  OWNPROOF_MAX_SKEW   max seconds a timestamp may lie in the future
                      (enables freshness)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_MAX_FUTURE_SKEW = 60


@dataclass(frozen=True)
class FreshnessPolicy:
    max_age: Optional[int] = None       # None = any age accepted
    max_future_skew: int = DEFAULT_MAX_FUTURE_SKEW

    def __post_init__(self):
        if self.max_age is not None and self.max_age < 0:
            raise ValueError("max_age must be non-negative")
        if self.max_future_skew < 0:
            raise ValueError("max_future_skew must be non-negative")


@dataclass(frozen=True)
class VerifierConfig:
    """What a relying party expects of the certificates it accepts."""
    expected_domain: Optional[str] = None
    expected_purpose: Optional[str] = None
    freshness: Optional[FreshnessPolicy] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "VerifierConfig":
        env = os.environ if environ is None else environ

        return cls(
            expected_domain=env.get("OWNPROOF_DOMAIN"),
            expected_purpose=env.get("OWNPROOF_PURPOSE"),
            freshness=freshness_policy(
                _int_or_none(env, "OWNPROOF_MAX_AGE"),
                _int_or_none(env, "OWNPROOF_MAX_SKEW"),
            ),
        )


def freshness_policy(
    max_age: Optional[int] = None,
    max_future_skew: Optional[int] = None,
) -> Optional[FreshnessPolicy]:
    """Policy for the given limits, or None when neither is set."""
    if max_age is None and max_future_skew is None:
        return None
    return FreshnessPolicy(
        max_age=max_age,
        max_future_skew=DEFAULT_MAX_FUTURE_SKEW if max_future_skew is None else max_future_skew,
    )


def _int_or_none(env: Mapping[str, str], name: str) -> Optional[int]:
    raw = env.get(name, "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e
