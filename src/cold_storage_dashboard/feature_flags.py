from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    v = str(raw).strip().lower()
    if v in {"1", "true", "t", "yes", "y", "on"}:
        return True
    if v in {"0", "false", "f", "no", "n", "off"}:
        return False
    return default


@dataclass(frozen=True)
class FeatureFlags:
    """Central feature flag registry.

    Two record shapes exist for the same survey table. Neither is
    authoritative, so the shape is an explicit switch rather than a guess.

    Defaults MUST preserve current behavior (registry shape, quiet decoding).
    """

    utilization_schema: bool
    log_decode_fallbacks: bool
    query_debug: bool

    @classmethod
    def from_env(cls) -> "FeatureFlags":
        return cls(
            utilization_schema=_env_bool("CSD_FEATURE_UTILIZATION_SCHEMA", False),
            log_decode_fallbacks=_env_bool("CSD_FEATURE_LOG_DECODE_FALLBACKS", False),
            query_debug=_env_bool("CSD_FEATURE_QUERY_DEBUG", False),
        )

    @property
    def record_schema(self) -> str:
        return "utilization" if self.utilization_schema else "registry"


@lru_cache(maxsize=1)
def get_flags() -> FeatureFlags:
    return FeatureFlags.from_env()


def reset_flags_cache() -> None:
    """Test helper to force env re-read."""

    get_flags.cache_clear()


def resolve_schema(explicit: Optional[str] = None) -> str:
    """Pick the record schema: an explicit choice wins over the env flag."""

    name = (explicit or "").strip().lower()
    if not name:
        return get_flags().record_schema
    if name not in ("registry", "utilization"):
        raise ValueError(f"Unknown record schema: {explicit}")
    return name
