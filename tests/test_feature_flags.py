from __future__ import annotations

import pytest


def _reset_flags(monkeypatch, **env):
    from cold_storage_dashboard.feature_flags import reset_flags_cache

    for k, v in env.items():
        if v is None:
            monkeypatch.delenv(k, raising=False)
        else:
            monkeypatch.setenv(k, str(v))
    reset_flags_cache()


def test_defaults_preserve_registry_schema(monkeypatch):
    from cold_storage_dashboard.feature_flags import get_flags

    _reset_flags(monkeypatch, CSD_FEATURE_UTILIZATION_SCHEMA=None)
    flags = get_flags()
    assert flags.utilization_schema is False
    assert flags.log_decode_fallbacks is False
    assert flags.query_debug is False
    assert flags.record_schema == "registry"


@pytest.mark.parametrize("raw, expected", [("1", True), ("yes", True), ("off", False), ("bogus", False)])
def test_utilization_flag_parsing(monkeypatch, raw, expected):
    from cold_storage_dashboard.feature_flags import get_flags

    _reset_flags(monkeypatch, CSD_FEATURE_UTILIZATION_SCHEMA=raw)
    assert get_flags().utilization_schema is expected


def test_flags_are_cached_until_reset(monkeypatch):
    from cold_storage_dashboard.feature_flags import get_flags, reset_flags_cache

    _reset_flags(monkeypatch, CSD_FEATURE_UTILIZATION_SCHEMA="0")
    assert get_flags().record_schema == "registry"

    monkeypatch.setenv("CSD_FEATURE_UTILIZATION_SCHEMA", "1")
    assert get_flags().record_schema == "registry"
    reset_flags_cache()
    assert get_flags().record_schema == "utilization"


def test_resolve_schema_prefers_explicit_choice(monkeypatch):
    from cold_storage_dashboard.feature_flags import resolve_schema

    _reset_flags(monkeypatch, CSD_FEATURE_UTILIZATION_SCHEMA="1")
    assert resolve_schema() == "utilization"
    assert resolve_schema("Registry") == "registry"
    with pytest.raises(ValueError):
        resolve_schema("legacy")
