from __future__ import annotations

import pytest

from pydatalayer.config import DEFAULT_SENSITIVE_KEYS, DataLayerConfig
from pydatalayer.exceptions import DataLayerConfigError


def test_defaults() -> None:
    config = DataLayerConfig()

    assert config.trace_enabled is False
    assert config.log_max_string == 256
    assert config.sensitive_keys == DEFAULT_SENSITIVE_KEYS
    assert config.on_error is None


def test_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATALAYER_TRACE_ENABLED", "yes")
    monkeypatch.setenv("DATALAYER_LOG_MAX_STRING", " 64 ")
    monkeypatch.setenv("DATALAYER_SENSITIVE_KEYS", "Email, phone,,")

    config = DataLayerConfig.from_env()

    assert config.trace_enabled is True
    assert config.log_max_string == 64
    assert config.sensitive_keys == frozenset({"email", "phone"})


def test_from_env_overrides_win(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATALAYER_TRACE_ENABLED", "true")
    monkeypatch.setenv("DATALAYER_LOG_MAX_STRING", "64")

    config = DataLayerConfig.from_env(trace_enabled=False, log_max_string=32)

    assert config.trace_enabled is False
    assert config.log_max_string == 32


def test_from_env_unknown_bool_falls_back_to_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATALAYER_TRACE_ENABLED", "maybe")

    assert DataLayerConfig.from_env().trace_enabled is False


def test_from_env_rejects_malformed_int(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATALAYER_LOG_MAX_STRING", "lots")

    with pytest.raises(DataLayerConfigError):
        DataLayerConfig.from_env()


def test_log_max_string_must_be_positive() -> None:
    with pytest.raises(DataLayerConfigError):
        DataLayerConfig(log_max_string=0)
