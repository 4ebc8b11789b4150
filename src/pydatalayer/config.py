"""Data layer configuration."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Callable
from typing import Any

from pydatalayer.exceptions import DataLayerConfigError, DataLayerError

DEFAULT_SENSITIVE_KEYS: frozenset[str] = frozenset(
    {
        "password",
        "token",
        "accesstoken",
        "refreshtoken",
        "authorization",
        "cookie",
        "secret",
    }
)


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_int(name: str, value: str) -> int:
    try:
        return int(value.strip())
    except ValueError as exc:
        raise DataLayerConfigError(f"{name} must be an integer, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class DataLayerConfig:
    """Data layer configuration.

    Parameters
    ----------
    trace_enabled : bool
        Emit a DEBUG log line for every dispatched command.
    log_max_string : int
        Strings longer than this are truncated when payloads are logged.
    sensitive_keys : frozenset[str]
        Mapping keys (case-insensitive) whose values are masked in logs.
    on_error : callable or None
        Called with every :class:`~pydatalayer.exceptions.DataLayerError`
        the dispatcher recovers from (invalid items, failing handlers).
        Errors are logged whether or not a callback is set.
    """

    trace_enabled: bool = False
    log_max_string: int = 256
    sensitive_keys: frozenset[str] = DEFAULT_SENSITIVE_KEYS
    on_error: Callable[[DataLayerError], None] | None = None

    def __post_init__(self) -> None:
        if self.log_max_string <= 0:
            raise DataLayerConfigError("log_max_string must be positive")

    @classmethod
    def from_env(cls, **overrides: Any) -> DataLayerConfig:
        """Create configuration from environment variables.

        Reads ``DATALAYER_TRACE_ENABLED``, ``DATALAYER_LOG_MAX_STRING`` and
        ``DATALAYER_SENSITIVE_KEYS`` (comma separated). Explicit keyword
        arguments override environment values.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        if "trace_enabled" not in overrides:
            config_kwargs["trace_enabled"] = _env_bool(env.get("DATALAYER_TRACE_ENABLED"), False)

        max_string_env = env.get("DATALAYER_LOG_MAX_STRING")
        if max_string_env is not None and "log_max_string" not in overrides:
            config_kwargs["log_max_string"] = _env_int("DATALAYER_LOG_MAX_STRING", max_string_env)

        keys_env = env.get("DATALAYER_SENSITIVE_KEYS")
        if keys_env is not None and "sensitive_keys" not in overrides:
            config_kwargs["sensitive_keys"] = frozenset(
                key.strip().lower() for key in keys_env.split(",") if key.strip()
            )

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
