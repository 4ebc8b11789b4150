"""Helpers for safe diagnostic logging.

Queued items are arbitrary host values: nested dicts that may carry secrets,
very long strings, and callables. This module renders them into something
short and harmless before they reach a log record.
"""

from __future__ import annotations

from collections.abc import Callable, Collection, Mapping, Sequence
from typing import Any

from pydatalayer.config import DEFAULT_SENSITIVE_KEYS


def describe_callable(value: Callable[..., Any]) -> str:
    name = getattr(value, "__qualname__", None) or getattr(value, "__name__", None)
    if name is None:
        name = type(value).__qualname__
    return f"<callable {name}>"


def redact_for_log(
    value: Any,
    *,
    max_string: int = 256,
    sensitive_keys: Collection[str] = DEFAULT_SENSITIVE_KEYS,
    _depth: int = 0,
) -> Any:
    """Return a redacted copy of *value* suitable for logs."""
    if _depth > 20:
        return "<max-depth>"

    if value is None or isinstance(value, (bool, int, float)):
        return value

    if isinstance(value, str):
        if len(value) > max_string:
            return f"{value[:max_string]}…<truncated>"
        return value

    if isinstance(value, (bytes, bytearray)):
        return f"<bytes:{len(value)}b>"

    if isinstance(value, Mapping):
        redacted: dict[str, Any] = {}
        for k, v in value.items():
            key = str(k)
            if key.lower() in sensitive_keys:
                redacted[key] = "<redacted>"
            else:
                redacted[key] = redact_for_log(
                    v,
                    max_string=max_string,
                    sensitive_keys=sensitive_keys,
                    _depth=_depth + 1,
                )
        return redacted

    if isinstance(value, Sequence):
        return [
            redact_for_log(v, max_string=max_string, sensitive_keys=sensitive_keys, _depth=_depth + 1)
            for v in value
        ]

    if callable(value):
        return describe_callable(value)

    # Fallback: represent unknown objects without dumping internals.
    text = repr(value)
    if len(text) > max_string:
        return f"{text[:max_string]}…<truncated>"
    return text
