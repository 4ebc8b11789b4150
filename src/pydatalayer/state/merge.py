"""Delete-aware merge policy.

Merge semantics:
- a ``None`` source value deletes the target key
- mappings merge recursively
- everything else (scalars, lists) replaces the target value wholesale
- ``None`` list elements are dropped rather than kept as holes
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from typing import Any

_logger = logging.getLogger(__name__)


def _merge_into(target: dict[str, Any], source: Mapping[str, Any], path: tuple[str, ...]) -> None:
    for key, value in source.items():
        key = str(key)
        if value is None:
            # Marker; removed by strip_none() once the pass is done.
            target[key] = None
            continue

        existing = target.get(key)
        if isinstance(value, Mapping):
            if not isinstance(existing, dict):
                if existing is not None:
                    _logger.debug(
                        "Merge type mismatch at %s: mapping replaces %s",
                        ".".join((*path, key)),
                        type(existing).__name__,
                    )
                existing = {}
                target[key] = existing
            _merge_into(existing, value, (*path, key))
            continue

        if isinstance(existing, dict):
            _logger.debug(
                "Merge type mismatch at %s: %s replaces mapping",
                ".".join((*path, key)),
                type(value).__name__,
            )
        if isinstance(value, (list, tuple)):
            target[key] = [copy.deepcopy(item) for item in value]
        else:
            target[key] = copy.deepcopy(value)


def strip_none(value: Any) -> Any:
    """Return *value* with every ``None`` removed at any depth."""
    if isinstance(value, Mapping):
        return {k: strip_none(v) for k, v in value.items() if v is not None}
    if isinstance(value, (list, tuple)):
        return [strip_none(item) for item in value if item is not None]
    return value


def merge(target: dict[str, Any], source: Mapping[str, Any]) -> None:
    """Merge *source* into *target* in place."""
    _merge_into(target, source, ())
    cleaned = strip_none(target)
    target.clear()
    target.update(cleaned)
