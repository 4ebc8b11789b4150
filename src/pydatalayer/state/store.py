"""In-memory state store.

This is the only component allowed to merge command data into state.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from typing import Any

from pydatalayer._paths import PathLike, get_path
from pydatalayer.state.merge import merge

_logger = logging.getLogger(__name__)


class StateStore:
    """Current/previous pair of nested state dicts.

    ``previous`` is a deep snapshot of ``current`` taken right before the most
    recent successful merge. Readers only ever receive deep copies.
    """

    def __init__(self) -> None:
        self._current: dict[str, Any] = {}
        self._previous: dict[str, Any] = {}

    def merge(self, data: Any) -> bool:
        """Merge *data* into the current state.

        Returns False (and leaves both snapshots untouched) when *data* is not
        a mapping.
        """
        if not isinstance(data, Mapping):
            _logger.warning("Ignoring merge of non-mapping data (%s)", type(data).__name__)
            return False

        previous = copy.deepcopy(self._current)
        merge(self._current, data)
        self._previous = previous
        return True

    def get(self, path: PathLike | None = None) -> Any:
        """Deep copy of the state, or of the value at *path* (None if missing)."""
        if path is None:
            return copy.deepcopy(self._current)
        return copy.deepcopy(get_path(self._current, path))

    @property
    def current(self) -> dict[str, Any]:
        return copy.deepcopy(self._current)

    @property
    def previous(self) -> dict[str, Any]:
        return copy.deepcopy(self._previous)
