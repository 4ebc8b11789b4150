"""Classified queue commands.

Every raw item that reaches the data layer is classified into a
:class:`Command` first. Only the dispatcher acts on commands, and only the
state store merges their data.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class CommandKind(StrEnum):
    DATA = "data"
    EVENT = "event"
    LISTENER_ON = "listener_on"
    LISTENER_OFF = "listener_off"
    FUNCTION = "function"
    INVALID = "invalid"


class ListenerScope(StrEnum):
    PAST = "past"
    FUTURE = "future"
    ALL = "all"

    @classmethod
    def parse(cls, value: Any) -> ListenerScope:
        """Map a user supplied scope to a member; anything unknown is ``ALL``."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                return cls.ALL
        return cls.ALL


class DataLayerEvent(StrEnum):
    """Reserved event names emitted by the data layer itself."""

    CHANGE = "datalayer:change"
    EVENT = "datalayer:event"
    READY = "datalayer:ready"


# Commands that stay in the visible queue after they were processed.
RETAINED_KINDS: frozenset[CommandKind] = frozenset({CommandKind.DATA, CommandKind.EVENT})


class Command(BaseModel):
    """One classified queue item."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: CommandKind
    payload: Any = Field(default=None, description="Original item (as queued)")
    index: int | None = Field(default=None, description="Queue position at classification time")
    data: dict[str, Any] | None = None
    event_name: str | None = None
    event_info: Any = None
    handler: Callable[..., Any] | None = None
    path: str | None = None
    scope: ListenerScope = ListenerScope.ALL
    reason: str | None = Field(default=None, description="Why the item is invalid")

    @property
    def valid(self) -> bool:
        return self.kind is not CommandKind.INVALID

    @property
    def retained(self) -> bool:
        return self.kind in RETAINED_KINDS
