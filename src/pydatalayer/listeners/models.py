"""Listener and handler argument models."""

from __future__ import annotations

from collections.abc import Callable, Hashable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from pydatalayer.state.events import Command, CommandKind, DataLayerEvent, ListenerScope


class Listener(BaseModel):
    """A subscription materialized from a ``listener_on`` command."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    event_name: str
    handler: Callable[..., Any]
    path: str | None = None
    scope: ListenerScope = ListenerScope.ALL

    @classmethod
    def from_command(cls, command: Command) -> Listener:
        if command.kind is not CommandKind.LISTENER_ON or command.handler is None or command.event_name is None:
            raise ValueError(f"cannot build a listener from a {command.kind} command")
        return cls(
            event_name=command.event_name,
            handler=command.handler,
            path=command.path,
            scope=command.scope,
        )

    @property
    def key(self) -> tuple[str, str | None, Hashable]:
        """Identity used for de-duplication; scope is not part of it."""
        return (self.event_name, self.path, self.handler)

    @property
    def binds_change(self) -> bool:
        """Change listeners get ``(current, previous)``; others get event arguments."""
        return self.event_name == DataLayerEvent.CHANGE


class EventInfo(BaseModel):
    """First argument passed to handlers bound to a named event."""

    model_config = ConfigDict(frozen=True)

    name: str
    info: Any = None
    data: dict[str, Any] | None = None


class StateSnapshots(BaseModel):
    """Deep copies of the state around the last merge."""

    model_config = ConfigDict(frozen=True)

    current: dict[str, Any] = Field(default_factory=dict)
    previous: dict[str, Any] = Field(default_factory=dict)
