"""Listener registry: registration, matching and triggering."""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pydatalayer._paths import touches_path
from pydatalayer._redact import describe_callable
from pydatalayer.exceptions import DataLayerError, HandlerError
from pydatalayer.listeners.models import EventInfo, Listener, StateSnapshots
from pydatalayer.state.events import Command, CommandKind, DataLayerEvent

_logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class HandlerResult:
    """Outcome of a guarded handler call."""

    value: Any = None
    error: HandlerError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def call_handler(handler: Callable[..., Any], *args: Any, event_name: str | None = None) -> HandlerResult:
    """Invoke *handler*, capturing any exception as a :class:`HandlerError`."""
    try:
        return HandlerResult(value=handler(*args))
    except Exception as exc:
        target = f" for {event_name!r}" if event_name else ""
        error = HandlerError(
            f"Handler {describe_callable(handler)}{target} raised {type(exc).__name__}: {exc}",
            handler=handler,
            event_name=event_name,
        )
        error.__cause__ = exc
        return HandlerResult(error=error)


def listener_matches(listener: Listener, command: Command) -> bool:
    """Return True if *command* should trigger *listener*."""
    if command.kind is CommandKind.DATA:
        matched = listener.event_name == DataLayerEvent.CHANGE
    elif command.kind is CommandKind.EVENT:
        if listener.event_name == DataLayerEvent.CHANGE:
            matched = command.data is not None
        elif listener.event_name == DataLayerEvent.EVENT:
            matched = command.event_name != DataLayerEvent.READY
        else:
            matched = listener.event_name == command.event_name
    else:
        return False

    if not matched:
        return False
    if listener.path is None:
        return True
    return command.data is not None and touches_path(command.data, listener.path)


class ListenerRegistry:
    """Registered listeners, kept in registration order.

    ``snapshots`` returns fresh deep copies of the current and previous state
    each time it is called; every handler gets its own copies.
    """

    def __init__(
        self,
        *,
        snapshots: Callable[[], tuple[dict[str, Any], dict[str, Any]]],
        on_error: Callable[[DataLayerError], None] | None = None,
    ) -> None:
        self._snapshots = snapshots
        self._on_error = on_error
        self._listeners: list[Listener] = []

    def __len__(self) -> int:
        return len(self._listeners)

    def __contains__(self, listener: object) -> bool:
        if not isinstance(listener, Listener):
            return False
        return any(existing.key == listener.key for existing in self._listeners)

    def listeners(self, event_name: str | None = None) -> list[Listener]:
        if event_name is None:
            return list(self._listeners)
        return [listener for listener in self._listeners if listener.event_name == event_name]

    def register(self, listener: Listener) -> bool:
        """Add *listener*; returns False if the same one is already registered."""
        if listener in self:
            _logger.debug(
                "Listener already registered event=%s path=%s handler=%s",
                listener.event_name,
                listener.path,
                describe_callable(listener.handler),
            )
            return False
        self._listeners.append(listener)
        return True

    def unregister(self, event_name: str, handler: Callable[..., Any] | None = None) -> int:
        """Remove listeners for *event_name* (and *handler*, when given).

        Returns the number of listeners removed.
        """
        kept: list[Listener] = []
        removed = 0
        for listener in self._listeners:
            if listener.event_name == event_name and (handler is None or listener.handler == handler):
                removed += 1
            else:
                kept.append(listener)
        self._listeners = kept
        return removed

    def matching(self, command: Command) -> list[Listener]:
        return [listener for listener in self._listeners if listener_matches(listener, command)]

    def trigger_one(self, listener: Listener, command: Command) -> HandlerResult:
        """Call *listener*'s handler for *command*; never raises."""
        current, previous = self._snapshots()
        if listener.binds_change:
            result = call_handler(listener.handler, current, previous, event_name=listener.event_name)
        else:
            event = EventInfo(
                name=command.event_name or listener.event_name,
                info=copy.deepcopy(command.event_info),
                data=copy.deepcopy(command.data),
            )
            states = StateSnapshots(current=current, previous=previous)
            result = call_handler(listener.handler, event, states, event_name=listener.event_name)

        if result.error is not None:
            _logger.error("%s", result.error, exc_info=result.error.__cause__)
            report_error(self._on_error, result.error)
        return result


def report_error(on_error: Callable[[DataLayerError], None] | None, error: DataLayerError) -> None:
    """Pass *error* to the configured callback; a failing callback is only logged."""
    if on_error is None:
        return
    try:
        on_error(error)
    except Exception:
        _logger.debug("on_error callback failed", exc_info=True)
