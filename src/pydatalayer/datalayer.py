"""Queue-backed data layer: state store plus listener dispatch."""

from __future__ import annotations

import logging
from collections.abc import Callable, MutableSequence
from typing import Any

from pydatalayer._paths import PathLike
from pydatalayer._redact import redact_for_log
from pydatalayer.config import DataLayerConfig
from pydatalayer.exceptions import InvalidCommandError
from pydatalayer.ingestion.classify import classify
from pydatalayer.listeners.models import Listener
from pydatalayer.listeners.registry import ListenerRegistry, call_handler, listener_matches, report_error
from pydatalayer.state.events import Command, CommandKind, DataLayerEvent, ListenerScope
from pydatalayer.state.store import StateStore

_logger = logging.getLogger(__name__)


class DataLayer:
    """Ordered command queue coupled to a state store and listeners.

    Items are appended with :meth:`push`. Each item is classified and fully
    processed before ``push`` returns:

    * ``{"data": {...}}`` merges into the state and fires ``datalayer:change``.
    * ``{"event": name, "eventInfo": ..., "data": {...}}`` optionally merges,
      then fires listeners for *name* and ``datalayer:event``.
    * ``{"on": name, "handler": fn, "path": ..., "scope": ...}`` registers a
      listener, replaying matching history for the ``past``/``all`` scopes.
    * ``{"off": name, "handler": fn}`` removes listeners.
    * a callable is invoked with the data layer.

    Only data and event items stay in the queue. A host-owned list can be
    passed as *queue*; items already in it are processed (in order) at
    construction, after which ``datalayer:ready`` fires once.

    Parameters
    ----------
    queue : MutableSequence or None
        Backing queue. A new list is used when omitted.
    config : DataLayerConfig or None
        Logging and error reporting options.
    """

    def __init__(
        self,
        queue: MutableSequence[Any] | None = None,
        *,
        config: DataLayerConfig | None = None,
    ) -> None:
        self._config = config or DataLayerConfig()
        self._queue: MutableSequence[Any] = queue if queue is not None else []
        self._store = StateStore()
        self._listeners = ListenerRegistry(snapshots=self._snapshots, on_error=self._config.on_error)
        self._ready = False
        # Set while the construction scan runs: the entry being processed and
        # the end of the original entries.
        self._scan_position: int | None = None
        self._scan_end = 0

        self._process_existing()
        self._ready = True
        self._fire_ready()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def items(self) -> MutableSequence[Any]:
        """The live queue of retained data and event items."""
        return self._queue

    @property
    def is_ready(self) -> bool:
        return self._ready

    @property
    def listeners(self) -> list[Listener]:
        """Currently registered listeners, in registration order."""
        return self._listeners.listeners()

    def __len__(self) -> int:
        return len(self._queue)

    def push(self, *items: Any) -> int:
        """Classify and process *items* in order.

        Returns the length of the queue afterwards.
        """
        for item in items:
            command = classify(item, len(self._queue))
            if command.retained:
                self._queue.append(item)
            self._process(command)
        return len(self._queue)

    def add_event_listener(
        self,
        event_name: str,
        handler: Callable[..., Any],
        *,
        path: str | None = None,
        scope: ListenerScope | str = ListenerScope.ALL,
    ) -> None:
        """Register *handler* for *event_name*.

        ``scope`` is ``"past"`` (replay history only), ``"future"`` (new items
        only) or ``"all"`` (both, the default).
        """
        payload = {"on": event_name, "handler": handler, "path": path, "scope": scope}
        self._process(classify(payload, len(self._queue)))

    def remove_event_listener(self, event_name: str, handler: Callable[..., Any] | None = None) -> None:
        """Unregister *handler* for *event_name*, or every listener for it."""
        payload: dict[str, Any] = {"off": event_name}
        if handler is not None:
            payload["handler"] = handler
        self._process(classify(payload, len(self._queue)))

    def get_state(self, path: PathLike | None = None) -> Any:
        """Return a deep copy of the state, or of the value at *path*."""
        return self._store.get(path)

    # ------------------------------------------------------------------
    # Processing
    # ------------------------------------------------------------------

    def _snapshots(self) -> tuple[dict[str, Any], dict[str, Any]]:
        return self._store.current, self._store.previous

    def _loggable(self, value: Any) -> Any:
        return redact_for_log(
            value,
            max_string=self._config.log_max_string,
            sensitive_keys=self._config.sensitive_keys,
        )

    def _process_existing(self) -> None:
        # Only the items present now are scanned; re-entrant pushes append
        # after them and are processed by push() itself.
        self._scan_end = len(self._queue)
        position = 0
        try:
            while position < min(self._scan_end, len(self._queue)):
                self._scan_position = position
                command = classify(self._queue[position], position)
                self._process(command)
                if command.retained:
                    position += 1
                else:
                    del self._queue[position]
                    self._scan_end -= 1
        finally:
            self._scan_position = None

    def _process(self, command: Command) -> None:
        if self._config.trace_enabled:
            _logger.debug(
                "Processing %s item index=%s payload=%s",
                command.kind,
                command.index,
                self._loggable(command.payload),
            )

        if not command.valid:
            self._process_invalid(command)
            return

        kind = command.kind
        if kind is CommandKind.DATA:
            self._process_data(command)
        elif kind is CommandKind.EVENT:
            self._process_event(command)
        elif kind is CommandKind.FUNCTION:
            self._process_function(command)
        elif kind is CommandKind.LISTENER_ON:
            self._process_listener_on(command)
        elif kind is CommandKind.LISTENER_OFF:
            self._process_listener_off(command)

    def _process_data(self, command: Command) -> None:
        if self._store.merge(command.data):
            self._trigger(command)

    def _process_event(self, command: Command) -> None:
        if command.data is not None:
            self._store.merge(command.data)
        self._trigger(command)

    def _process_function(self, command: Command) -> None:
        if command.handler is None:
            raise ValueError("function command without a callable")
        result = call_handler(command.handler, self)
        if result.error is not None:
            _logger.error("%s", result.error, exc_info=result.error.__cause__)
            report_error(self._config.on_error, result.error)

    def _process_listener_on(self, command: Command) -> None:
        listener = Listener.from_command(command)
        if listener.scope is ListenerScope.PAST:
            self._replay(listener, command.index)
        elif listener.scope is ListenerScope.FUTURE:
            self._listeners.register(listener)
        elif self._listeners.register(listener):
            self._replay(listener, command.index)

    def _process_listener_off(self, command: Command) -> None:
        if command.event_name is None:
            raise ValueError("listener_off command without an event name")
        removed = self._listeners.unregister(command.event_name, command.handler)
        _logger.debug("Removed %d listener(s) for event=%s", removed, command.event_name)

    def _process_invalid(self, command: Command) -> None:
        error = InvalidCommandError(
            "The following item cannot be handled by the data layer because it does not have "
            f"a valid format: {self._loggable(command.payload)!r} ({command.reason})",
            payload=command.payload,
            reason=command.reason or "",
            index=command.index,
        )
        _logger.error("%s", error)
        report_error(self._config.on_error, error)

    def _trigger(self, command: Command) -> None:
        for listener in self._listeners.matching(command):
            # A sibling handler may have removed it in the meantime.
            if listener not in self._listeners:
                continue
            self._listeners.trigger_one(listener, command)

    def _replay(self, listener: Listener, index: int | None) -> None:
        """Trigger *listener* for matching queue items before *index*."""
        if listener.event_name == DataLayerEvent.READY:
            if self._ready:
                self._listeners.trigger_one(listener, self._ready_command())
            return

        history = self._history(index)
        replayed = 0
        for position, item in history:
            prior = classify(item, position)
            if prior.retained and listener_matches(listener, prior):
                self._listeners.trigger_one(listener, prior)
                replayed += 1
        _logger.debug(
            "Replayed %d of %d item(s) for listener event=%s scope=%s",
            replayed,
            len(history),
            listener.event_name,
            listener.scope,
        )

    def _history(self, index: int | None) -> list[tuple[int, Any]]:
        """Already processed queue items before *index*, with their positions."""
        size = len(self._queue)
        end = size if index is None else min(index, size)
        positions = list(range(end))
        if self._scan_position is not None:
            # Mid-scan: skip originals the scan has not reached yet, but keep
            # items appended (and processed) by re-entrant pushes.
            positions = [*range(min(end, self._scan_position + 1)), *range(self._scan_end, size)]
        return [(position, self._queue[position]) for position in positions]

    def _ready_command(self) -> Command:
        return Command(kind=CommandKind.EVENT, event_name=DataLayerEvent.READY.value, index=len(self._queue))

    def _fire_ready(self) -> None:
        command = self._ready_command()
        for listener in self._listeners.matching(command):
            self._listeners.trigger_one(listener, command)
