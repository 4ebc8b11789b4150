from __future__ import annotations

from typing import Any

from pydatalayer.exceptions import DataLayerError, HandlerError
from pydatalayer.ingestion.classify import classify
from pydatalayer.listeners.models import EventInfo, Listener, StateSnapshots
from pydatalayer.listeners.registry import ListenerRegistry, call_handler, listener_matches
from pydatalayer.state.events import DataLayerEvent, ListenerScope


def _snapshots() -> tuple[dict[str, Any], dict[str, Any]]:
    return {"page": {"title": "Home"}}, {}


def _noop(*_args: Any) -> None:
    return None


def _other(*_args: Any) -> None:
    return None


def _listener(event_name: str, handler: Any = _noop, **kwargs: Any) -> Listener:
    return Listener(event_name=event_name, handler=handler, **kwargs)


class _Tracker:
    def __init__(self) -> None:
        self.calls: list[tuple[Any, ...]] = []

    def on_change(self, *args: Any) -> None:
        self.calls.append(args)


def test_register_deduplicates_identical_listeners() -> None:
    registry = ListenerRegistry(snapshots=_snapshots)

    assert registry.register(_listener("click")) is True
    assert registry.register(_listener("click", scope=ListenerScope.FUTURE)) is False
    assert registry.register(_listener("click", path="page")) is True
    assert registry.register(_listener("click", _other)) is True
    assert len(registry) == 3


def test_register_deduplicates_bound_methods() -> None:
    registry = ListenerRegistry(snapshots=_snapshots)
    tracker = _Tracker()

    assert registry.register(_listener(DataLayerEvent.CHANGE, tracker.on_change)) is True
    assert registry.register(_listener(DataLayerEvent.CHANGE, tracker.on_change)) is False


def test_unregister_by_handler_or_event_name() -> None:
    registry = ListenerRegistry(snapshots=_snapshots)
    registry.register(_listener("click"))
    registry.register(_listener("click", _other))
    registry.register(_listener("click", path="page"))
    registry.register(_listener("scroll"))

    assert registry.unregister("click", _noop) == 2
    assert [listener.handler for listener in registry.listeners("click")] == [_other]
    assert registry.unregister("click") == 1
    assert registry.unregister("click") == 0
    assert [listener.event_name for listener in registry.listeners()] == ["scroll"]


def test_matching_for_data_and_event_commands() -> None:
    registry = ListenerRegistry(snapshots=_snapshots)
    change = _listener(DataLayerEvent.CHANGE)
    generic = _listener(DataLayerEvent.EVENT)
    click = _listener("click")
    scroll = _listener("scroll")
    for listener in (change, generic, click, scroll):
        registry.register(listener)

    data = classify({"data": {"a": 1}})
    click_only = classify({"event": "click"})
    click_with_data = classify({"event": "click", "data": {"a": 1}})

    assert registry.matching(data) == [change]
    assert registry.matching(click_only) == [generic, click]
    assert registry.matching(click_with_data) == [change, generic, click]
    assert registry.matching(classify(_noop)) == []


def test_path_filter() -> None:
    listener = _listener(DataLayerEvent.CHANGE, path="page.title")

    assert listener_matches(listener, classify({"data": {"page": {"title": "A"}}}))
    assert listener_matches(listener, classify({"data": {"page": None}}))
    assert not listener_matches(listener, classify({"data": {"page": {"id": 1}}}))
    assert not listener_matches(_listener("click", path="page"), classify({"event": "click"}))


def test_generic_event_listener_ignores_ready() -> None:
    ready = classify({"event": DataLayerEvent.READY})

    assert not listener_matches(_listener(DataLayerEvent.EVENT), ready)
    assert listener_matches(_listener(DataLayerEvent.READY), ready)


def test_trigger_one_passes_state_to_change_handlers() -> None:
    tracker = _Tracker()
    registry = ListenerRegistry(snapshots=_snapshots)

    result = registry.trigger_one(_listener(DataLayerEvent.CHANGE, tracker.on_change), classify({"data": {}}))

    assert result.ok
    assert tracker.calls == [({"page": {"title": "Home"}}, {})]


def test_trigger_one_passes_event_info_to_event_handlers() -> None:
    tracker = _Tracker()
    registry = ListenerRegistry(snapshots=_snapshots)
    command = classify({"event": "click", "eventInfo": {"x": 1}, "data": {"a": 1}})

    registry.trigger_one(_listener("click", tracker.on_change), command)

    ((event, states),) = tracker.calls
    assert event == EventInfo(name="click", info={"x": 1}, data={"a": 1})
    assert states == StateSnapshots(current={"page": {"title": "Home"}}, previous={})


def test_trigger_one_captures_handler_errors() -> None:
    errors: list[DataLayerError] = []
    registry = ListenerRegistry(snapshots=_snapshots, on_error=errors.append)

    def _boom(*_args: Any) -> None:
        raise RuntimeError("boom")

    result = registry.trigger_one(_listener("click", _boom), classify({"event": "click"}))

    assert not result.ok
    assert isinstance(result.error, HandlerError)
    assert isinstance(result.error.__cause__, RuntimeError)
    assert result.error.event_name == "click"
    assert errors == [result.error]


def test_failing_on_error_callback_is_contained() -> None:
    def _bad_callback(_error: DataLayerError) -> None:
        raise ValueError("callback broke")

    def _boom(*_args: Any) -> None:
        raise RuntimeError("boom")

    registry = ListenerRegistry(snapshots=_snapshots, on_error=_bad_callback)

    result = registry.trigger_one(_listener("click", _boom), classify({"event": "click"}))

    assert not result.ok


def test_call_handler_returns_value() -> None:
    result = call_handler(lambda a, b: a + b, 1, 2)

    assert result.ok
    assert result.value == 3
