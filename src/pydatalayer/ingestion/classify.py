"""Classification of raw queue items into commands.

Shapes, checked in priority order (first match wins):

1. ``{"event": str, "eventInfo"?: Any, "data"?: mapping}`` -> event
2. ``{"data": mapping}`` -> data
3. ``{"on": str, "handler": callable, "path"?: str, "scope"?: str}`` -> listener on
4. ``{"off": str, "handler"?: callable, "path"?: str}`` -> listener off
5. a callable -> function
6. anything else -> invalid

A mapping carrying more than one discriminating key is ambiguous and
therefore invalid, as is a mapping whose selected shape fails validation.
Unknown extra keys are ignored.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError

from pydatalayer.state.events import Command, CommandKind, ListenerScope


def _require_str(value: Any) -> Any:
    # No coercion: numbers or bytes are not names.
    if not isinstance(value, str):
        raise ValueError("must be a string")
    return str(value)


Name = Annotated[str, BeforeValidator(_require_str), Field(min_length=1)]
Text = Annotated[str, BeforeValidator(_require_str)]


class _Shape(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, arbitrary_types_allowed=True)


class _EventShape(_Shape):
    event: Name
    event_info: Any = Field(default=None, alias="eventInfo")
    data: dict[str, Any] | None = None


class _DataShape(_Shape):
    data: dict[str, Any]


class _ListenerOnShape(_Shape):
    on: Name
    handler: Callable[..., Any]
    path: Text | None = None
    scope: Any = None


class _ListenerOffShape(_Shape):
    off: Name
    handler: Callable[..., Any] | None = None
    path: Text | None = None


def _describe(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        loc = ".".join(str(item) for item in error.get("loc", ())) or "<item>"
        parts.append(f"{loc}: {error.get('msg', 'invalid')}")
    return "; ".join(parts)


def _invalid(payload: Any, index: int | None, reason: str) -> Command:
    return Command(kind=CommandKind.INVALID, payload=payload, index=index, reason=reason)


def _classify_mapping(payload: Mapping[Any, Any], index: int | None) -> Command:
    values = dict(payload)
    discriminators = [key for key in ("event", "on", "off") if key in values]
    if len(discriminators) > 1:
        return _invalid(payload, index, f"ambiguous item: keys {discriminators} are mutually exclusive")
    if "data" in values and discriminators and discriminators[0] != "event":
        return _invalid(payload, index, f"ambiguous item: 'data' cannot be combined with {discriminators[0]!r}")

    try:
        if "event" in values:
            event = _EventShape.model_validate(values)
            return Command(
                kind=CommandKind.EVENT,
                payload=payload,
                index=index,
                event_name=event.event,
                event_info=event.event_info,
                data=event.data,
            )
        if "data" in values:
            data = _DataShape.model_validate(values)
            return Command(kind=CommandKind.DATA, payload=payload, index=index, data=data.data)
        if "on" in values:
            on = _ListenerOnShape.model_validate(values)
            return Command(
                kind=CommandKind.LISTENER_ON,
                payload=payload,
                index=index,
                event_name=on.on,
                handler=on.handler,
                path=on.path,
                scope=ListenerScope.parse(on.scope),
            )
        if "off" in values:
            off = _ListenerOffShape.model_validate(values)
            return Command(
                kind=CommandKind.LISTENER_OFF,
                payload=payload,
                index=index,
                event_name=off.off,
                handler=off.handler,
                path=off.path,
            )
    except ValidationError as exc:
        return _invalid(payload, index, _describe(exc))

    return _invalid(payload, index, "item has none of the keys 'data', 'event', 'on', 'off'")


def classify(payload: Any, index: int | None = None) -> Command:
    """Classify one raw queue item. Pure; never raises for bad input."""
    if isinstance(payload, Mapping):
        return _classify_mapping(payload, index)
    if callable(payload):
        return Command(kind=CommandKind.FUNCTION, payload=payload, index=index, handler=payload)
    return _invalid(payload, index, f"unsupported item type {type(payload).__name__}")
