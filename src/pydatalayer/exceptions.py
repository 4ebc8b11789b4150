"""Custom exception hierarchy for pydatalayer."""

from __future__ import annotations

from typing import Any


class DataLayerError(Exception):
    """Base exception for all pydatalayer errors."""


class DataLayerConfigError(DataLayerError):
    """Invalid configuration value."""


class InvalidCommandError(DataLayerError):
    """A queued item does not match any supported shape.

    Never raised out of :meth:`pydatalayer.DataLayer.push`; the dispatcher
    logs it and hands it to the configured ``on_error`` callback.
    """

    def __init__(
        self,
        message: str,
        *,
        payload: Any = None,
        reason: str = "",
        index: int | None = None,
    ) -> None:
        self.payload = payload
        self.reason = reason
        self.index = index
        super().__init__(message)


class HandlerError(DataLayerError):
    """A listener handler or a queued function raised.

    The original exception is available as ``__cause__``.
    """

    def __init__(
        self,
        message: str,
        *,
        handler: Any = None,
        event_name: str | None = None,
    ) -> None:
        self.handler = handler
        self.event_name = event_name
        super().__init__(message)
