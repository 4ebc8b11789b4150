"""Listener layer.

Holds registered listeners and decides which of them a command triggers.
"""

from pydatalayer.listeners.models import EventInfo, Listener, StateSnapshots
from pydatalayer.listeners.registry import HandlerResult, ListenerRegistry, call_handler, listener_matches

__all__ = [
    "EventInfo",
    "HandlerResult",
    "Listener",
    "ListenerRegistry",
    "StateSnapshots",
    "call_handler",
    "listener_matches",
]
