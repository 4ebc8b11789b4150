"""pydatalayer - In-process data layer: ordered command queue, state store and listeners."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pydatalayer")
except PackageNotFoundError:
    __version__ = "0+local"
from pydatalayer.config import DataLayerConfig
from pydatalayer.datalayer import DataLayer
from pydatalayer.exceptions import (
    DataLayerConfigError,
    DataLayerError,
    HandlerError,
    InvalidCommandError,
)
from pydatalayer.ingestion.classify import classify
from pydatalayer.listeners import EventInfo, Listener, ListenerRegistry, StateSnapshots
from pydatalayer.state.events import Command, CommandKind, DataLayerEvent, ListenerScope
from pydatalayer.state.merge import merge
from pydatalayer.state.store import StateStore

__all__ = [
    "__version__",
    "Command",
    "CommandKind",
    "DataLayer",
    "DataLayerConfig",
    "DataLayerConfigError",
    "DataLayerError",
    "DataLayerEvent",
    "EventInfo",
    "HandlerError",
    "InvalidCommandError",
    "Listener",
    "ListenerRegistry",
    "ListenerScope",
    "StateSnapshots",
    "StateStore",
    "classify",
    "merge",
]
