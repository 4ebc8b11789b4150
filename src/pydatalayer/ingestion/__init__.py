"""Ingestion layer.

Turns raw queued items into :class:`pydatalayer.state.events.Command` objects.
"""

__all__: list[str] = []
