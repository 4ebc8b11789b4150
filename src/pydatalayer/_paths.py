"""Key path helpers for nested state.

A path is either a dot-delimited string (``"page.items[0].title"``) or a
sequence of segments (``["page", "items", 0, "title"]``). Integer segments
index into lists; everything else is a mapping key.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any

PathLike = str | Sequence[str | int]
PathSegments = tuple[str | int, ...]

_BRACKET_INDEX = re.compile(r"\[(\d+)\]")


def parse_path(path: PathLike) -> PathSegments:
    if isinstance(path, str):
        segments: list[str | int] = []
        for part in path.split("."):
            head, _, rest = part.partition("[")
            if head:
                segments.append(head)
            if rest:
                segments.extend(int(match) for match in _BRACKET_INDEX.findall("[" + rest))
        return tuple(segments)
    return tuple(path)


def get_path(value: Any, path: PathLike, default: Any = None) -> Any:
    """Resolve *path* in *value*, returning *default* when it does not exist."""
    node = value
    for segment in parse_path(path):
        if isinstance(node, Mapping):
            key = str(segment)
            if key not in node:
                return default
            node = node[key]
        elif isinstance(node, list):
            if isinstance(segment, str) and segment.isdigit():
                segment = int(segment)
            if isinstance(segment, bool) or not isinstance(segment, int) or not 0 <= segment < len(node):
                return default
            node = node[segment]
        else:
            return default
    return node


def touches_path(data: Mapping[str, Any], path: PathLike) -> bool:
    """Return True if applying *data* affects the subtree at *path*.

    That is the case when *data* sets the path itself or something below it,
    or when it deletes (``None``) or wholesale replaces an ancestor.
    """
    node: Any = data
    for segment in parse_path(path):
        if node is None:
            return True
        if not isinstance(node, Mapping):
            return True
        key = str(segment)
        if key not in node:
            return False
        node = node[key]
    return True
