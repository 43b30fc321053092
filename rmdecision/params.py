"""Lookup helpers for parameter trees loaded from configuration."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any


def get_param(params: Mapping[str, Any] | None, name: str, default: Any = None) -> Any:
    """Return ``params[name]``, following ``/`` into nested mappings, or ``default``."""
    node: Any = params
    for part in name.strip("/").split("/"):
        if not isinstance(node, Mapping) or part not in node:
            return default
        node = node[part]
    return node


def _to_double(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"expected an int or a double, got {value!r}")
    return float(value)


def xml_rpc_get_double(value: Any, field: int | str | None = None, default: float | None = None) -> float:
    """Read a number as a float, optionally from an index or a named member.

    A named member that is absent gives ``default``; with no default it is an error.
    """
    if field is None:
        return _to_double(value)
    if isinstance(field, str):
        if not isinstance(value, Mapping):
            raise TypeError(f"expected a mapping to read {field!r} from, got {value!r}")
        if field not in value:
            if default is None:
                raise KeyError(field)
            return float(default)
        return _to_double(value[field])
    if isinstance(value, (str, bytes)) or not isinstance(value, (Sequence, Mapping)):
        raise TypeError(f"expected an array to index, got {value!r}")
    return _to_double(value[field])