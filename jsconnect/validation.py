"""
Field Validation
================
Presence and non-empty checks shared by both handshake generations.

A single lookup is dispatched over the two collection shapes the protocol
deals with: flat query parameters (``QueryMap``) and nested structured
mappings such as decoded JWT claims.
"""

from collections.abc import Mapping
from functools import singledispatch
from typing import Any

from .exceptions import FieldNotFound, InvalidValue
from .models import QueryMap

_MISSING = object()


@singledispatch
def lookup_field(collection: Any, name: str) -> Any:
    """Return the value stored under ``name`` or a missing sentinel."""
    raise TypeError(type(collection).__name__)


@lookup_field.register
def _(collection: QueryMap, name: str) -> Any:
    # Query parameters are never null, only absent.
    value = collection.get(name)
    return _MISSING if value is None else value


@lookup_field.register
def _(collection: Mapping, name: str) -> Any:
    if name not in collection:
        return _MISSING
    return collection[name]


def require_field(
    name: str,
    collection: Any,
    collection_label: str,
    require_non_empty: bool = True,
) -> Any:
    """
    Look up a required field in a collection.

    Args:
        name: Field name to look up
        collection: A QueryMap or any other mapping
        collection_label: Name of the collection for error messages
        require_non_empty: Also reject ``None`` and ``""`` values

    Returns:
        The field value

    Raises:
        FieldNotFound: The field is absent
        InvalidValue: The value is empty, or the collection is not a mapping
    """
    try:
        value = lookup_field(collection, name)
    except TypeError:
        raise InvalidValue(f"Invalid collection: {collection_label}") from None

    if value is _MISSING:
        raise FieldNotFound(name, collection_label)

    if require_non_empty and (value is None or value == ""):
        raise InvalidValue(f"{collection_label}[{name}] cannot be empty")

    return value


def require_non_empty(value: Any, label: str) -> Any:
    """Reject ``None`` and empty strings."""
    if value is None:
        raise InvalidValue(f"{label} is required.")
    if isinstance(value, str) and value == "":
        raise InvalidValue(f"{label} cannot be empty.")
    return value
