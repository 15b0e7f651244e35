"""State tree helpers.

- clone_state: total, side-effect-free structural deep copy
- is_unchanged: the change test used by Store.select
"""

import copy
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel


_ATOMIC = (str, bytes, int, float, complex, bool, type(None))


def clone_state(value: Any) -> Any:
    """Deep-copy a tree of mappings, sequences and scalars.

    Mappings become dicts, lists and tuples keep their type, sets are
    copied. Pydantic models are deep-copied through the model API and
    anything else falls back to copy.deepcopy.
    """
    if isinstance(value, _ATOMIC):
        return value
    if isinstance(value, Mapping):
        return {key: clone_state(item) for key, item in value.items()}
    if isinstance(value, list):
        return [clone_state(item) for item in value]
    if isinstance(value, tuple):
        if hasattr(value, "_fields"):
            return type(value)(*(clone_state(item) for item in value))
        return tuple(clone_state(item) for item in value)
    if isinstance(value, (set, frozenset)):
        return type(value)(clone_state(item) for item in value)
    if isinstance(value, BaseModel):
        return value.model_copy(deep=True)
    return copy.deepcopy(value)


def is_unchanged(previous: Any, current: Any) -> bool:
    """True when ``current`` is the same object as ``previous`` or an equal scalar.

    Containers are never compared structurally; a new dict with the same
    content counts as a change.
    """
    if previous is current:
        return True
    return (
        type(previous) is type(current)
        and isinstance(current, _ATOMIC)
        and previous == current
    )
