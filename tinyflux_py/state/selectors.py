"""Selectors: pure reads over the whole state.

create_feature_selector reads one top-level slice. create_selector composes
input selectors into a projection and remembers only the most recent call
(memo depth 1): if every input is the same object as last time, the cached
result is returned without running the projection. Alternating between two
states defeats the cache on every call.
"""

from __future__ import annotations

from typing import Any, Callable, List, Optional, Sequence, Tuple

from ..errors import ConfigurationError, SelectorError


Selector = Callable[[Any], Any]

_EMPTY = object()


def _name_of(fn: Callable[..., Any]) -> str:
    return getattr(fn, "__qualname__", None) or getattr(fn, "__name__", None) or repr(fn)


def create_feature_selector(key: str, projection: Optional[Callable[[Any], Any]] = None) -> Selector:
    """Select ``state[key]``, optionally passed through ``projection``."""
    if not isinstance(key, str) or not key:
        raise ConfigurationError(f"Feature key must be a non-empty string, got {key!r}")
    if projection is not None and not callable(projection):
        raise ConfigurationError(f"Feature projection must be callable, got {projection!r}")

    def select_feature(state: Any) -> Any:
        value = state.get(key) if state is not None else None
        return projection(value) if projection is not None else value

    select_feature.__name__ = f"select_{key}"
    return select_feature


class MemoizedSelector:
    """Composed selector that caches its last inputs and result."""

    def __init__(self, inputs: Sequence[Selector], projector: Callable[..., Any]):
        self._inputs: Tuple[Selector, ...] = tuple(inputs)
        self.projector = projector
        self._last_inputs: Optional[List[Any]] = None
        self._last_result: Any = _EMPTY

    def __call__(self, state: Any) -> Any:
        values = [selector(state) for selector in self._inputs]

        if self._last_inputs is not None and self._same_inputs(values):
            return self._last_result

        try:
            result = self.projector(*values)
        except Exception as exc:
            raise SelectorError(_name_of(self.projector)) from exc

        self._last_inputs = values
        self._last_result = result
        return result

    def _same_inputs(self, values: List[Any]) -> bool:
        previous = self._last_inputs
        if len(previous) != len(values):
            return False
        return all(a is b for a, b in zip(previous, values))

    def release(self) -> None:
        """Forget the cached inputs and result."""
        self._last_inputs = None
        self._last_result = _EMPTY

    def __repr__(self) -> str:
        return f"MemoizedSelector({_name_of(self.projector)}, inputs={len(self._inputs)})"


def create_selector(*args: Any) -> MemoizedSelector:
    """Compose input selectors with a final projection.

    Example:
        select_counter = create_feature_selector("counter")
        select_value = create_selector(select_counter, lambda counter: counter["value"])
    """
    if not args:
        raise ConfigurationError("create_selector() requires a projection function")

    *inputs, projector = args
    if not callable(projector):
        raise ConfigurationError(
            f"The last argument to create_selector() must be a projection function, got {projector!r}"
        )
    for selector in inputs:
        if not callable(selector):
            raise ConfigurationError(f"Input selector {selector!r} is not callable")

    return MemoizedSelector(inputs, projector)
