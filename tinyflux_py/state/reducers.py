"""Reducer composition and the state fold.

A reducer owns one top-level slice of state, addressed by its key. It is
built from handler bindings:

    counter = create_reducer(
        "counter",
        {"value": 0},
        on(increment, lambda state, action: {**state, "value": state["value"] + 1}),
        on(ANY_ACTION, lambda state, action: state),
    )

Specific bindings are tried in the order given and the first match wins.
The catch-all binding runs only when no specific binding matched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from ..errors import ConfigurationError, ReducerError
from .actions import Action, action_type


logger = logging.getLogger(__name__)

Transition = Callable[[Any, Action], Any]


class _Missing:
    """Marker for a slice that has never been initialized."""

    _instance: Optional['_Missing'] = None

    def __new__(cls) -> '_Missing':
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


class _AnyAction:
    """Marker accepted by on() to build a catch-all binding."""

    def __repr__(self) -> str:
        return "ANY_ACTION"


MISSING = _Missing()
ANY_ACTION = _AnyAction()


@dataclass(frozen=True)
class HandlerBinding:
    """Base for the two binding variants."""
    transition: Transition


@dataclass(frozen=True)
class SpecificBinding(HandlerBinding):
    types: Tuple[str, ...] = ()

    def matches(self, action: Action) -> bool:
        return action.type in self.types


@dataclass(frozen=True)
class CatchAllBinding(HandlerBinding):
    pass


@dataclass(frozen=True)
class ReducerDescriptor:
    """A slice key, its initial value and the transition that updates it."""
    key: str
    initial_value: Any
    transition: Transition


def on(*args: Any) -> HandlerBinding:
    """Bind one or more action references (or ANY_ACTION) to a transition.

    The last argument is the transition ``(slice, action) -> slice``.
    """
    if not args:
        raise ConfigurationError("on() requires action references and a transition")

    *refs, transition = args
    if not callable(transition):
        raise ConfigurationError(
            f"The last argument to on() must be a transition function, got {transition!r}"
        )
    if not refs:
        raise ConfigurationError("on() requires at least one action reference")

    if any(isinstance(ref, _AnyAction) for ref in refs):
        if len(refs) > 1:
            raise ConfigurationError(
                "ANY_ACTION cannot be mixed with other action references in a single on() binding"
            )
        return CatchAllBinding(transition=transition)

    return SpecificBinding(
        transition=transition,
        types=tuple(action_type(ref) for ref in refs),
    )


def create_reducer(key: str, initial_value: Any, *bindings: HandlerBinding) -> ReducerDescriptor:
    """Build the descriptor for the slice stored under ``key``."""
    if not isinstance(key, str) or not key:
        raise ConfigurationError(f"Reducer key must be a non-empty string, got {key!r}")

    specific: List[SpecificBinding] = []
    catch_all: Optional[CatchAllBinding] = None
    for binding in bindings:
        if isinstance(binding, CatchAllBinding):
            if catch_all is not None:
                raise ConfigurationError(
                    f"Reducer '{key}' has more than one ANY_ACTION binding"
                )
            catch_all = binding
        elif isinstance(binding, SpecificBinding):
            specific.append(binding)
        else:
            raise ConfigurationError(
                f"Reducer '{key}' expects bindings built with on(), got {binding!r}"
            )

    def transition(state: Any, action: Action) -> Any:
        if state is MISSING:
            state = initial_value

        for binding in specific:
            if binding.matches(action):
                return binding.transition(state, action)

        if catch_all is not None:
            return catch_all.transition(state, action)

        return state

    transition.__name__ = f"reduce_{key}"
    return ReducerDescriptor(key=key, initial_value=initial_value, transition=transition)


class ReducerRegistry:
    """Ordered, append-only collection of reducer descriptors."""

    def __init__(self) -> None:
        self._reducers: List[ReducerDescriptor] = []
        self._by_key: Dict[str, ReducerDescriptor] = {}

    def add(self, *descriptors: ReducerDescriptor) -> List[ReducerDescriptor]:
        """Append descriptors and return the ones that were not registered yet.

        The whole batch is validated before anything is appended.
        Re-adding the same descriptor object is a no-op; a different
        descriptor for a taken key is a ConfigurationError.
        """
        batch: Dict[str, ReducerDescriptor] = {}
        for descriptor in descriptors:
            if not isinstance(descriptor, ReducerDescriptor):
                raise ConfigurationError(
                    f"Expected a reducer built with create_reducer(), got {descriptor!r}"
                )
            existing = self._by_key.get(descriptor.key, batch.get(descriptor.key))
            if existing is descriptor:
                continue
            if existing is not None:
                raise ConfigurationError(
                    f"A reducer for slice '{descriptor.key}' is already registered"
                )
            batch[descriptor.key] = descriptor

        added = list(batch.values())
        self._reducers.extend(added)
        self._by_key.update(batch)
        return added

    def keys(self) -> List[str]:
        return [reducer.key for reducer in self._reducers]

    def __contains__(self, key: str) -> bool:
        return key in self._by_key

    def __iter__(self) -> Iterator[ReducerDescriptor]:
        return iter(self._reducers)

    def __len__(self) -> int:
        return len(self._reducers)


def fold_state(reducers: ReducerRegistry, state: Dict[str, Any], action: Action) -> Dict[str, Any]:
    """Apply every reducer to its own slice.

    Unchanged slices keep their identity. If no slice changed the same
    ``state`` object is returned, otherwise a shallow copy with only the
    changed slices replaced.
    """
    changed: Dict[str, Any] = {}

    for reducer in reducers:
        current = state.get(reducer.key, MISSING)
        try:
            updated = reducer.transition(current, action)
        except Exception as exc:
            raise ReducerError(reducer.key, action.type) from exc
        if updated is not current:
            changed[reducer.key] = updated

    if not changed:
        return state

    logger.debug("Action '%s' changed slices %s", action.type, list(changed))
    next_state = dict(state)
    next_state.update(changed)
    return next_state
