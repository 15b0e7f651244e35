"""Store: the action/state pipeline.

dispatch() pushes an action into one shared, ordered action subject. The
state engine is the first observer of that subject: it folds the action
through every registered reducer and publishes the next state before any
effect sees the action. Effects then observe the same action and may emit
new actions that re-enter dispatch().

Re-entrant dispatch (an effect or reducer calling dispatch() synchronously
while a dispatch is still being delivered) is a hazard: the nested action
is fully processed before the outer action reaches the remaining effects,
so effects can observe actions out of dispatch order. The store logs each
re-entry at DEBUG and raises DispatchLoopError when nesting passes
StoreConfig.max_dispatch_depth. Effects that need ordering guarantees
should emit through an asynchronous operator.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from reactivex import Observable
from reactivex.abc import DisposableBase
from reactivex.disposable import CompositeDisposable
from reactivex.subject import BehaviorSubject, Subject

from ..errors import ConfigurationError, DispatchLoopError, TinyFluxError
from ..state.actions import Action, ensure_action
from ..state.reducers import ReducerDescriptor, ReducerRegistry, fold_state
from ..streams import operators as ops
from ..utils import clone_state, is_unchanged
from .effects import Effect, as_effect


logger = logging.getLogger(__name__)


@dataclass
class StoreConfig:
    """Configuration for a Store instance."""
    clone_initial_state: bool = True
    log_actions: bool = False
    # Each nested dispatch costs a few dozen stack frames.
    max_dispatch_depth: int = 25


class Store:
    """In-memory state container driven by actions.

    Usage:
        store = Store()
        store.register_reducers(counter_reducer)
        store.register_effects(increment_async_effect)
        subscription = store.select(select_count).subscribe(print)
        store.dispatch(increment())
        subscription.dispose()
    """

    def __init__(
        self,
        initial_state: Optional[Mapping] = None,
        config: Optional[StoreConfig] = None,
    ) -> None:
        self.config = config or StoreConfig()

        if initial_state is None:
            initial_state = {}
        if not isinstance(initial_state, Mapping):
            raise ConfigurationError(
                f"Initial state must be a mapping of slice keys, got {type(initial_state).__name__}"
            )
        if self.config.clone_initial_state:
            state = clone_state(initial_state)
        else:
            state = dict(initial_state)

        self._reducers = ReducerRegistry()
        self._effects: List[Effect] = []
        self._effect_subscriptions = CompositeDisposable()
        self._context: Any = None
        self._depth = 0
        self._closed = False

        self._actions: Subject = Subject()
        self._state: BehaviorSubject = BehaviorSubject(state)
        # Must stay the first observer so state is folded before effects run.
        self._engine = self._actions.subscribe(self._reduce)

    # ─────────────────────────────────────────────────────────────────────
    # Read access
    # ─────────────────────────────────────────────────────────────────────

    @property
    def state(self) -> Dict[str, Any]:
        """The current state container. Never mutate it in place."""
        return self._state.value

    @property
    def state_stream(self) -> Observable:
        """Every published state container, replaying the current one."""
        return self._state.pipe(ops.as_observable())

    @property
    def actions(self) -> Observable:
        """The raw multicast action stream."""
        return self._actions.pipe(ops.as_observable())

    @property
    def context(self) -> Any:
        return self._context

    @property
    def reducer_keys(self) -> List[str]:
        return self._reducers.keys()

    @property
    def closed(self) -> bool:
        return self._closed

    # ─────────────────────────────────────────────────────────────────────
    # Registration
    # ─────────────────────────────────────────────────────────────────────

    def register_reducers(self, *descriptors: ReducerDescriptor) -> None:
        """Append reducers and back-fill slices that are not in the state yet.

        Slices already present keep their value. If any slice was added the
        new container is published immediately, without a dispatch.
        """
        added = self._reducers.add(*descriptors)
        if not added:
            return

        current = self._state.value
        missing = {
            descriptor.key: descriptor.initial_value
            for descriptor in added
            if descriptor.key not in current
        }
        logger.debug(
            "Registered reducers %s (initialized %s)",
            [descriptor.key for descriptor in added],
            list(missing),
        )
        if missing:
            next_state = dict(current)
            next_state.update(missing)
            self._state.on_next(next_state)

    def register_effects(self, *effects: Any) -> List[DisposableBase]:
        """Subscribe each effect to the action stream for the store's lifetime.

        Plain callables are treated as effects with dispatch=True. Returns
        the subscriptions so an owner can cancel them early. An effect whose
        stream errors is logged and stops; the store keeps running.
        """
        prepared = [as_effect(effect) for effect in effects]
        subscriptions = []

        for effect in prepared:
            output = effect(self.actions)
            if not isinstance(output, Observable):
                raise ConfigurationError(
                    f"Effect '{effect.name}' must return an Observable, got {type(output).__name__}"
                )

            on_error = self._effect_failed(effect)
            if effect.config.dispatch:
                subscription = output.pipe(ops.map(self._with_context)).subscribe(
                    self.dispatch, on_error
                )
            else:
                subscription = output.subscribe(on_error=on_error)

            self._effects.append(effect)
            self._effect_subscriptions.add(subscription)
            subscriptions.append(subscription)
            logger.debug("Registered effect '%s' (dispatch=%s)", effect.name, effect.config.dispatch)

        return subscriptions

    def set_context(self, context: Any) -> None:
        """Record a context merged into effect output that has none of its own."""
        self._context = context

    # ─────────────────────────────────────────────────────────────────────
    # Action pipeline
    # ─────────────────────────────────────────────────────────────────────

    def dispatch(self, action: Any) -> None:
        """Push an action through reducers, then effects.

        Reducer failures propagate as ReducerError and leave the last
        successfully published state in place.
        """
        if self._closed:
            raise TinyFluxError("Cannot dispatch on a store that has been torn down")

        action = ensure_action(action)

        if self._depth >= self.config.max_dispatch_depth:
            raise DispatchLoopError(action.type, self._depth + 1)
        if self._depth:
            logger.debug("Re-entrant dispatch of '%s' at depth %d", action.type, self._depth)
        if self.config.log_actions:
            logger.info("Dispatching '%s'", action.type)

        self._depth += 1
        try:
            self._actions.on_next(action)
        finally:
            self._depth -= 1

    def select(self, selector: Callable[[Dict[str, Any]], Any]) -> Observable:
        """Observable of ``selector(state)``, emitted when the selection changes.

        A selection counts as unchanged when it is the same object as the
        previous one, or an equal scalar (str, number, bool, None). Containers
        are compared by identity only, so selectors should return slices or
        memoized projections rather than fresh copies.
        """
        if not callable(selector):
            raise ConfigurationError(f"Selector must be callable, got {selector!r}")
        return self._state.pipe(
            ops.map(selector),
            ops.distinct_until_changed(comparer=is_unchanged),
        )

    def _reduce(self, action: Action) -> None:
        previous = self._state.value
        next_state = fold_state(self._reducers, previous, action)
        if next_state is not previous:
            self._state.on_next(next_state)

    def _with_context(self, value: Any) -> Action:
        action = ensure_action(value)
        if self._context is not None and action.context is None:
            return action.with_context(self._context)
        return action

    def _effect_failed(self, effect: Effect) -> Callable[[Exception], None]:
        def on_error(error: Exception) -> None:
            logger.error("Effect '%s' failed and stopped: %s", effect.name, error, exc_info=error)
        return on_error

    # ─────────────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────────────

    def teardown(self) -> None:
        """Cancel effect subscriptions and complete both streams.

        The last state stays readable through ``state``.
        """
        if self._closed:
            return
        self._closed = True
        self._effect_subscriptions.dispose()
        self._engine.dispose()
        self._actions.on_completed()
        self._state.on_completed()
        logger.debug("Store torn down (%d effects cancelled)", len(self._effects))

    def __enter__(self) -> 'Store':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.teardown()
