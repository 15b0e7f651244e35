"""
Effects: action stream transforms with a dispatch flag.

An effect receives the store's multicast action stream and returns an
observable. With dispatch=True (the default) every value it emits is fed back
into Store.dispatch; with dispatch=False the output is only subscribed for
its side effects and discarded.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Optional

from pydantic import BaseModel
from reactivex import Observable

from ..errors import ConfigurationError
from ..state.actions import action_type
from ..streams import operators as ops

if TYPE_CHECKING:
    from .store import Store


EffectSource = Callable[[Observable], Observable]


class EffectConfig(BaseModel):
    """Registration-time configuration of an effect."""

    model_config = {"frozen": True}

    dispatch: bool = True


@dataclass(frozen=True)
class Effect:
    """An effect source paired with its configuration."""
    source: EffectSource
    config: EffectConfig = field(default_factory=EffectConfig)

    @property
    def name(self) -> str:
        return getattr(self.source, "__name__", repr(self.source))

    def __call__(self, actions: Observable) -> Observable:
        return self.source(actions)


def create_effect(
    source: EffectSource,
    config: Optional[EffectConfig] = None,
    *,
    dispatch: bool = True,
) -> Effect:
    """Wrap ``source`` as an Effect.

    Usage:
        load = create_effect(lambda actions: actions.pipe(
            of_type(load_requested),
            ops.concat_map(fetch_and_map_to_loaded),
        ))
        log = create_effect(lambda actions: actions.pipe(ops.tap(print)), dispatch=False)
    """
    if not callable(source):
        raise ConfigurationError(f"Effect must be a function, got {source!r}")
    if config is None:
        config = EffectConfig(dispatch=dispatch)
    return Effect(source=source, config=config)


def as_effect(value: Any) -> Effect:
    """Normalize a plain callable into an Effect with the default config."""
    if isinstance(value, Effect):
        return value
    return create_effect(value)


def of_type(*action_refs: Any) -> ops.Operator:
    """Keep only actions whose type matches one of ``action_refs``."""
    if not action_refs:
        raise ConfigurationError("of_type() requires at least one action reference")
    allowed = frozenset(action_type(ref) for ref in action_refs)
    return ops.filter(lambda action: getattr(action, "type", None) in allowed)


def with_latest_from(store: 'Store', selector: Callable[[Any], Any]) -> ops.Operator:
    """Pair each action with the selector's value on the store's current state."""
    return ops.map(lambda action: (action, selector(store.state)))
