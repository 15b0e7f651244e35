"""Actions and action creators.

An action is an immutable record of something that happened. Only ``type``
is required; extra keys from a plain mapping are kept on the action and
serialized with it. ``context`` is an opaque reference attached by a host
integration; it is never serialized.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from ..errors import ActionContractError, ConfigurationError


class Action(BaseModel):
    """Immutable action record."""

    model_config = {
        "frozen": True,
        "arbitrary_types_allowed": True,
        "extra": "allow",
    }

    type: str = Field(min_length=1)
    payload: Any = None
    context: Any = Field(default=None, exclude=True, repr=False)

    def with_context(self, context: Any) -> 'Action':
        """Return a copy carrying ``context``."""
        return self.model_copy(update={"context": context})


class ActionCreator:
    """Callable factory for actions of one type.

    Usage:
        increment = create_action("[Counter] Increment")
        store.dispatch(increment())
        store.dispatch(increment({"by": 5}))
        increment.type  # "[Counter] Increment"
    """

    def __init__(self, action_type: str):
        if not isinstance(action_type, str) or not action_type:
            raise ConfigurationError(
                f"Action type must be a non-empty string, got {action_type!r}"
            )
        self.type = action_type

    def __call__(self, payload: Any = None) -> Action:
        return Action(type=self.type, payload=payload)

    def match(self, action: Any) -> bool:
        return getattr(action, "type", None) == self.type

    def __repr__(self) -> str:
        return f"ActionCreator({self.type!r})"


def create_action(action_type: str) -> ActionCreator:
    return ActionCreator(action_type)


def action_type(ref: Any) -> str:
    """Resolve an action reference (str, creator or action) to its type string."""
    value = ref if isinstance(ref, str) else getattr(ref, "type", None)
    if not isinstance(value, str) or not value:
        raise ConfigurationError(
            f"{ref!r} is not an action reference (expected a type string, "
            "an action creator or an action)"
        )
    return value


def ensure_action(value: Any) -> Action:
    """Coerce a dispatched value into an Action or fail with ActionContractError."""
    if isinstance(value, Action):
        return value
    if isinstance(value, Mapping):
        if not isinstance(value.get("type"), str) or not value.get("type"):
            raise ActionContractError(value)
        try:
            return Action.model_validate(dict(value))
        except ValidationError as exc:
            raise ActionContractError(value, reason=str(exc)) from exc
    raise ActionContractError(value)
