"""Actions, reducers and selectors for tinyflux-py."""

from .actions import (
    Action,
    ActionCreator,
    create_action,
    action_type,
    ensure_action,
)
from .reducers import (
    MISSING,
    ANY_ACTION,
    HandlerBinding,
    SpecificBinding,
    CatchAllBinding,
    ReducerDescriptor,
    ReducerRegistry,
    on,
    create_reducer,
    fold_state,
)
from .selectors import (
    MemoizedSelector,
    create_feature_selector,
    create_selector,
)

__all__ = [
    # Actions
    "Action",
    "ActionCreator",
    "create_action",
    "action_type",
    "ensure_action",
    # Reducers
    "MISSING",
    "ANY_ACTION",
    "HandlerBinding",
    "SpecificBinding",
    "CatchAllBinding",
    "ReducerDescriptor",
    "ReducerRegistry",
    "on",
    "create_reducer",
    "fold_state",
    # Selectors
    "MemoizedSelector",
    "create_feature_selector",
    "create_selector",
]
