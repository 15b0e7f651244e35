"""
tinyflux-py

A small in-memory reactive state container. Actions are folded through
slice reducers into state, selectors derive memoized views of that state,
and effects observe the action stream and feed new actions back in.
"""

# Errors
from .errors import (
    TinyFluxError,
    ConfigurationError,
    ActionContractError,
    TransitionError,
    ReducerError,
    SelectorError,
    DispatchLoopError,
)

# Streams
from .streams import (
    Observable,
    Disposable,
    CompositeDisposable,
    Subject,
    BehaviorSubject,
    operators,
)

# Actions, reducers and selectors
from .state import (
    Action,
    ActionCreator,
    create_action,
    MISSING,
    ANY_ACTION,
    ReducerDescriptor,
    on,
    create_reducer,
    MemoizedSelector,
    create_feature_selector,
    create_selector,
)

# Engine
from .engine import (
    Store,
    StoreConfig,
    Effect,
    EffectConfig,
    create_effect,
    of_type,
    with_latest_from,
)

# Journal
from .logs import (
    ActionJournal,
    JournalConfig,
    create_journal,
)

from .utils import clone_state, is_unchanged

__all__ = [
    # Errors
    'TinyFluxError',
    'ConfigurationError',
    'ActionContractError',
    'TransitionError',
    'ReducerError',
    'SelectorError',
    'DispatchLoopError',
    # Streams
    'Observable',
    'Disposable',
    'CompositeDisposable',
    'Subject',
    'BehaviorSubject',
    'operators',
    # Actions
    'Action',
    'ActionCreator',
    'create_action',
    # Reducers
    'MISSING',
    'ANY_ACTION',
    'ReducerDescriptor',
    'on',
    'create_reducer',
    # Selectors
    'MemoizedSelector',
    'create_feature_selector',
    'create_selector',
    # Engine
    'Store',
    'StoreConfig',
    'Effect',
    'EffectConfig',
    'create_effect',
    'of_type',
    'with_latest_from',
    # Journal
    'ActionJournal',
    'JournalConfig',
    'create_journal',
    # Utils
    'clone_state',
    'is_unchanged',
]

__version__ = '1.0.0'
