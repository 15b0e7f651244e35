"""tinyflux engine: the store and its effects."""

from .effects import (
    Effect,
    EffectConfig,
    create_effect,
    as_effect,
    of_type,
    with_latest_from,
)
from .store import Store, StoreConfig

__all__ = [
    "Store",
    "StoreConfig",
    "Effect",
    "EffectConfig",
    "create_effect",
    "as_effect",
    "of_type",
    "with_latest_from",
]
