"""Streams for tinyflux-py.

State and actions travel through reactivex subjects: an observer list with
an on_next() broadcast, and for state a last-value slot replayed to each new
subscriber. Subscribing returns a disposable; ``CompositeDisposable``
collects the ones an owning scope cancels together.
"""

from reactivex import Observable
from reactivex.abc import DisposableBase
from reactivex.disposable import CompositeDisposable, Disposable
from reactivex.subject import BehaviorSubject, Subject

from . import operators

__all__ = [
    "Observable",
    "DisposableBase",
    "Disposable",
    "CompositeDisposable",
    "Subject",
    "BehaviorSubject",
    "operators",
]
