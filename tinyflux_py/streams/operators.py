"""Operators effects are written with.

A curated set of reactivex operators and creation functions, plus
asyncio-aware versions of the four flattening operators. Their projection
may return an Observable, an awaitable or a plain value:

- Observables are flattened as they are
- awaitables run as tasks on the running asyncio loop and their result is
  emitted when it resolves
- plain values are emitted immediately, and None emits nothing

The projection runs when its inner stream is subscribed. concat_map
therefore starts the next request only after the previous inner stream
completed, and exhaust_map never calls the projection for values it drops.

This module shadows the builtins ``map`` and ``filter``; import it as a
module (``from tinyflux_py.streams import operators as ops``).
"""

import asyncio
import inspect
from typing import Any, Callable

import reactivex
from reactivex import Observable, defer, empty, from_iterable, just, of
from reactivex import operators as _rx
from reactivex.scheduler.eventloop import AsyncIOScheduler


Operator = Callable[[Observable], Observable]

map = _rx.map
filter = _rx.filter
distinct_until_changed = _rx.distinct_until_changed
as_observable = _rx.as_observable


def tap(on_next: Callable[[Any], Any]) -> Operator:
    """Call on_next for each value and pass the value through."""
    return _rx.do_action(on_next)


def asyncio_scheduler() -> AsyncIOScheduler:
    """Scheduler bound to the running loop."""
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        raise RuntimeError("tinyflux async operators need a running asyncio event loop") from None
    return AsyncIOScheduler(loop)


def from_awaitable(awaitable: Any) -> Observable:
    """Observable of a single awaited result, scheduled on the running loop.

    Disposing the subscription cancels the task.
    """
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        if inspect.iscoroutine(awaitable):
            awaitable.close()
        raise RuntimeError("tinyflux async operators need a running asyncio event loop") from None
    return reactivex.from_future(asyncio.ensure_future(awaitable, loop=loop))


def to_observable(result: Any) -> Observable:
    if isinstance(result, Observable):
        return result
    if result is None:
        return empty()
    if inspect.isawaitable(result):
        return from_awaitable(result)
    return just(result)


def _inner(project: Callable[[Any], Any]) -> Callable[[Any], Observable]:
    def build(value: Any) -> Observable:
        return defer(lambda _scheduler: to_observable(project(value)))
    return build


def _flatten(project: Callable[[Any], Any], flatten: Operator) -> Operator:
    build = _inner(project)

    def _operator(source: Observable) -> Observable:
        return source.pipe(_rx.map(build), flatten)
    return _operator


def merge_map(project: Callable[[Any], Any]) -> Operator:
    """Run every projection concurrently and emit results as they resolve."""
    return _flatten(project, _rx.merge_all())


def concat_map(project: Callable[[Any], Any]) -> Operator:
    """Run projections one at a time, in arrival order."""
    return _flatten(project, _rx.merge(max_concurrent=1))


def switch_map(project: Callable[[Any], Any]) -> Operator:
    """Cancel the pending projection whenever a new value arrives."""
    return _flatten(project, _rx.switch_latest())


def exhaust_map(project: Callable[[Any], Any]) -> Operator:
    """Ignore new values while a projection is still pending."""
    return _flatten(project, _rx.exclusive())


def delay(seconds: float) -> Operator:
    """Shift each value by ``seconds`` on the running asyncio loop."""
    def _delay(source: Observable) -> Observable:
        return defer(lambda _scheduler: source.pipe(
            _rx.delay(seconds, scheduler=asyncio_scheduler())
        ))
    return _delay


def catch_error(handler: Callable[[Exception], Any]) -> Operator:
    """Replace an error with ``handler(error)``.

    The replacement may be an Observable, a plain value or None (complete
    quietly). As in any reactive pipeline the failed upstream is finished;
    catch inside the projection of a flattening operator to keep a
    long-lived effect alive.
    """
    return _rx.catch(lambda error, _source: to_observable(handler(error)))


__all__ = [
    "Operator",
    "of",
    "just",
    "empty",
    "defer",
    "from_iterable",
    "from_awaitable",
    "to_observable",
    "asyncio_scheduler",
    "map",
    "filter",
    "tap",
    "distinct_until_changed",
    "as_observable",
    "catch_error",
    "merge_map",
    "concat_map",
    "switch_map",
    "exhaust_map",
    "delay",
]
