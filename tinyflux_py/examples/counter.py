#!/usr/bin/env python3
"""
Counter Example

A counter slice, a log slice that records every action, an asynchronous
effect that simulates an API call, and memoized selectors.
"""

import asyncio
from datetime import datetime, timezone
from typing import Optional

from tinyflux_py import (
    ANY_ACTION,
    ActionJournal,
    CompositeDisposable,
    Store,
    create_action,
    create_effect,
    create_feature_selector,
    create_reducer,
    create_selector,
    of_type,
    on,
    operators as ops,
)


increment = create_action("[Counter] Increment")
decrement = create_action("[Counter] Decrement")
increment_async = create_action("[Counter] Increment Async")
increment_success = create_action("[Counter] Increment Success")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


counter_reducer = create_reducer(
    "counter",
    {"value": 0, "last_update": None},
    on(increment, increment_success, lambda state, action: {
        **state,
        "value": state["value"] + 1,
        "last_update": _now(),
    }),
    on(decrement, lambda state, action: {
        **state,
        "value": state["value"] - 1,
        "last_update": _now(),
    }),
)

log_reducer = create_reducer(
    "log",
    [],
    on(ANY_ACTION, lambda state, action: [*state, f"Action: {action.type}"]),
)


def build_increment_async_effect(api_delay: float):
    async def fake_api_call(action):
        await asyncio.sleep(api_delay)
        return increment_success()

    return create_effect(lambda actions: actions.pipe(
        of_type(increment_async),
        ops.concat_map(fake_api_call),
    ))


select_counter = create_feature_selector("counter")
select_counter_value = create_selector(select_counter, lambda counter: counter["value"])
select_log = create_feature_selector("log")


def build_store(api_delay: float = 0.5) -> Store:
    store = Store()
    store.register_reducers(counter_reducer, log_reducer)
    store.register_effects(build_increment_async_effect(api_delay))
    return store


async def main(api_delay: float = 0.5, journal: Optional[ActionJournal] = None) -> dict:
    """Run the scenario and return the final state."""
    with build_store(api_delay) as store:
        subscriptions = CompositeDisposable()
        if journal is not None:
            subscriptions.add(journal.attach(store))
        subscriptions.add(store.select(select_counter_value).subscribe(
            lambda value: print(f"Counter value is now: {value}")
        ))

        store.dispatch(increment())
        store.dispatch(increment())
        store.dispatch(increment_async())

        await asyncio.sleep(api_delay * 2)

        subscriptions.dispose()
        print("\n--- Action Log ---")
        for line in store.state["log"]:
            print(f"  {line}")
        return store.state


if __name__ == "__main__":
    asyncio.run(main())
