"""Tests for the Store and its state engine."""

import pytest

from .effects import create_effect
from .store import Store, StoreConfig
from ..errors import (
    ActionContractError,
    ConfigurationError,
    DispatchLoopError,
    ReducerError,
    SelectorError,
    TinyFluxError,
)
from ..state import (
    ANY_ACTION,
    Action,
    create_action,
    create_feature_selector,
    create_reducer,
    create_selector,
    on,
)
from ..streams import operators as ops


increment = create_action("INC")
decrement = create_action("DEC")
noop = create_action("NOOP")


def counter_reducer():
    return create_reducer(
        "counter",
        {"value": 0},
        on(increment, lambda state, action: {**state, "value": state["value"] + 1}),
        on(decrement, lambda state, action: {**state, "value": state["value"] - 1}),
    )


def collect(stream):
    received = []
    stream.subscribe(received.append)
    return received


class TestConstruction:
    def test_default_state_is_empty(self):
        assert Store().state == {}

    def test_initial_state_is_deep_cloned(self):
        initial = {"settings": {"theme": "dark", "tags": ["a"]}}
        store = Store(initial)
        initial["settings"]["tags"].append("b")
        assert store.state == {"settings": {"theme": "dark", "tags": ["a"]}}
        assert store.state["settings"] is not initial["settings"]

    def test_clone_can_be_disabled(self):
        settings = {"theme": "dark"}
        store = Store({"settings": settings}, StoreConfig(clone_initial_state=False))
        assert store.state["settings"] is settings

    def test_non_mapping_initial_state_rejected(self):
        with pytest.raises(ConfigurationError):
            Store(["not", "a", "mapping"])


class TestRegisterReducers:
    def test_back_fills_initial_values(self):
        store = Store()
        store.register_reducers(counter_reducer())
        assert store.state == {"counter": {"value": 0}}

    def test_back_fill_publishes_without_dispatch(self):
        store = Store()
        states = collect(store.state_stream)
        store.register_reducers(counter_reducer())
        assert states == [{}, {"counter": {"value": 0}}]

    def test_existing_slice_is_kept(self):
        store = Store({"counter": {"value": 41}})
        store.register_reducers(counter_reducer())
        store.dispatch(increment())
        assert store.state["counter"] == {"value": 42}

    def test_second_registration_leaves_first_slice_alone(self):
        store = Store()
        store.register_reducers(create_reducer("a", {"name": "a"}))
        slice_a = store.state["a"]
        store.register_reducers(create_reducer("b", [1, 2]))
        assert store.state == {"a": {"name": "a"}, "b": [1, 2]}
        assert store.state["a"] is slice_a

    def test_registering_same_descriptor_twice_is_noop(self):
        store = Store()
        reducer = counter_reducer()
        store.register_reducers(reducer)
        before = store.state
        store.register_reducers(reducer)
        assert store.state is before
        assert store.reducer_keys == ["counter"]

    def test_conflicting_key_rejected(self):
        store = Store()
        store.register_reducers(counter_reducer())
        with pytest.raises(ConfigurationError):
            store.register_reducers(counter_reducer())


class TestDispatch:
    def test_folds_actions_in_order(self):
        store = Store()
        store.register_reducers(counter_reducer())
        store.dispatch(increment())
        store.dispatch(increment())
        store.dispatch(decrement())
        assert store.state["counter"]["value"] == 1

    def test_accepts_mapping_actions(self):
        store = Store()
        store.register_reducers(counter_reducer())
        store.dispatch({"type": "INC"})
        assert store.state["counter"]["value"] == 1

    @pytest.mark.parametrize("value", [None, "INC", {"payload": 1}, 5])
    def test_rejects_non_actions(self, value):
        store = Store()
        with pytest.raises(ActionContractError):
            store.dispatch(value)

    def test_slice_isolation(self):
        store = Store()
        store.register_reducers(
            counter_reducer(),
            create_reducer("log", [], on(noop, lambda state, action: [*state, action.type])),
        )
        log_before = store.state["log"]
        store.dispatch(increment())
        assert store.state["log"] is log_before

    def test_noop_keeps_container_identity(self):
        store = Store()
        store.register_reducers(counter_reducer())
        before = store.state
        store.dispatch(noop())
        assert store.state is before

    def test_reducer_error_keeps_previous_state(self):
        def explode(state, action):
            raise RuntimeError("reducer failed")

        store = Store()
        store.register_reducers(counter_reducer(), create_reducer("bad", 0, on(decrement, explode)))
        store.dispatch(increment())
        good_state = store.state

        with pytest.raises(ReducerError) as exc_info:
            store.dispatch(decrement())
        assert exc_info.value.slice_key == "bad"
        assert store.state is good_state

        store.dispatch(increment())
        assert store.state["counter"]["value"] == 2

    def test_actions_stream_sees_every_action(self):
        store = Store()
        actions = collect(store.actions)
        store.dispatch(increment())
        store.dispatch(noop())
        assert [a.type for a in actions] == ["INC", "NOOP"]


class TestSelect:
    def test_replays_current_value(self):
        store = Store()
        store.register_reducers(counter_reducer())
        store.dispatch(increment())
        values = collect(store.select(lambda s: s["counter"]["value"]))
        assert values == [1]

    def test_noop_dispatch_emits_nothing(self):
        store = Store()
        store.register_reducers(counter_reducer())
        values = collect(store.select(lambda s: s["counter"]))
        store.dispatch(noop())
        assert len(values) == 1

    def test_unrelated_change_filtered(self):
        store = Store()
        store.register_reducers(counter_reducer(), create_reducer("log", [], on(ANY_ACTION, lambda s, a: [*s, a.type])))
        values = collect(store.select(create_feature_selector("counter")))
        store.dispatch(noop())
        assert len(values) == 1

    def test_memoized_selector(self):
        calls = []

        def project(counter):
            calls.append(counter)
            return counter["value"]

        store = Store()
        store.register_reducers(counter_reducer(), create_reducer("log", [], on(noop, lambda s, a: [*s, 1])))
        values = collect(store.select(create_selector(create_feature_selector("counter"), project)))
        store.dispatch(noop())
        store.dispatch(increment())
        assert values == [0, 1]
        assert len(calls) == 2

    def test_dispose_stops_emissions(self):
        store = Store()
        store.register_reducers(counter_reducer())
        values = []
        sub = store.select(lambda s: s["counter"]["value"]).subscribe(values.append)
        sub.dispose()
        sub.dispose()
        store.dispatch(increment())
        assert values == [0]

    def test_selector_error_on_subscribe(self):
        def broken(counter):
            raise ValueError("bad selector")

        store = Store()
        store.register_reducers(counter_reducer())
        errors = []
        store.select(create_selector(create_feature_selector("counter"), broken)).subscribe(
            print, errors.append
        )
        assert isinstance(errors[0], SelectorError)

    def test_selector_error_on_dispatch(self):
        store = Store()
        store.register_reducers(counter_reducer())
        errors = []
        store.select(lambda s: 1 // (1 - s["counter"]["value"])).subscribe(lambda v: None, errors.append)
        store.dispatch(increment())
        assert isinstance(errors[0], ZeroDivisionError)
        assert store.state["counter"]["value"] == 1

    def test_equal_but_rebuilt_value_is_a_change(self):
        store = Store()
        store.register_reducers(counter_reducer(), create_reducer("log", [], on(noop, lambda s, a: [*s, 1])))
        values = collect(store.select(lambda s: dict(s["counter"])))
        store.dispatch(noop())
        assert len(values) == 2
        assert values[0] == values[1]

    def test_equal_scalars_are_not_a_change(self):
        store = Store()
        store.register_reducers(counter_reducer())
        values = collect(store.select(lambda s: s["counter"]["value"] > 5))
        store.dispatch(increment())
        store.dispatch(increment())
        assert values == [False]

    def test_non_callable_selector_rejected(self):
        with pytest.raises(ConfigurationError):
            Store().select("counter")


class TestReentrancy:
    def test_effect_feedback_loop_is_bounded(self):
        ping = create_action("PING")
        store = Store(config=StoreConfig(max_dispatch_depth=5))
        store.register_effects(create_effect(lambda actions: actions.pipe(ops.map(lambda a: ping()))))
        with pytest.raises(DispatchLoopError) as exc_info:
            store.dispatch(ping())
        assert exc_info.value.depth == 6

    def test_nested_dispatch_is_processed_before_outer_continues(self):
        store = Store()
        store.register_reducers(counter_reducer())
        store.register_effects(create_effect(lambda actions: actions.pipe(
            ops.filter(lambda a: a.type == "DEC"),
            ops.map(lambda a: increment()),
        )))
        seen = collect(store.actions)
        store.dispatch(decrement())
        # The nested INC reaches later observers before the outer DEC does.
        assert [a.type for a in seen] == ["INC", "DEC"]
        assert store.state["counter"]["value"] == 0


class TestTeardown:
    def test_cancels_effects_and_observers(self):
        store = Store()
        store.register_reducers(counter_reducer())
        seen = []
        store.register_effects(create_effect(
            lambda actions: actions.pipe(ops.tap(seen.append)), dispatch=False
        ))
        values = collect(store.select(lambda s: s["counter"]["value"]))
        store.teardown()
        store.teardown()

        assert store.closed
        with pytest.raises(TinyFluxError):
            store.dispatch(increment())
        assert seen == []
        assert values == [0]

    def test_context_manager(self):
        with Store() as store:
            store.register_reducers(counter_reducer())
        assert store.closed
        assert store.state == {"counter": {"value": 0}}


def test_end_to_end_counter_yields_each_value():
    store = Store({})
    store.register_reducers(create_reducer(
        "counter",
        {"value": 0},
        on("INC", lambda state, action: {**state, "value": state["value"] + 1}),
    ))
    values = collect(store.select(lambda s: s["counter"]["value"]))
    store.dispatch(Action(type="INC"))
    store.dispatch(Action(type="INC"))
    assert values == [0, 1, 2]
