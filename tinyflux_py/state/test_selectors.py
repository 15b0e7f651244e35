"""Tests for feature selectors and memoized selectors."""

import pytest

from ..errors import ConfigurationError, SelectorError
from .selectors import MemoizedSelector, create_feature_selector, create_selector


class TestFeatureSelector:
    def test_reads_slice(self):
        select_counter = create_feature_selector("counter")
        state = {"counter": {"value": 1}}
        assert select_counter(state) is state["counter"]

    def test_projection(self):
        select_value = create_feature_selector("counter", lambda counter: counter["value"])
        assert select_value({"counter": {"value": 7}}) == 7

    def test_missing_slice_reads_none(self):
        assert create_feature_selector("absent")({}) is None

    def test_invalid_arguments(self):
        with pytest.raises(ConfigurationError):
            create_feature_selector("")
        with pytest.raises(ConfigurationError):
            create_feature_selector("counter", "not callable")


class TestCreateSelector:
    def test_requires_projection(self):
        with pytest.raises(ConfigurationError, match="projection"):
            create_selector(create_feature_selector("a"), "not a function")

    def test_requires_arguments(self):
        with pytest.raises(ConfigurationError):
            create_selector()

    def test_rejects_non_callable_inputs(self):
        with pytest.raises(ConfigurationError):
            create_selector(42, lambda value: value)

    def test_projection_without_inputs(self):
        selector = create_selector(lambda: "constant")
        assert selector({}) == "constant"


class TestMemoization:
    def setup_method(self):
        self.calls = 0

        def project(counter):
            self.calls += 1
            return {"doubled": counter["value"] * 2}

        self.selector = create_selector(create_feature_selector("counter"), project)

    def test_same_inputs_return_cached_result(self):
        counter = {"value": 2}
        first = self.selector({"counter": counter})
        second = self.selector({"counter": counter, "other": "changed"})
        assert first is second
        assert self.calls == 1

    def test_new_input_reference_recomputes(self):
        first = self.selector({"counter": {"value": 2}})
        second = self.selector({"counter": {"value": 2}})
        assert first == second
        assert first is not second
        assert self.calls == 2

    def test_memo_depth_is_one(self):
        # Alternating between two states defeats the cache on every call.
        state_a = {"counter": {"value": 1}}
        state_b = {"counter": {"value": 2}}
        for state in [state_a, state_b, state_a, state_b]:
            self.selector(state)
        assert self.calls == 4

    def test_release_clears_memo(self):
        state = {"counter": {"value": 1}}
        self.selector(state)
        self.selector.release()
        self.selector(state)
        assert self.calls == 2

    def test_projector_exposed(self):
        assert isinstance(self.selector, MemoizedSelector)
        assert self.selector.projector({"value": 4}) == {"doubled": 8}


class TestComposition:
    def test_nested_selectors(self):
        select_items = create_feature_selector("items")
        select_visible = create_selector(select_items, lambda items: [i for i in items if i["visible"]])
        select_count = create_selector(select_visible, len)

        items = [{"visible": True}, {"visible": False}]
        state = {"items": items}
        assert select_count(state) == 1
        assert select_count({"items": items, "unrelated": 1}) == 1

    def test_multiple_inputs(self):
        selector = create_selector(
            create_feature_selector("a"),
            create_feature_selector("b"),
            lambda a, b: a + b,
        )
        assert selector({"a": 1, "b": 2}) == 3

    def test_projection_error_names_selector(self):
        def broken_projection(value):
            raise ValueError("bad input")

        selector = create_selector(create_feature_selector("a"), broken_projection)
        with pytest.raises(SelectorError) as exc_info:
            selector({"a": 1})
        assert "broken_projection" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, ValueError)
