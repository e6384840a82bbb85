"""Reducer 路由與組合工具的測試。"""
import pytest
from immutables import Map

from pydux import (
    Action, CombinedReducer, ConfigurationError, ReducerClass, Store, TypedReducer,
    UntypedReducer, combine_reducers, create_action, create_reducer, on,
)

from helpers import (
    FirstAction, SecondAction, SpecialFirstAction, ThirdAction, reducer1, reducer2,
)


def first_action_reducer(state, action):
    return type(action).__name__


def second_action_reducer(state, action):
    return type(action).__name__


class TestTypedReducer:
    def test_invoked_when_action_matches_kind(self):
        store = Store(
            combine_reducers([
                TypedReducer(FirstAction, first_action_reducer),
                TypedReducer(SecondAction, second_action_reducer),
            ]),
            initial_state="hello",
        )

        store.dispatch(FirstAction())
        assert store.state == "FirstAction"

        store.dispatch(SecondAction())
        assert store.state == "SecondAction"

    def test_unmatched_action_returns_same_state(self):
        """不符合任何種類時，state 原樣（同一個物件）返回。"""
        initial = {"items": []}
        store = Store(
            combine_reducers([
                TypedReducer(FirstAction, first_action_reducer),
                TypedReducer(SecondAction, second_action_reducer),
            ]),
            initial_state=initial,
        )

        store.dispatch(ThirdAction())

        assert store.state is initial

    def test_broad_kind_matches_subclasses(self):
        reducer = TypedReducer(FirstAction, first_action_reducer)

        assert reducer("hello", SpecialFirstAction()) == "SpecialFirstAction"
        assert reducer.matches(SpecialFirstAction())

    def test_tuple_kind_matches_any_member(self):
        reducer = TypedReducer((FirstAction, SecondAction), first_action_reducer)

        assert reducer("hello", SecondAction()) == "SecondAction"
        assert reducer("hello", ThirdAction()) == "hello"

    def test_string_and_creator_kinds_match_action_type(self):
        add = create_action("[Counter] Add")
        by_creator = TypedReducer(add, lambda state, action: state + action.payload)
        by_tag = TypedReducer("[Counter] Add", lambda state, action: state + action.payload)

        assert by_creator(1, add(2)) == 3
        assert by_tag(1, add(2)) == 3
        assert by_tag(1, Action("[Counter] Reset", 0)) == 1
        assert by_tag(1, "[Counter] Add") == 1

    def test_is_a_reducer_class(self):
        assert isinstance(TypedReducer(FirstAction, first_action_reducer), ReducerClass)

    def test_rejects_invalid_kinds(self):
        with pytest.raises(ConfigurationError):
            TypedReducer(None, first_action_reducer)
        with pytest.raises(ConfigurationError):
            TypedReducer((FirstAction, "tag"), first_action_reducer)
        with pytest.raises(ConfigurationError):
            TypedReducer((), first_action_reducer)

    def test_rejects_non_callable_reducer(self):
        with pytest.raises(ConfigurationError):
            TypedReducer(FirstAction, "not callable")


class TestCombineReducers:
    def test_folds_left_feeding_previous_output(self):
        def append(tag):
            return lambda state, action: state + [tag]

        combined = combine_reducers([append("a"), append("b"), append("c")])

        assert combined([], "any") == ["a", "b", "c"]

    def test_later_reducers_see_earlier_changes(self):
        def double(state, action):
            return state * 2

        def increment(state, action):
            return state + 1

        assert combine_reducers([double, increment])(3, None) == 7
        assert combine_reducers([increment, double])(3, None) == 8

    def test_empty_list_is_identity(self):
        state = object()
        assert combine_reducers([])(state, "action") is state

    def test_iterable_is_snapshotted(self):
        reducers = [reducer1]
        combined = combine_reducers(iter(reducers))
        reducers.append(reducer2)

        assert combined("hello", "helloReducer2") == "hello"
        assert combined("hello", "helloReducer1") == "reducer 1 reporting"

    def test_duplicates_run_twice(self):
        def increment(state, action):
            return state + 1

        assert combine_reducers([increment, increment])(0, None) == 2

    def test_rejects_non_callable(self):
        with pytest.raises(ConfigurationError):
            combine_reducers([reducer1, None])


class TestCombinedReducer:
    def test_same_semantics_as_combine_reducers(self):
        combined = CombinedReducer([UntypedReducer(reducer1), UntypedReducer(reducer2)])
        store = Store(combined, initial_state="hello")

        store.dispatch("helloReducer1")
        assert store.state == "reducer 1 reporting"
        store.dispatch("helloReducer2")
        assert store.state == "reducer 2 reporting"

    def test_empty_is_identity(self):
        state = ["untouched"]
        assert CombinedReducer([])(state, "action") is state

    def test_mixes_functions_and_classes(self):
        class Exclaim(ReducerClass):
            def __call__(self, state, action):
                return state + "!"

        combined = CombinedReducer([reducer1, Exclaim()])

        assert combined("hello", "helloReducer1") == "reducer 1 reporting!"
        assert len(combined.reducers) == 2

    def test_untyped_reducer_delegates(self):
        assert UntypedReducer(reducer1)("hello", "helloReducer1") == "reducer 1 reporting"
        assert UntypedReducer(reducer1)("hello", "other") == "hello"


increment = create_action("[Counter] Increment")
add = create_action("[Counter] Add", lambda amount: amount)


class TestCreateReducer:
    def make_reducer(self):
        return create_reducer(
            Map(count=0),
            on(increment, lambda state, action: state.set("count", state["count"] + 1)),
            (add, lambda state, action: state.set("count", state["count"] + action.payload)),
        )

    def test_handlers_route_by_action_type(self):
        reducer = self.make_reducer()
        state = reducer(None, increment())
        state = reducer(state, add(5))

        assert state["count"] == 6

    def test_none_state_uses_initial_state(self):
        reducer = self.make_reducer()

        assert reducer() == Map(count=0)
        assert reducer(None, Action("[Other]")) is reducer.initial_state

    def test_unknown_action_returns_same_state(self):
        reducer = self.make_reducer()
        state = Map(count=3)

        assert reducer(state, Action("[Other]")) is state

    def test_handlers_are_exposed(self):
        reducer = self.make_reducer()

        assert len(reducer.handlers) == 2
        assert all(isinstance(h, TypedReducer) for h in reducer.handlers)

    def test_works_with_class_kinds(self):
        reducer = create_reducer(0, on(FirstAction, lambda state, action: state + 1))
        store = Store(reducer)

        store.dispatch(FirstAction())
        store.dispatch(SecondAction())

        assert store.state == 1

    def test_rejects_invalid_handlers(self):
        with pytest.raises(ConfigurationError):
            create_reducer(0, "not a handler")
