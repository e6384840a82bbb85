from typing import List

from immutables import Map
from pydantic import BaseModel

from pydux import Store, freeze_payload, to_dict, to_immutable, to_pydantic


class Todo(BaseModel):
    id: str
    text: str
    tags: List[str]


def test_to_immutable_converts_nested_structures():
    frozen = to_immutable({"todos": [{"id": "1"}], "seen": {1, 2}})

    assert isinstance(frozen, Map)
    assert isinstance(frozen["todos"], tuple)
    assert isinstance(frozen["todos"][0], Map)
    assert frozen["seen"] == frozenset({1, 2})


def test_to_immutable_converts_pydantic_models():
    frozen = to_immutable(Todo(id="1", text="milk", tags=["shopping"]))

    assert frozen == Map(id="1", text="milk", tags=("shopping",))


def test_to_dict_reverses_to_immutable():
    data = {"todos": [{"id": "1"}], "count": 1}
    assert to_dict(to_immutable(data)) == data


def test_to_pydantic_rebuilds_model():
    todo = Todo(id="1", text="milk", tags=["shopping"])
    assert to_pydantic(to_immutable(todo), Todo) == todo


def test_frozen_states_work_with_distinct_mode():
    def reducer(state, action):
        return to_immutable(action)

    store = Store(reducer, initial_state=to_immutable({"a": [1]}), synchronous_notification=True, distinct=True)
    emitted = []
    store.subscribe(emitted.append)

    store.dispatch({"a": [1]})
    store.dispatch({"a": [2]})

    assert emitted == [Map(a=(2,))]


def test_freeze_payload_only_freezes_mutable_containers():
    todo = Todo(id="1", text="milk", tags=[])

    assert freeze_payload({"ids": [1, 2]}) == Map(ids=(1, 2))
    assert freeze_payload([1, [2]]) == (1, (2,))
    assert freeze_payload({1}) == frozenset({1})
    assert freeze_payload(todo) is todo
    assert freeze_payload("text") == "text"


def test_to_immutable_accepts_registered_types():
    class Point:
        def __init__(self, x, y):
            self.x, self.y = x, y

    @to_immutable.register(Point)
    def _(obj):
        return (obj.x, obj.y)

    assert to_immutable({"origin": Point(0, 0)}) == Map(origin=(0, 0))
