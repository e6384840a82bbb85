"""
PyDux 範例：計數器，展示 typed reducer、中介軟體與狀態訂閱。
"""
import logging
from typing import Optional

from pydantic import BaseModel

from pydux import (
    LoggerMiddleware, Store, ThunkMiddleware, create_action, create_reducer, on,
)


# ====== Model Definition ======
class CounterState(BaseModel):
    count: int = 0
    error: Optional[str] = None


# ====== Actions ======
increment = create_action("[Counter] Increment")
decrement = create_action("[Counter] Decrement")
increment_by = create_action("[Counter] IncrementBy", lambda amount: amount)
reset = create_action("[Counter] Reset", lambda value=0: value)


# ====== Reducer ======
counter_reducer = create_reducer(
    CounterState(),
    on(increment, lambda state, action: state.model_copy(update={"count": state.count + 1})),
    on(decrement, lambda state, action: state.model_copy(update={"count": state.count - 1})),
    on(increment_by, lambda state, action: state.model_copy(update={"count": state.count + action.payload})),
    on(reset, lambda state, action: CounterState(count=action.payload)),
)


def increment_if_odd(dispatch, get_state):
    if get_state().count % 2:
        dispatch(increment())


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")

    store = Store(
        counter_reducer,
        initial_state=CounterState(),
        middleware=[ThunkMiddleware, LoggerMiddleware()],
        synchronous_notification=True,
        distinct=True,
    )
    store.select(lambda state: state.count).subscribe(
        on_next=lambda count: print(f"計數變化: {count}")
    )

    store.dispatch(increment())
    store.dispatch(increment_by(5))
    store.dispatch(decrement())
    store.dispatch(increment_if_odd)
    store.dispatch(reset(10))
    store.dispatch(reset(10))  # 狀態相等，不會通知

    print(store.state)
    store.teardown()
