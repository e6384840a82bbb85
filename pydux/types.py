"""
PyDux 的共用型別定義。

集中放置 TypeVar、可呼叫物件別名與 Protocol，
讓 store、reducer 與 middleware 模組可以互相引用而不產生循環匯入。
"""
from typing import Any, Callable, Optional, Tuple, Type, TypeVar, Union
from typing_extensions import Protocol, TypedDict, runtime_checkable

S = TypeVar("S")  # 狀態類型
P = TypeVar("P")  # 負載類型

# reducer 函式：(state, action) -> state
ReducerFunction = Callable[[S, Any], S]

# 中介鏈中的下一層 dispatcher
NextDispatch = Callable[[Any], Any]
DispatchFunction = Callable[[Any], Any]
GetState = Callable[[], Any]
ThunkFunction = Callable[[DispatchFunction, GetState], Any]

# 可用來宣告 action 種類的值：類別、類別元組、字串 type 或 action creator
ActionKind = Union[Type[Any], Tuple[Type[Any], ...], str, Any]
KindPredicate = Callable[[Any], bool]


@runtime_checkable
class Store(Protocol):
    """中介軟體所看到的 Store 公開介面。"""

    @property
    def state(self) -> Any: ...

    @property
    def closed(self) -> bool: ...

    def dispatch(self, action: Any) -> Any: ...


MiddlewareFunction = Callable[[Store, Any, NextDispatch], Any]


@runtime_checkable
class Reducer(Protocol):
    """任何可呼叫為 (state, action) -> state 的物件。"""

    def __call__(self, state: Any, action: Any) -> Any: ...


@runtime_checkable
class Middleware(Protocol):
    """任何可呼叫為 (store, action, next_dispatch) -> result 的物件。"""

    def __call__(self, store: Store, action: Any, next_dispatch: NextDispatch) -> Any: ...


class ActionContext(TypedDict, total=False):
    """BaseMiddleware.action_context 在上下文內外傳遞的資料。"""
    action: Any
    prev_state: Any
    next_state: Any
    result: Any
    error: Optional[BaseException]
