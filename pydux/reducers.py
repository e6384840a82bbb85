"""
Reducer 抽象與組合工具。

Reducer 是純函式 (state, action) -> state。對於不認得的 action，
reducer 必須原樣回傳傳入的 state（同一個物件），組合工具依賴這個約定。
"""
from typing import Any, Callable, Generic, Iterable, Tuple, Union

from .actions import describe_kind, kind_matcher
from .errors import ConfigurationError
from .types import S, ActionKind, ReducerFunction

Reducer = ReducerFunction


class ReducerClass(Generic[S]):
    """
    以類別形式定義的 reducer。

    某些情境需要一個物件而不是裸函式（例如要攜帶設定或在多處共用同一個實例），
    此時可繼承 ReducerClass 並實作 __call__。
    """

    def __call__(self, state: S, action: Any) -> S:
        raise NotImplementedError


class UntypedReducer(ReducerClass[S]):
    """把一般 reducer 函式包裝成 ReducerClass。"""

    __slots__ = ("reducer",)

    def __init__(self, reducer: Callable[[S, Any], S]):
        _ensure_callable(reducer, "UntypedReducer")
        self.reducer = reducer

    def __call__(self, state: S, action: Any) -> S:
        return self.reducer(state, action)

    def __repr__(self):
        return f"UntypedReducer({self.reducer!r})"


class TypedReducer(ReducerClass[S]):
    """
    只處理特定種類 action 的 reducer。

    當 action 符合宣告的種類時呼叫內層 reducer，否則原樣回傳 state。
    種類的比對規則見 `pydux.actions.kind_matcher`。

    範例:
        ```python
        class Increment: ...
        class Decrement: ...

        counter = combine_reducers([
            TypedReducer(Increment, lambda state, action: state + 1),
            TypedReducer(Decrement, lambda state, action: state - 1),
        ])
        ```
    """

    __slots__ = ("kind", "reducer", "_matches")

    def __init__(self, kind: ActionKind, reducer: Callable[[S, Any], S]):
        _ensure_callable(reducer, "TypedReducer")
        self.kind = kind
        self.reducer = reducer
        self._matches = kind_matcher(kind)

    def matches(self, action: Any) -> bool:
        """判斷 action 是否屬於這個 reducer 宣告的種類。"""
        return self._matches(action)

    def __call__(self, state: S, action: Any) -> S:
        if self._matches(action):
            return self.reducer(state, action)
        return state

    def __repr__(self):
        return f"TypedReducer({describe_kind(self.kind)}, {self.reducer!r})"


def combine_reducers(reducers: Iterable[Callable[[S, Any], S]]) -> ReducerFunction[S]:
    """
    將多個 reducer 依序串接成一個 reducer。

    每個 reducer 接收的是前一個 reducer 的輸出，而不是原始的 state，
    因此後面的 reducer 可以看見同一次 dispatch 中前面 reducer 所做的變更。
    空序列會得到恆等 reducer。

    Args:
        reducers: 依執行順序排列的 reducers。

    Returns:
        組合後的 reducer 函式。
    """
    reducers = tuple(reducers)
    for reducer in reducers:
        _ensure_callable(reducer, "combine_reducers")

    def combined(state: S, action: Any) -> S:
        for reducer in reducers:
            state = reducer(state, action)
        return state

    combined.reducers = reducers  # type: ignore
    return combined


class CombinedReducer(ReducerClass[S]):
    """
    與 combine_reducers 相同的折疊語意，以 ReducerClass 物件的形式提供。
    """

    __slots__ = ("reducers",)

    def __init__(self, reducers: Iterable[Callable[[S, Any], S]]):
        self.reducers: Tuple[Callable[[S, Any], S], ...] = tuple(reducers)
        for reducer in self.reducers:
            _ensure_callable(reducer, "CombinedReducer")

    def __call__(self, state: S, action: Any) -> S:
        for reducer in self.reducers:
            state = reducer(state, action)
        return state

    def __repr__(self):
        return f"CombinedReducer({list(self.reducers)!r})"


def on(kind: ActionKind, handler: Callable[[S, Any], S]) -> TypedReducer[S]:
    """
    創建一個 action 種類與處理函式的綁定。

    Args:
        kind: action 類別、type 字串或 action creator。
        handler: 處理該 Action 的函式，接收 (state, action) 並返回新狀態。

    Returns:
        只在 action 符合種類時執行 handler 的 TypedReducer。
    """
    return TypedReducer(kind, handler)


def create_reducer(
    initial_state: S,
    *handlers: Union[TypedReducer[S], Tuple[ActionKind, Callable[[S, Any], S]]],
) -> ReducerFunction[S]:
    """
    創建一個 reducer 函式，用於處理狀態變更。

    Args:
        initial_state: 初始狀態，state 為 None 時使用。
        *handlers: 使用 on 函式創建的處理器，或 (kind, handler_fn) 元組。

    Returns:
        一個 reducer 函式，依序把 action 交給每個符合種類的處理器。
    """
    bindings = []
    for handler in handlers:
        if isinstance(handler, tuple) and len(handler) == 2:
            # (kind, handler_fn) 元組
            bindings.append(TypedReducer(*handler))
        elif callable(handler):
            bindings.append(handler)
        else:
            raise ConfigurationError(
                "Reducer handlers must be on(...) bindings or (kind, handler) tuples",
                component="create_reducer",
                handler=handler,
            )
    combined = CombinedReducer(bindings)

    def reducer(state: S = initial_state, action: Any = None) -> S:
        if state is None:
            state = initial_state
        if action is None:
            return state
        return combined(state, action)

    # 設置 reducer 的初始狀態和處理器
    reducer.initial_state = initial_state  # type: ignore
    reducer.handlers = combined.reducers  # type: ignore

    return reducer


def _ensure_callable(reducer: Any, component: str) -> None:
    if not callable(reducer):
        raise ConfigurationError(
            f"Reducer must be callable, got {type(reducer).__name__}",
            component=component,
        )
