"""
基於 PyDux 的中介軟體定義模組。

中介軟體是一個可呼叫物件 (store, action, next_dispatch) -> result，
位於 dispatch 與 reducer 之間。它可以：

- 呼叫 next_dispatch(action) 一次，把 action 繼續往下傳；
- 完全不呼叫 next_dispatch，吞掉這個 action；
- 多次呼叫 next_dispatch，把 action（或其他 action）重複送入剩下的鏈；
- 呼叫 store.dispatch，從鏈的最前端開始一次全新的 dispatch；
- 回傳任意值，該值會成為 store.dispatch 的回傳值。

此模組提供中介軟體的基礎類別、依 action 種類路由的 TypedMiddleware，
以及幾個常用的中介軟體實作。Store 不會自動安裝其中任何一個。
"""

import asyncio
import contextlib
import logging
from typing import Any, Callable, Generator, Optional, Union, cast

from .actions import Action, describe_kind, kind_matcher
from .errors import ConfigurationError
from .types import (
    ActionContext, ActionKind, MiddlewareFunction, NextDispatch, Store, ThunkFunction
)

logger = logging.getLogger(__name__)


# ———— Middleware 抽象 ————
class MiddlewareClass:
    """
    以類別形式定義的中介軟體。

    子類實作 __call__(store, action, next_dispatch)。
    若實例同時定義了 teardown()，Store.teardown 時會被呼叫。
    """

    def __call__(self, store: Store, action: Any, next_dispatch: NextDispatch) -> Any:
        raise NotImplementedError


# ———— Base Middleware ————
class BaseMiddleware(MiddlewareClass):
    """
    基礎中介類，以鉤子的方式介入動作分發。

    預設的 __call__ 會在 action 往下傳遞前呼叫 on_next，
    在 reducer 處理完後呼叫 on_complete，出現錯誤時呼叫 on_error 並重新拋出。
    子類只需覆蓋需要的鉤子即可。
    """

    def __call__(self, store: Store, action: Any, next_dispatch: NextDispatch) -> Any:
        with self.action_context(action, store.state) as context:
            # 交給鏈中的下一層
            context['result'] = next_dispatch(action)
            # 記錄處理完後的狀態，供 on_complete 使用
            context['next_state'] = store.state
        return context['result']

    def on_next(self, action: Any, prev_state: Any) -> None:
        """
        在 action 往下傳遞之前調用。

        Args:
            action: 正在 dispatch 的 Action
            prev_state: dispatch 之前的 store.state
        """

    def on_complete(self, next_state: Any, action: Any) -> None:
        """
        在後續中介軟體與 reducer 處理完 action 之後調用。

        Args:
            next_state: dispatch 之後的最新 store.state
            action: 剛剛 dispatch 的 Action
        """

    def on_error(self, error: Exception, action: Any) -> None:
        """
        如果 dispatch 過程中拋出異常，則調用此鉤子。異常會在鉤子返回後繼續拋出。

        Args:
            error: 拋出的異常
            action: 導致異常的 Action
        """

    def teardown(self) -> None:
        """
        當 Store 清理資源時調用，用於清理中間件持有的資源。
        """

    @contextlib.contextmanager
    def action_context(self, action: Any, prev_state: Any) -> Generator[ActionContext, None, None]:
        """
        提供一個上下文管理器來處理 action 分發的生命週期。

        子類可以覆蓋此方法，但應負責呼叫適當的 hook 方法。

        Args:
            action: 要分發的 Action
            prev_state: 分發前的狀態

        Yields:
            ActionContext: 用於在上下文內部與外部之間傳遞數據的字典
        """
        context: ActionContext = {
            'action': action,
            'prev_state': prev_state,
            'next_state': None,
            'result': None,
            'error': None,
        }

        # 往下傳遞前
        self.on_next(action, prev_state)

        try:
            # 讓出控制權，讓實際的 dispatch 發生
            yield context
        except Exception as err:
            context['error'] = err
            self.on_error(err, action)
            raise

        # 正常完成
        self.on_complete(context['next_state'], action)


# ———— TypedMiddleware ————
class TypedMiddleware(MiddlewareClass):
    """
    只處理特定種類 action 的中介軟體。

    當 action 符合宣告的種類時，呼叫內層中介軟體並回傳其結果；
    否則直接以 next_dispatch(action) 把 action 交給鏈中的下一層，
    不符合的 action 永遠不會在這裡被吞掉。

    範例:
        ```python
        class LoadItems: ...

        def load_items(store, action, next_dispatch):
            result = next_dispatch(action)
            schedule_fetch(store)
            return result

        store = Store(reducer, middleware=[TypedMiddleware(LoadItems, load_items)])
        ```
    """

    def __init__(self, kind: ActionKind, middleware: MiddlewareFunction):
        if not callable(middleware):
            raise ConfigurationError(
                f"Middleware must be callable, got {type(middleware).__name__}",
                component="TypedMiddleware",
            )
        self.kind = kind
        self.middleware = middleware
        self._matches = kind_matcher(kind)

    def matches(self, action: Any) -> bool:
        """判斷 action 是否屬於這個中介軟體宣告的種類。"""
        return self._matches(action)

    def __call__(self, store: Store, action: Any, next_dispatch: NextDispatch) -> Any:
        if self._matches(action):
            # 符合種類，交由內層中介軟體決定是否往下傳
            return self.middleware(store, action, next_dispatch)
        # 不符合則原樣往下傳
        return next_dispatch(action)

    def teardown(self) -> None:
        teardown = getattr(self.middleware, "teardown", None)
        if callable(teardown):
            teardown()

    def __repr__(self):
        return f"TypedMiddleware({describe_kind(self.kind)}, {self.middleware!r})"


def typed_middleware(kind: ActionKind) -> Callable[[MiddlewareFunction], TypedMiddleware]:
    """
    裝飾器：把中介軟體函式綁定到特定種類的 action。

    用法：
        @typed_middleware(LoadItems)
        def load_items(store, action, next_dispatch): ...
    """
    def decorator(fn: MiddlewareFunction) -> TypedMiddleware:
        return TypedMiddleware(kind, fn)
    return decorator


# ———— LoggerMiddleware ————
class LoggerMiddleware(BaseMiddleware):
    """
    日誌中介，記錄每個 action 發送前和發送後的 state。

    使用場景:
    - 偵錯時需要觀察每次 state 的變化。
    - 確保 action 的執行順序正確。
    """

    def __init__(self, logger: Optional[logging.Logger] = None, level: int = logging.INFO):
        self.logger = logger or logging.getLogger(__name__)
        self.level = level

    def on_next(self, action: Any, prev_state: Any) -> None:
        self.logger.log(self.level, "dispatching %r", action)
        self.logger.log(self.level, "state before %r: %r", action, prev_state)

    def on_complete(self, next_state: Any, action: Any) -> None:
        self.logger.log(self.level, "state after %r: %r", action, next_state)

    def on_error(self, error: Exception, action: Any) -> None:
        self.logger.error("error in %r: %s", action, error)


# ———— ThunkMiddleware ————
class ThunkMiddleware(MiddlewareClass):
    """
    支援 dispatch 函數 (thunk)，可以在 thunk 內執行非同步邏輯或多次 dispatch。

    thunk 以 (dispatch, get_state) 呼叫，其回傳值會成為 store.dispatch 的回傳值，
    因此 thunk 可以回傳一個 Future / Task 讓呼叫者等待副作用完成。

    範例:
        ```python
        def fetch_user(user_id):
            def thunk(dispatch, get_state):
                dispatch(request_user(user_id))
                try:
                    user = api.fetch_user(user_id)
                    dispatch(request_user_success(user))
                except ApiError as e:
                    dispatch(request_user_failure(str(e)))
            return thunk

        store.dispatch(fetch_user("user123"))
        ```
    """

    def __call__(self, store: Store, action: Union[ThunkFunction, Any], next_dispatch: NextDispatch) -> Any:
        if self.is_thunk(action):
            return cast(ThunkFunction, action)(store.dispatch, lambda: store.state)
        return next_dispatch(action)

    @staticmethod
    def is_thunk(action: Any) -> bool:
        # 未呼叫的 action creator 帶有字串 type，不當作 thunk
        if isinstance(action, (Action, type)) or isinstance(getattr(action, "type", None), str):
            return False
        return callable(action)


# ———— AwaitableMiddleware ————
class AwaitableMiddleware(MiddlewareClass):
    """
    支援 dispatch coroutine/awaitable，完成後自動 dispatch 其非 None 的返回值。

    dispatch 會立即返回包裝後的 Task，呼叫者可以 await 它。
    必須在執行中的 asyncio 事件迴圈內使用。

    範例:
        ```python
        async def fetch_data():
            await asyncio.sleep(1)
            return data_loaded({"result": "success"})

        await store.dispatch(fetch_data())
        ```
    """

    def __call__(self, store: Store, action: Any, next_dispatch: NextDispatch) -> Any:
        if asyncio.iscoroutine(action) or asyncio.isfuture(action):
            # 包裝為 Task，立即返回給呼叫者
            task = asyncio.ensure_future(action)
            task.add_done_callback(lambda fut: self._dispatch_result(store, fut))
            return task
        return next_dispatch(action)

    @staticmethod
    def _dispatch_result(store: Store, fut: "asyncio.Future[Any]") -> None:
        if fut.cancelled():
            return
        error = fut.exception()
        if error is not None:
            # 取得異常後 asyncio 不再報告，改由模組 logger 記錄
            logger.error("awaitable action failed: %s", error, exc_info=error)
            return
        result = fut.result()
        if result is None:
            return
        if store.closed:
            logger.warning("store closed before awaitable finished, dropping %r", result)
            return
        store.dispatch(result)
