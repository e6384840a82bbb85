import asyncio
import inspect
import logging
from typing import Any, Callable, Generic, Iterable, Optional, Tuple

from pydantic import BaseModel, ConfigDict, StrictBool, ValidationError
from reactivex import Observable, operators as ops
from reactivex.abc import DisposableBase, SchedulerBase
from reactivex.scheduler import CurrentThreadScheduler
from reactivex.scheduler.eventloop import AsyncIOScheduler
from reactivex.subject import Subject

from .errors import ConfigurationError, StoreError
from .types import S, MiddlewareFunction, NextDispatch

logger = logging.getLogger(__name__)


class StoreOptions(BaseModel):
    """
    Store 的建構選項。

    Attributes:
        synchronous_notification: 為 True 時，訂閱者在 dispatch 返回前同步收到通知；
            為 False 時，通知經由 scheduler 延後送出。
        distinct: 為 True 時，若 reducer 產生的新狀態與舊狀態相等，則不發出通知。
        scheduler: 延後通知時使用的 reactivex scheduler。未提供時，在執行中的 asyncio
            事件迴圈內使用該迴圈的 AsyncIOScheduler，否則使用當前執行緒的 trampoline，
            通知一律在 dispatch 所在的執行緒送出。
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    synchronous_notification: StrictBool = False
    distinct: StrictBool = False
    scheduler: Optional[SchedulerBase] = None


class Store(Generic[S]):
    """
    狀態容器，持有唯一的應用狀態，並在狀態變更時通知訂閱者。

    改變狀態的唯一途徑是 dispatch 一個 action：action 先依註冊順序經過所有中介軟體，
    最後由 reducer 計算出新狀態，Store 保存新狀態並透過 on_change 發出通知。

    中介軟體鏈只在建構時組裝一次，Store 存活期間不會改變。

    範例:
        ```python
        def counter(state, action):
            if action == "INCREMENT":
                return state + 1
            return state

        store = Store(counter, initial_state=0, synchronous_notification=True)
        store.subscribe(print)
        store.dispatch("INCREMENT")  # prints 1
        ```
    """

    def __init__(
        self,
        reducer: Callable[[S, Any], S],
        initial_state: Optional[S] = None,
        middleware: Iterable[Any] = (),
        *,
        synchronous_notification: bool = False,
        distinct: bool = False,
        scheduler: Optional[SchedulerBase] = None,
    ):
        """
        建立 Store 並組裝 dispatch 鏈。

        Args:
            reducer: (state, action) -> state 的函式或 ReducerClass 實例。
            initial_state: 任何 dispatch 之前的狀態。
            middleware: 依執行順序排列的中介軟體，可以是函式、實例或可無參數實例化的類別。
            synchronous_notification: 是否在 dispatch 內同步通知訂閱者。
            distinct: 新狀態與舊狀態相等時是否略過通知。
            scheduler: 非同步通知使用的 scheduler。

        Raises:
            ConfigurationError: reducer、中介軟體或選項不合法。
        """
        try:
            self._options = StoreOptions(
                synchronous_notification=synchronous_notification,
                distinct=distinct,
                scheduler=scheduler,
            )
        except ValidationError as err:
            raise ConfigurationError(
                f"Invalid store options: {err}", component="Store"
            ) from err

        self.reducer = reducer
        # 初始狀態在任何 dispatch 之前就位
        self._state = initial_state
        self._torn_down = False
        # 所有訂閱共用的通知來源
        self._state_subject = Subject()

        if self._options.synchronous_notification:
            # 同步模式直接轉發 Subject，不經過 scheduler
            self._scheduler = None
        else:
            self._scheduler = self._options.scheduler or self._default_scheduler()

        # 中介軟體只在這裡實例化一次，之後不可替換
        self._middleware = tuple(self._instantiate(m) for m in middleware)
        self._dispatchers = self._create_dispatchers(
            self._middleware,
            self._create_reduce_and_notify(self._options.distinct),
        )
        logger.debug(
            "Store created with %d middleware (synchronous_notification=%s, distinct=%s)",
            len(self._middleware),
            self._options.synchronous_notification,
            self._options.distinct,
        )

    @staticmethod
    def _default_scheduler() -> SchedulerBase:
        """
        選擇延後通知的預設 scheduler，不會另外啟動執行緒。

        在執行中的 asyncio 事件迴圈內建立的 Store，通知排入該迴圈的下一輪；
        其他情況使用當前執行緒的 trampoline，巢狀 dispatch 產生的通知會排在
        目前這則通知送完之後。
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return CurrentThreadScheduler.singleton()
        return AsyncIOScheduler(loop)

    @staticmethod
    def _instantiate(mw: Any) -> MiddlewareFunction:
        # 接受類和實例，如果是類則直接實例化
        inst = mw() if inspect.isclass(mw) else mw
        if not callable(inst):
            raise ConfigurationError(
                f"Middleware must be callable, got {type(inst).__name__}",
                component="Store",
                config_key="middleware",
            )
        return inst

    def _create_reduce_and_notify(self, distinct: bool) -> NextDispatch:
        """
        建立鏈最內層的 dispatcher。

        它在所有中介軟體之後執行：以 reducer 計算新狀態、保存，並通知訂閱者。
        """
        def reduce_and_notify(action: Any) -> None:
            # 保存舊狀態
            prev_state = self._state
            # 計算新狀態，reducer 拋出異常時狀態保持不變
            new_state = self.reducer(prev_state, action)
            # 更新為新狀態，distinct 模式下相等的新參考同樣會保存
            self._state = new_state

            if distinct and new_state == prev_state:
                logger.debug("Notification suppressed for %r: state unchanged", action)
                return
            # 狀態替換之後才通知訂閱者
            self._state_subject.on_next(new_state)

        return reduce_and_notify

    def _create_dispatchers(
        self,
        middleware: Tuple[MiddlewareFunction, ...],
        reduce_and_notify: NextDispatch,
    ) -> Tuple[NextDispatch, ...]:
        """
        構建中介軟體鏈，將中介軟體按反向順序包裹在 reduce_and_notify 外層。

        Returns:
            dispatcher 元組，第 0 個為鏈的最前端。
        """
        # 最內層是 reduce_and_notify
        dispatchers = [reduce_and_notify]
        # 從最後一個中介軟體開始往外包，每層的 next 是目前的最前端
        for mw in reversed(middleware):
            dispatchers.append(self._wrap_middleware(mw, dispatchers[-1]))
        # 反轉回註冊順序，第 0 個即 dispatch 的入口
        return tuple(reversed(dispatchers))

    def _wrap_middleware(self, mw: MiddlewareFunction, next_dispatch: NextDispatch) -> NextDispatch:
        # 綁定 store 與下一層 dispatcher
        def dispatch(action: Any) -> Any:
            return mw(self, action, next_dispatch)
        return dispatch

    @property
    def state(self) -> S:
        """
        獲取當前狀態。

        Returns:
            當前狀態。
        """
        return self._state

    @property
    def reducer(self) -> Callable[[S, Any], S]:
        """目前使用的 reducer，替換後於下一次 dispatch 生效。"""
        return self._reducer

    @reducer.setter
    def reducer(self, reducer: Callable[[S, Any], S]) -> None:
        if not callable(reducer):
            raise ConfigurationError(
                f"Reducer must be callable, got {type(reducer).__name__}",
                component="Store",
                config_key="reducer",
            )
        self._reducer = reducer

    @property
    def middleware(self) -> Tuple[MiddlewareFunction, ...]:
        """依註冊順序排列的中介軟體。"""
        return self._middleware

    @property
    def options(self) -> StoreOptions:
        return self._options

    @property
    def closed(self) -> bool:
        """Store 是否已經 teardown。"""
        return self._torn_down

    def dispatch(self, action: Any) -> Any:
        """
        分發一個動作：依序經過中介軟體，最後交給 reducer。

        reducer 或中介軟體拋出的異常會原樣傳回呼叫者，已套用的狀態不會回滾。

        Args:
            action: 要分發的 action，可以是任何值。

        Returns:
            最外層中介軟體的返回值；沒有中介軟體時為 None。

        Raises:
            StoreError: Store 已經 teardown。
        """
        if self._torn_down:
            raise StoreError("Cannot dispatch to a store that has been torn down", operation="dispatch")
        return self._dispatchers[0](action)

    @property
    def on_change(self) -> Observable:
        """
        每次狀態被接受時發出新狀態的 Observable。

        每個訂閱彼此獨立，取消其中一個不影響其他訂閱。

        Raises:
            StoreError: Store 已經 teardown。
        """
        if self._torn_down:
            raise StoreError("Cannot subscribe to a store that has been torn down", operation="subscribe")
        if self._scheduler is None:
            return self._state_subject.pipe(ops.as_observable())
        return self._state_subject.pipe(ops.observe_on(self._scheduler))

    def subscribe(
        self,
        on_next: Optional[Callable[[S], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
        on_completed: Optional[Callable[[], None]] = None,
    ) -> DisposableBase:
        """
        訂閱狀態變更。

        Returns:
            可呼叫 dispose() 取消訂閱的物件。
        """
        return self.on_change.subscribe(
            on_next=on_next, on_error=on_error, on_completed=on_completed
        )

    def select(self, selector: Callable[[S], Any]) -> Observable:
        """
        選擇狀態的一部分進行觀察。

        Args:
            selector: 一個函數，接收整個狀態並返回希望觀察的部分。

        Returns:
            一個可觀察對象，只在選定的部分改變時發出。
        """
        return self.on_change.pipe(
            ops.map(selector),
            ops.distinct_until_changed(),
        )

    def teardown(self) -> None:
        """
        關閉 Store：清理中介軟體資源、清空狀態並結束通知流。

        之後再 dispatch 或訂閱都會拋出 StoreError。重複呼叫沒有效果。

        中介軟體的 teardown 拋出異常時，Store 仍會完成關閉，異常在最後傳回呼叫者。
        """
        if self._torn_down:
            return
        # 先標記關閉，teardown 過程中的 dispatch 會被拒絕
        self._torn_down = True

        try:
            # 依註冊順序清理中介軟體資源
            for mw in self._middleware:
                teardown = getattr(mw, "teardown", None)
                if callable(teardown):
                    teardown()
        finally:
            # 清空狀態
            self._state = None
            # 通知所有訂閱者結束，再釋放 Subject
            self._state_subject.on_completed()
            self._state_subject.dispose()
            logger.debug("Store torn down")

    def __enter__(self) -> "Store[S]":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.teardown()


def create_store(
    reducer: Callable[[S, Any], S],
    initial_state: Optional[S] = None,
    middleware: Iterable[Any] = (),
    **options: Any,
) -> Store[S]:
    """
    創建一個新的 Store 實例。

    Returns:
        Store: 新創建的 Store 實例。
    """
    return Store(reducer, initial_state, middleware, **options)
