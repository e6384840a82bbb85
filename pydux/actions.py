"""
基於 PyDux 的 Action 定義模組。

此模組提供 Action 類別、創建 Action 的功能，
以及 typed reducer / typed middleware 共用的 action 種類比對。
Store 並不要求 action 必須是 Action 實例：字串、列舉或任何自訂類別都可以被 dispatch。
"""
from typing import Any, Callable, Dict, Generic, Optional, Union

from .errors import ConfigurationError
from .immutable_utils import freeze_payload
from .types import P, ActionKind, KindPredicate


class Action(Generic[P]):
    """
    表示一個有類型和可選負載的動作。

    泛型參數:
        P: 負載的類型

    屬性:
        type: 動作的類型字符串
        payload: 動作的負載數據（可選）
    """
    __slots__ = ('type', 'payload')

    def __init__(self, type: str, payload: Optional[P] = None):
        super().__setattr__('type', type)
        super().__setattr__('payload', payload)

    def __setattr__(self, name, value):
        if name not in self.__slots__:
            raise AttributeError(f"'{type(self).__name__}' object has no attribute '{name}'")
        raise AttributeError(f"Cannot modify immutable instance attribute '{name}'")

    def __delattr__(self, name):
        raise AttributeError(f"Cannot delete immutable instance attribute '{name}'")

    def __eq__(self, other):
        if not isinstance(other, Action):
            return NotImplemented
        return self.type == other.type and self.payload == other.payload

    def __hash__(self):
        return hash((self.type, self.payload))

    def __repr__(self):
        return f"Action(type='{self.type}', payload={self.payload!r})"


def create_action(action_type: str, prepare_fn: Optional[Callable[..., Any]] = None) -> Callable[..., Action[Any]]:
    """
    創建一個 Action 生成器函數。

    Args:
        action_type: Action 的類型標識符
        prepare_fn: 可選的預處理函數，用於在創建 Action 前處理輸入參數

    Returns:
        一個可調用的函數，用於生成指定類型的 Action。
        函數帶有 `type` 屬性，可直接作為 TypedReducer / TypedMiddleware 的種類。

    範例:
        >>> increment = create_action("[Counter] Increment")
        >>> increment()
        Action(type='[Counter] Increment', payload=None)
        >>> add = create_action("[Counter] Add", lambda amount: amount)
        >>> add(5)
        Action(type='[Counter] Add', payload=5)
    """
    def action_creator(*args: Any, **kwargs: Any) -> Action[Any]:
        if prepare_fn:
            payload = prepare_fn(*args, **kwargs)
        elif len(args) == 1 and not kwargs:
            payload = args[0]
        elif args or kwargs:
            payload: Dict[Union[int, str], Any] = dict(zip(range(len(args)), args))
            payload.update(kwargs)
        else:
            # 無參數，無負載
            return Action(action_type)

        return Action(action_type, freeze_payload(payload))

    action_creator.type = action_type  # type: ignore
    action_creator.__name__ = f"create_{action_type}"
    action_creator.__qualname__ = action_creator.__name__

    return action_creator


def kind_matcher(kind: ActionKind) -> KindPredicate:
    """
    將宣告的 action 種類轉為判斷函式。

    支援三種宣告方式：
      - 類別或類別元組：以 isinstance 判斷，子類別同樣符合。
      - 字串：比對 action 的 `type` 屬性。
      - action creator（具有字串 `type` 屬性的物件）：比對其 `type`。

    Args:
        kind: 宣告的種類。

    Returns:
        接收 action、回傳是否符合的函式。

    Raises:
        ConfigurationError: 無法辨識的種類宣告。
    """
    if isinstance(kind, type):
        return lambda action: isinstance(action, kind)

    if isinstance(kind, tuple):
        if not kind or not all(isinstance(k, type) for k in kind):
            raise ConfigurationError(
                "Action kind tuples must contain one or more classes",
                component="kind_matcher",
                kind=kind,
            )
        return lambda action: isinstance(action, kind)

    tag = kind if isinstance(kind, str) else getattr(kind, "type", None)
    if not isinstance(tag, str):
        raise ConfigurationError(
            "Action kind must be a class, a tuple of classes, a type string or an action creator",
            component="kind_matcher",
            kind=kind,
        )
    return lambda action: getattr(action, "type", None) == tag


def describe_kind(kind: ActionKind) -> str:
    """回傳種類的可讀名稱，用於 repr 與日誌。"""
    if isinstance(kind, type):
        return kind.__name__
    if isinstance(kind, tuple):
        return " | ".join(k.__name__ for k in kind)
    if isinstance(kind, str):
        return repr(kind)
    return repr(getattr(kind, "type", kind))
