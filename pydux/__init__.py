"""
PyDux 庫的主要入口點。

單一狀態容器 + 純函式 reducer + 中介軟體鏈 + 狀態變更通知。
"""

from .errors import PyDuxError, ConfigurationError, StoreError
from .actions import Action, create_action, kind_matcher
from .reducers import (
    Reducer, ReducerClass, UntypedReducer, TypedReducer,
    CombinedReducer, combine_reducers, create_reducer, on
)
from .middleware import (
    MiddlewareClass, BaseMiddleware, TypedMiddleware, typed_middleware,
    LoggerMiddleware, ThunkMiddleware, AwaitableMiddleware
)
from .store import Store, StoreOptions, create_store
from .immutable_utils import to_immutable, to_dict, to_pydantic, freeze_payload

__version__ = "0.1.0"

# 匯出所有公開 API
__all__ = [
    # Errors
    "PyDuxError", "ConfigurationError", "StoreError",

    # Actions
    "Action", "create_action", "kind_matcher",

    # Reducers
    "Reducer", "ReducerClass", "UntypedReducer", "TypedReducer",
    "CombinedReducer", "combine_reducers", "create_reducer", "on",

    # Middleware
    "MiddlewareClass", "BaseMiddleware", "TypedMiddleware", "typed_middleware",
    "LoggerMiddleware", "ThunkMiddleware", "AwaitableMiddleware",

    # Store
    "Store", "StoreOptions", "create_store",

    # Immutable Utils
    "to_immutable", "to_dict", "to_pydantic", "freeze_payload",
]
