"""
PyDux 的錯誤類別。

只有使用方式錯誤（建構參數不合法、teardown 後繼續使用）才會以這些類別拋出。
reducer 與 middleware 自己拋出的例外會原封不動地傳回 dispatch 的呼叫者。
"""
from typing import Any, Dict, Optional


class PyDuxError(Exception):
    """所有 PyDux 異常的基礎類。"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """
        將錯誤轉為可序列化的字典。

        Returns:
            包含錯誤類型、訊息與細節的字典。
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": dict(self.details),
        }

    def __str__(self) -> str:
        if not self.details:
            return self.message
        details = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
        return f"{self.message} ({details})"


class ConfigurationError(PyDuxError):
    """建構 Store、reducer 或 middleware 時參數不合法。"""

    def __init__(self, message: str, component: str, config_key: Optional[str] = None, **kwargs: Any) -> None:
        details = {"component": component}
        if config_key is not None:
            details["config_key"] = config_key
        details.update(kwargs)
        super().__init__(message, details)
        self.component = component
        self.config_key = config_key


class StoreError(PyDuxError):
    """對已經 teardown 的 Store 進行操作。"""

    def __init__(self, message: str, operation: str, **kwargs: Any) -> None:
        details = {"operation": operation}
        details.update(kwargs)
        super().__init__(message, details)
        self.operation = operation
