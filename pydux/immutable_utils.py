"""
不可變資料輔助函式。

Store 本身不會複製或凍結狀態；這些函式讓應用程式在 reducer 中
方便地產生可以安全共享、可比較相等性的狀態值。

凍結與解凍都以 functools.singledispatch 依型別分派，
應用程式可以為自己的型別註冊額外的轉換：

    @to_immutable.register
    def _(obj: MyRecord):
        return Map(id=obj.id)
"""
import functools
from collections.abc import Mapping, Set as AbstractSet
from typing import Any, Type, TypeVar

from immutables import Map
from pydantic import BaseModel

M = TypeVar('M', bound=BaseModel)


# ———— 凍結 ————
@functools.singledispatch
def to_immutable(obj: Any) -> Any:
    """
    遞迴地把容器轉為不可變形式。

    dict / Mapping 與 pydantic 模型轉為 immutables.Map，list / tuple 轉為 tuple，
    set 轉為 frozenset；其他值原樣返回。
    """
    return obj


@to_immutable.register(Map)
@to_immutable.register(Mapping)
def _freeze_mapping(obj: Mapping) -> Map:
    return Map({k: to_immutable(v) for k, v in obj.items()})


@to_immutable.register(BaseModel)
def _freeze_model(obj: BaseModel) -> Map:
    # 以欄位值為準，巢狀模型在 model_dump 時已轉為 dict
    return _freeze_mapping(obj.model_dump())


@to_immutable.register(list)
@to_immutable.register(tuple)
def _freeze_sequence(obj: Any) -> tuple:
    return tuple(to_immutable(i) for i in obj)


@to_immutable.register(AbstractSet)
def _freeze_set(obj: AbstractSet) -> frozenset:
    return frozenset(to_immutable(i) for i in obj)


def freeze_payload(payload: Any) -> Any:
    """
    Action 負載的凍結入口。

    可變容器 (dict、list、set) 會被凍結，讓 Action 保持可雜湊；
    已經不可變的值與 pydantic 模型保持原樣，reducer 仍能取得原本的模型。
    """
    if isinstance(payload, (dict, list, set)):
        return to_immutable(payload)
    return payload


# ———— 解凍 ————
@functools.singledispatch
def to_dict(obj: Any) -> Any:
    """把 Map 及其巢狀結構轉回 dict / list / set。"""
    return obj


@to_dict.register(Map)
def _thaw_map(obj: Map) -> dict:
    return {k: to_dict(v) for k, v in obj.items()}


@to_dict.register(tuple)
def _thaw_tuple(obj: tuple) -> list:
    return [to_dict(i) for i in obj]


@to_dict.register(frozenset)
def _thaw_frozenset(obj: frozenset) -> set:
    return {to_dict(i) for i in obj}


def to_pydantic(map_obj: Map, model_class: Type[M]) -> M:
    """以 model_validate 把凍結的 Map 還原為 pydantic 模型，欄位照常驗證。"""
    return model_class.model_validate(to_dict(map_obj))
