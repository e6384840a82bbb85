import pytest


@pytest.fixture
def order():
    """中介軟體記錄呼叫順序用的列表。"""
    return []
