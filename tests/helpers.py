"""測試共用的 reducer、中介軟體與 action 類別。"""
from pydux import MiddlewareClass

NOT_FOUND = "not found"


def string_reducer(state, action):
    return action if isinstance(action, str) else NOT_FOUND


def identity_action_reducer(state, action):
    return action


def reducer1(state, action):
    if action == "helloReducer1":
        return "reducer 1 reporting"
    return state


def reducer2(state, action):
    if action == "helloReducer2":
        return "reducer 2 reporting"
    return state


class FirstAction:
    pass


class SecondAction:
    pass


class ThirdAction:
    pass


class SpecialFirstAction(FirstAction):
    pass


class RecordingMiddleware(MiddlewareClass):
    """記錄每次被呼叫時的標記，然後把 action 往下傳。"""

    def __init__(self, name, log):
        self.name = name
        self.log = log
        self.counter = 0

    def __call__(self, store, action, next_dispatch):
        self.log.append(self.name)
        self.counter += 1
        return next_dispatch(action)


class ExtraActionMiddleware(RecordingMiddleware):
    """往下傳遞原始 action 之後，再額外傳遞一個 action。"""

    def __call__(self, store, action, next_dispatch):
        self.log.append(self.name)
        self.counter += 1
        next_dispatch(action)
        return next_dispatch("another action")


class ExtraDispatchOnceMiddleware(RecordingMiddleware):
    """第一次被呼叫時，從鏈的最前端重新 dispatch 一個 action。"""

    def __init__(self, name, log):
        super().__init__(name, log)
        self.has_dispatched = False

    def __call__(self, store, action, next_dispatch):
        self.log.append(self.name)
        self.counter += 1
        result = next_dispatch(action)
        if not self.has_dispatched:
            self.has_dispatched = True
            store.dispatch("another action")
        return result
