"""Test helpers and shared constants."""

import asyncio

PATH_MOCK = "tests/mocks"


class StaticQuery:
    """Query returning a fixed result (or raising a fixed error)."""

    def __init__(self, result=None, error=None, delay=0):
        self.result = result
        self.error = error
        self.delay = delay
        self.calls = 0

    async def exec(self):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.result


class CallbackQuery:
    """Callback-style query: ``exec(callback)`` with ``callback(error, result)``."""

    def __init__(self, result=None, error=None, times=1):
        self.result = result
        self.error = error
        self.times = times

    def exec(self, callback):
        for _ in range(self.times):
            callback(self.error, self.result)


class Recorder:
    """Collects named events in the order they happen."""

    def __init__(self):
        self.events = []

    def handler(self, name, *, delay=0, error=None):
        async def _handler():
            self.events.append(f"{name}:start")
            if delay:
                await asyncio.sleep(delay)
            else:
                await asyncio.sleep(0)
            self.events.append(f"{name}:end")
            if error is not None:
                raise error

        _handler.__name__ = name
        return _handler

    def count(self, event):
        return self.events.count(event)
