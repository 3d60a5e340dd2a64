"""
Shared test doubles: a deterministic clock and id source, and an async
stand-in for the redis client that stores strings like the real server.
"""

from __future__ import annotations

import itertools
from contextlib import ExitStack, contextmanager
from unittest.mock import patch

CLOCK_TARGETS = (
    "crowelogic.repository.now_ms",
    "crowelogic.chats.now_ms",
    "crowelogic.tasks.now_ms",
    "crowelogic.farms.now_ms",
    "crowelogic.observations.now_ms",
)

ID_TARGETS = (
    "crowelogic.chats.new_id",
    "crowelogic.tasks.new_id",
    "crowelogic.farms.new_id",
    "crowelogic.observations.new_id",
)


@contextmanager
def ticking_clock(start: int = 1_700_000_000_000):
    """Every call to now_ms returns a value one millisecond later than the last."""
    ticks = itertools.count(start)
    with ExitStack() as stack:
        for target in CLOCK_TARGETS:
            stack.enter_context(patch(target, side_effect=lambda: next(ticks)))
        yield


@contextmanager
def sequential_ids(prefix: str = "id"):
    counter = itertools.count(1)
    with ExitStack() as stack:
        for target in ID_TARGETS:
            stack.enter_context(
                patch(target, side_effect=lambda: f"{prefix}{next(counter):04d}")
            )
        yield


def _redis_slice(items: list, start: int, end: int) -> list:
    n = len(items)
    if start < 0:
        start += n
    if end < 0:
        end += n
    start = max(start, 0)
    end = min(end, n - 1)
    return items[start : end + 1] if start <= end else []


class FakeAsyncRedis:
    """Implements the handful of commands RedisKeyValueStore issues."""

    def __init__(self):
        self.hashes: dict[str, dict[str, str]] = {}
        self.lists: dict[str, list[str]] = {}
        self.commands: list[str] = []
        self.closed = False

    @staticmethod
    def _require_text(value):
        if not isinstance(value, str):
            raise TypeError(f"expected str payload, got {type(value).__name__}")

    async def hget(self, key, field):
        self.commands.append("hget")
        return self.hashes.get(key, {}).get(field)

    async def hset(self, key, field, value):
        self.commands.append("hset")
        self._require_text(value)
        self.hashes.setdefault(key, {})[field] = value
        return 1

    async def hgetall(self, key):
        self.commands.append("hgetall")
        return dict(self.hashes.get(key, {}))

    async def lpush(self, key, value):
        self.commands.append("lpush")
        self._require_text(value)
        self.lists.setdefault(key, []).insert(0, value)
        return len(self.lists[key])

    async def lrange(self, key, start, end):
        self.commands.append("lrange")
        return list(_redis_slice(self.lists.get(key, []), start, end))

    async def ltrim(self, key, start, end):
        self.commands.append("ltrim")
        if key not in self.lists:
            return True
        kept = _redis_slice(self.lists[key], start, end)
        if kept:
            self.lists[key] = kept
        else:
            del self.lists[key]
        return True

    async def aclose(self):
        self.closed = True
