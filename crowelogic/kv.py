"""
Key-value store abstraction over hashes and lists.

Supports an in-memory fallback for tests/local runs and a Redis-backed
implementation for the hosted store. Records cross this interface as
JSON-compatible dicts; the Redis backend stores them as JSON text.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol
from urllib.parse import urlparse

import redis.asyncio as redis
from redis import exceptions as redis_exceptions

from crowelogic.errors import BackendUnavailable

logger = logging.getLogger(__name__)

REDIS_TLS_PORT = 6379

# Errors that mean the store is unreachable or refused our credentials.
UNAVAILABLE_ERRORS = (
    redis_exceptions.ConnectionError,
    redis_exceptions.TimeoutError,
    redis_exceptions.AuthenticationError,
)


class KeyValueStore(Protocol):
    """Minimal hash/list interface the repositories need from storage."""

    async def get_field(self, collection: str, field_id: str) -> Optional[dict]:
        ...

    async def set_field(self, collection: str, field_id: str, record: dict) -> None:
        ...

    async def get_all(self, collection: str) -> dict[str, dict]:
        ...

    async def push_front(self, list_key: str, record: dict) -> None:
        ...

    async def read_range(self, list_key: str, start: int, end: int) -> list[dict]:
        ...

    async def trim(self, list_key: str, start: int, end: int) -> None:
        ...

    async def aclose(self) -> None:
        ...


def _json_copy(record: Any) -> Any:
    # Same shape the Redis backend hands back after a JSON round-trip.
    return json.loads(json.dumps(record))


def _list_bounds(length: int, start: int, end: int) -> tuple[int, int]:
    """Translate inclusive Redis-style indexes into a Python slice."""
    if start < 0:
        start = max(length + start, 0)
    if end < 0:
        end = length + end
    end = min(end, length - 1)
    if start > end:
        return 0, 0
    return start, end + 1


@dataclass
class InMemoryKeyValueStore:
    """
    Process-local store for development and tests.

    Not shared across processes and lost on restart. Writes and reads go
    through a JSON round-trip so callers observe the same values the Redis
    backend would return.
    """

    hashes: dict[str, dict[str, dict]] = field(default_factory=dict)
    lists: dict[str, list[dict]] = field(default_factory=dict)

    async def get_field(self, collection: str, field_id: str) -> Optional[dict]:
        record = self.hashes.get(collection, {}).get(field_id)
        return _json_copy(record) if record is not None else None

    async def set_field(self, collection: str, field_id: str, record: dict) -> None:
        self.hashes.setdefault(collection, {})[field_id] = _json_copy(record)

    async def get_all(self, collection: str) -> dict[str, dict]:
        return _json_copy(self.hashes.get(collection, {}))

    async def push_front(self, list_key: str, record: dict) -> None:
        self.lists.setdefault(list_key, []).insert(0, _json_copy(record))

    async def read_range(self, list_key: str, start: int, end: int) -> list[dict]:
        items = self.lists.get(list_key, [])
        lo, hi = _list_bounds(len(items), start, end)
        return _json_copy(items[lo:hi])

    async def trim(self, list_key: str, start: int, end: int) -> None:
        items = self.lists.get(list_key)
        if items is None:
            return
        lo, hi = _list_bounds(len(items), start, end)
        if lo >= hi:
            # Redis deletes a list trimmed to nothing.
            del self.lists[list_key]
            return
        self.lists[list_key] = items[lo:hi]

    async def aclose(self) -> None:
        return None

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.hashes.clear()
        self.lists.clear()


def redis_url_for(url: str) -> str:
    """
    Return a Redis protocol URL for the configured store URL.

    Hosted stores advertise an https:// REST endpoint; the same host serves
    the TLS Redis protocol, which is what redis-py speaks.
    """
    parsed = urlparse(url.strip())
    if parsed.scheme in ("redis", "rediss", "unix"):
        return url.strip()
    if parsed.scheme in ("http", "https") and parsed.hostname:
        return f"rediss://default@{parsed.hostname}:{REDIS_TLS_PORT}"
    raise ValueError(f"Unsupported key-value store URL: {url!r}")


@dataclass
class RedisKeyValueStore:
    """Redis-backed store using hash-per-collection and list-per-key encodings."""

    url: str
    token: str
    client: Any = None

    def __post_init__(self):
        if self.client is None:
            self.client = redis.Redis.from_url(
                redis_url_for(self.url),
                password=self.token,
                decode_responses=True,
            )

    async def _call(self, command: str, *args):
        try:
            return await getattr(self.client, command)(*args)
        except UNAVAILABLE_ERRORS as exc:
            logger.exception("Key-value store %s failed", command.upper())
            raise BackendUnavailable(f"Key-value store unavailable: {exc}") from exc

    async def get_field(self, collection: str, field_id: str) -> Optional[dict]:
        raw = await self._call("hget", collection, field_id)
        return json.loads(raw) if raw is not None else None

    async def set_field(self, collection: str, field_id: str, record: dict) -> None:
        await self._call("hset", collection, field_id, json.dumps(record))

    async def get_all(self, collection: str) -> dict[str, dict]:
        raw = await self._call("hgetall", collection)
        return {key: json.loads(value) for key, value in (raw or {}).items()}

    async def push_front(self, list_key: str, record: dict) -> None:
        await self._call("lpush", list_key, json.dumps(record))

    async def read_range(self, list_key: str, start: int, end: int) -> list[dict]:
        raw = await self._call("lrange", list_key, start, end)
        return [json.loads(item) for item in raw or []]

    async def trim(self, list_key: str, start: int, end: int) -> None:
        await self._call("ltrim", list_key, start, end)

    async def aclose(self) -> None:
        await self.client.aclose()
