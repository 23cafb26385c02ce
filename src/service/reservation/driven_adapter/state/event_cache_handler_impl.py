"""
Event Cache Handler Implementation

Kvrocks-based read-through snapshot cache.

Storage Format:
    Key: event:{event_id}
    Type: String (orjson-encoded Event snapshot)
    TTL: sliding, refreshed on every hit

    Key: event:{event_id}:version
    Type: String (integer, INCR on every invalidation)

A reader that missed takes the version before reading the store and fills
only if it is unchanged, so a snapshot read before an invalidation is never
written back after it.
"""

from typing import Optional

import orjson
from redis.exceptions import RedisError

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger
from src.platform.state.kvrocks_client import kvrocks_client
from src.service.reservation.app.interface.i_event_cache_handler import IEventCacheHandler
from src.service.reservation.domain.entity.event_entity import Event
from src.service.reservation.driven_adapter.state.key_str_generator import (
    make_event_cache_key,
    make_event_cache_version_key,
)


FILL_SCRIPT = """
if (redis.call("get", KEYS[2]) or "0") == ARGV[3] then
    redis.call("set", KEYS[1], ARGV[1], "EX", ARGV[2])
    return 1
end
return 0
"""

INVALIDATE_SCRIPT = """
redis.call("del", KEYS[1])
redis.call("incr", KEYS[2])
redis.call("expire", KEYS[2], ARGV[1])
return 1
"""


class EventCacheHandlerImpl(IEventCacheHandler):
    def __init__(self, *, ttl_seconds: Optional[int] = None):
        self.ttl_seconds = ttl_seconds or settings.EVENT_CACHE_TTL_SECONDS

    @Logger.io
    async def get(self, *, event_id: int) -> Optional[Event]:
        key = make_event_cache_key(event_id=event_id)
        try:
            client = kvrocks_client.get_client()
            raw = await client.get(key)
            if raw is None:
                Logger.base.debug(f'📭 [CACHE] Miss for event {event_id}')
                return None

            await client.expire(key, self.ttl_seconds)
            return Event.from_snapshot(orjson.loads(raw))
        except RedisError as e:
            Logger.base.warning(f'⚠️ [CACHE] Read failed for event {event_id}: {e}')
            return None
        except (orjson.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            Logger.base.warning(f'⚠️ [CACHE] Corrupt snapshot for event {event_id}: {e}')
            return None

    @Logger.io
    async def set(self, *, event: Event) -> None:
        if event.id is None:
            return
        key = make_event_cache_key(event_id=event.id)
        try:
            client = kvrocks_client.get_client()
            await client.set(key, orjson.dumps(event.to_snapshot()), ex=self.ttl_seconds)
        except RedisError as e:
            Logger.base.warning(f'⚠️ [CACHE] Write failed for event {event.id}: {e}')

    @Logger.io
    async def get_version(self, *, event_id: int) -> Optional[int]:
        try:
            client = kvrocks_client.get_client()
            raw = await client.get(make_event_cache_version_key(event_id=event_id))
            return int(raw) if raw is not None else 0
        except (RedisError, ValueError) as e:
            Logger.base.warning(f'⚠️ [CACHE] Version read failed for event {event_id}: {e}')
            return None

    @Logger.io
    async def fill(self, *, event: Event, version: int) -> bool:
        if event.id is None:
            return False
        try:
            client = kvrocks_client.get_client()
            written = await client.eval(  # type: ignore[misc]
                FILL_SCRIPT,
                2,
                make_event_cache_key(event_id=event.id),
                make_event_cache_version_key(event_id=event.id),
                orjson.dumps(event.to_snapshot()),
                self.ttl_seconds,
                str(version),
            )
        except RedisError as e:
            Logger.base.warning(f'⚠️ [CACHE] Fill failed for event {event.id}: {e}')
            return False

        if not written:
            Logger.base.debug(f'⏭️ [CACHE] Event {event.id} invalidated during read, fill skipped')
        return bool(written)

    @Logger.io
    async def invalidate(self, *, event_id: int) -> None:
        try:
            client = kvrocks_client.get_client()
            await client.eval(  # type: ignore[misc]
                INVALIDATE_SCRIPT,
                2,
                make_event_cache_key(event_id=event_id),
                make_event_cache_version_key(event_id=event_id),
                self.ttl_seconds,
            )
            Logger.base.debug(f'🧹 [CACHE] Invalidated event {event_id}')
        except RedisError as e:
            # The sliding TTL bounds how long a stale snapshot survives
            Logger.base.warning(f'⚠️ [CACHE] Invalidate failed for event {event_id}: {e}')
