"""RedisNotifier — fan-out over Pub/Sub plus a capped per-user inbox.

Keys:
  channel: "<prefix>:<user_id>"        live subscribers (websocket/email workers)
  inbox:   "<prefix>:inbox:<user_id>"  LIST, newest first, trimmed to inbox_size
"""

import json
import logging
from typing import Any

import redis.asyncio as aioredis

from config.settings import settings
from src.bx_common.redis_client import get_redis
from src.bx_notify.domain.notifier import Notification

logger = logging.getLogger(__name__)


class RedisNotifier:
    def __init__(
        self,
        redis: aioredis.Redis | None = None,
        prefix: str | None = None,
        inbox_size: int | None = None,
    ) -> None:
        self._redis = redis
        self._prefix = prefix or settings.NOTIFICATION_CHANNEL_PREFIX
        self._inbox_size = inbox_size or settings.NOTIFICATION_INBOX_SIZE

    def channel_for(self, user_id: str) -> str:
        return f"{self._prefix}:{user_id}"

    def inbox_for(self, user_id: str) -> str:
        return f"{self._prefix}:inbox:{user_id}"

    async def _client(self) -> aioredis.Redis:
        if self._redis is None:
            self._redis = await get_redis()
        return self._redis

    async def notify(self, user_id: str, event_type: str, payload: dict[str, Any]) -> None:
        message = json.dumps(Notification(user_id, event_type, payload).to_dict())
        redis = await self._client()
        async with redis.pipeline(transaction=True) as pipe:
            pipe.publish(self.channel_for(user_id), message)
            pipe.lpush(self.inbox_for(user_id), message)
            pipe.ltrim(self.inbox_for(user_id), 0, self._inbox_size - 1)
            await pipe.execute()
        logger.debug("Notified user=%s event=%s", user_id, event_type)

    async def recent(self, user_id: str, limit: int) -> list[dict[str, Any]]:
        """Newest-first notifications from the user's inbox."""
        redis = await self._client()
        raw = await redis.lrange(self.inbox_for(user_id), 0, limit - 1)
        return [json.loads(item) for item in raw]
