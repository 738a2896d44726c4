import logging
from functools import lru_cache

from redis.asyncio import Redis

from lending_admin.core.settings import settings

logger = logging.getLogger(__name__)

KEY_PREFIX = "lending_admin"


@lru_cache(maxsize=1)
def get_redis_client() -> Redis:
    return Redis.from_url(settings.redis_url, decode_responses=True)


async def close_redis_client() -> None:
    """Close the shared client if one was opened; later calls open a fresh one."""
    if get_redis_client.cache_info().currsize == 0:
        return
    client = get_redis_client()
    get_redis_client.cache_clear()
    await client.aclose()
    logger.info("Redis client closed")


def redis_key(*parts: str) -> str:
    return ":".join([KEY_PREFIX, *(str(part) for part in parts)])
