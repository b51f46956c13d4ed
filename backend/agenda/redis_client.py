# backend/agenda/redis_client.py

from redis import Redis

from .config import settings

REDIS_SOCKET_TIMEOUT = 2.0


def make_redis(url: str | None) -> Redis | None:
    if not url:
        return None
    return Redis.from_url(
        url,
        socket_timeout=REDIS_SOCKET_TIMEOUT,
        socket_connect_timeout=REDIS_SOCKET_TIMEOUT,
        decode_responses=True,
    )


# None when REDIS_URL is unset: event emission becomes a no-op
redis_client = make_redis(settings.redis_url)
