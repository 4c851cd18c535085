"""Redis connection helpers for the filing cache."""

import redis.asyncio as redis


def create_redis(redis_url: str) -> redis.Redis:
    """Create a Redis client. The caller owns it and must close it."""
    options = {"encoding": "utf-8", "decode_responses": True}
    if redis_url.startswith("rediss://"):
        # Upstash-style TLS endpoints use certificates we don't verify
        options["ssl_cert_reqs"] = None
    return redis.from_url(redis_url, **options)


async def cache_ping(client: redis.Redis) -> tuple[bool, str]:
    """Check if Redis is reachable. Returns (success, message)."""
    try:
        await client.ping()
        return True, "connected"
    except redis.RedisError as e:
        return False, str(e)
