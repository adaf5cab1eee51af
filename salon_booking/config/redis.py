# salon_booking/config/redis.py
"""Redis client used by health checks to reach the Celery broker"""
from contextlib import asynccontextmanager
from typing import AsyncIterator

import redis.asyncio as redis

from salon_booking.config.settings import get_settings


@asynccontextmanager
async def broker_client() -> AsyncIterator[redis.Redis]:
    """Short-lived client for REDIS_URL, closed on exit"""
    settings = get_settings()
    client = redis.Redis.from_url(
        settings.REDIS_URL,
        socket_connect_timeout=2,
        socket_timeout=2,
    )
    try:
        yield client
    finally:
        await client.aclose()


async def ping_broker() -> bool:
    async with broker_client() as client:
        return bool(await client.ping())
