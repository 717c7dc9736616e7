from redis import asyncio as aioredis
from contextlib import asynccontextmanager
from webide.core.config import get_settings

settings = get_settings()


@asynccontextmanager
async def get_redis():
    r = aioredis.from_url(settings.REDIS_URL, decode_responses=False)
    try:
        yield r
    finally:
        await r.aclose()


EVENT_PREFIX = settings.EVENT_CHANNEL_PREFIX


def project_channel(project_id: str) -> str:
    return f"{EVENT_PREFIX}{project_id}"
