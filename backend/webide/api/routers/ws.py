from fastapi import APIRouter, WebSocket, status
from jose import JWTError
from webide.core.errors import StoreError
from webide.core.security import decode_token
from webide.db import session as db_session
from webide.api.deps import load_project
from webide.queues.redis import get_redis, project_channel

router = APIRouter()


@router.websocket("/projects/{pid}/events")
async def ws_project_events(ws: WebSocket, pid: str, token: str | None = None):
    try:
        user_id = decode_token(token) if token else None
    except JWTError:
        await ws.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    async with db_session.AsyncSessionLocal() as db:
        try:
            await load_project(db, pid, user_id)
        except StoreError:
            await ws.close(code=status.WS_1008_POLICY_VIOLATION)
            return
    await ws.accept()
    channel = project_channel(pid)
    async with get_redis() as r:
        pubsub = r.pubsub()
        await pubsub.subscribe(channel)
        try:
            # Immediately tell the client we're connected
            await ws.send_json({"type": "state", "status": "subscribed"})
            async for msg in pubsub.listen():
                if msg["type"] != "message":
                    continue
                await ws.send_bytes(msg["data"])  # already JSON bytes
        finally:
            await pubsub.unsubscribe(channel)
            await ws.close()
