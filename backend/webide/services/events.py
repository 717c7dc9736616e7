import json, logging
from webide.core.config import get_settings
from webide.queues.redis import get_redis, project_channel

settings = get_settings()
log = logging.getLogger(__name__)

NODE_CREATED = "node.created"
NODE_UPDATED = "node.updated"
NODE_MOVED = "node.moved"
NODE_DELETED = "node.deleted"


async def publish_node_event(project_id: str, event: str, ids: list[str]):
    """Tell open editors of a project that its tree changed."""
    if not settings.EVENTS_ENABLED:
        return
    payload = {"type": event, "project_id": project_id, "ids": ids}
    async with get_redis() as r:
        await r.publish(project_channel(project_id), json.dumps(payload).encode())
    log.debug("published %s for %d nodes", event, len(ids), extra={"project_id": project_id})
