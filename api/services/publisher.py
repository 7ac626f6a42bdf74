"""Publisher service for pushing generation tasks to the Redis queue."""
import json
import redis.asyncio as redis
from shared.config import settings
from shared.utils import generate_task_id


class PublisherService:
    """Service for publishing generation tasks and job updates."""

    def __init__(self, redis_client: redis.Redis):
        self.redis = redis_client
        self.queue_name = settings.redis_queue_name
        self.update_channel = settings.redis_update_channel

    async def publish_task(self, job_id: str) -> str:
        """Publish a generation task for a job."""
        task_id = generate_task_id()

        task = {
            "task_id": task_id,
            "job_id": job_id
        }

        # LPUSH here and RPOP in the worker keeps the queue FIFO
        await self.redis.lpush(self.queue_name, json.dumps(task))

        return task_id

    async def get_queue_length(self) -> int:
        """Get the number of tasks waiting for a worker."""
        return await self.redis.llen(self.queue_name)

    async def publish_job_update(self, job_id: str, status: str):
        """Publish a job update to the update channel for websocket watchers."""
        update = {
            "type": "job_update",
            "job_id": job_id,
            "status": status
        }
        await self.redis.publish(self.update_channel, json.dumps(update))
