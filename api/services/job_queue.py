"""Job queue service: submission, status and history of generation jobs."""
import logging
from typing import Any, Dict, List, Optional
import redis.asyncio as redis
from motor.motor_asyncio import AsyncIOMotorDatabase

from api.models.job import GenerationJobSpec
from api.services.publisher import PublisherService
from database.repositories.job_repo import JobRepository, JobStatus
from shared.config import settings
from shared.errors import NotFoundError, ValidationError
from shared.utils import unique_in_order

logger = logging.getLogger(__name__)


class GenerationQueue:
    """Front door of the generation pipeline.

    Submission persists a PENDING job and hands it to the worker pool through
    Redis. Jobs submitted with ``stream=True`` are persisted but not queued;
    a streaming session is their only executor.
    """

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        redis_client: redis.Redis,
        job_repo: Optional[JobRepository] = None,
        publisher: Optional[PublisherService] = None
    ):
        self.job_repo = job_repo or JobRepository(db)
        self.publisher = publisher or PublisherService(redis_client)

    async def submit(self, spec: GenerationJobSpec) -> Dict[str, Any]:
        """Validate, persist and enqueue a job. Returns the stored record."""
        topic = (spec.topic or "").strip()
        if not topic:
            raise ValidationError("Topic is required")
        if not spec.owner_id:
            raise ValidationError("Owner is required")

        job = await self.job_repo.create_job(
            owner_id=spec.owner_id,
            topic=topic,
            context=spec.context,
            outline=spec.outline,
            voice_profile_ids=unique_in_order(spec.voice_profile_ids),
            keywords=unique_in_order(spec.keywords)
        )
        job_id = job["_id"]

        if spec.stream:
            logger.info(f"Job {job_id} reserved for streaming")
            return job

        try:
            await self.publisher.publish_task(job_id)
        except redis.RedisError as e:
            # A job nobody will ever pick up must not sit in PENDING
            await self.job_repo.fail_job(job_id, f"Failed to enqueue job: {e}")
            raise

        try:
            await self.publisher.publish_job_update(job_id, JobStatus.PENDING)
        except redis.RedisError as e:
            logger.warning(f"Failed to publish update for job {job_id}: {e}")

        logger.info(f"Job {job_id} queued for owner {spec.owner_id}")
        return job

    async def status(self, job_id: str) -> Dict[str, Any]:
        """Current persisted state of a job."""
        job = await self.job_repo.get_job(job_id)
        if not job:
            raise NotFoundError(f"Job {job_id} not found", resource_id=job_id)
        return job

    async def list_for_owner(self, owner_id: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Most recent jobs of an owner, newest first."""
        if limit is None:
            limit = settings.history_default_limit
        limit = max(1, min(limit, settings.history_max_limit))
        return await self.job_repo.list_jobs_by_owner(owner_id, limit=limit)
