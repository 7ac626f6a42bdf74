"""Job repository for CRUD operations on the generation_jobs collection."""
from typing import Optional, List, Dict, Any
from motor.motor_asyncio import AsyncIOMotorDatabase
from shared.errors import ConflictOrNotFoundError
from shared.utils import generate_job_id, get_utc_now


class JobStatus:
    """Job status constants."""
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    ACTIVE = (PENDING, PROCESSING)
    TERMINAL = (COMPLETED, FAILED)


STREAM_WORKER_ID = "stream"


class JobRepository:
    """Repository for generation job CRUD operations.

    Status changes are conditional writes so that transitions stay monotone:
    claims only match PENDING jobs and terminal writes only match jobs that
    are not terminal yet.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        self.collection = db.generation_jobs

    async def create_job(
        self,
        owner_id: str,
        topic: str,
        context: Optional[str] = None,
        outline: Optional[str] = None,
        voice_profile_ids: Optional[List[str]] = None,
        keywords: Optional[List[str]] = None
    ) -> Dict[str, Any]:
        """Create a new PENDING job record."""
        job_id = generate_job_id()
        now = get_utc_now()

        job = {
            "_id": job_id,
            "owner_id": owner_id,
            "topic": topic,
            "context": context,
            "outline": outline,
            "voice_profile_ids": voice_profile_ids or [],
            "keywords": keywords or [],
            "status": JobStatus.PENDING,
            "content": None,
            "error": None,
            "metrics": None,
            "attempts": 0,
            "duration_ms": None,
            "token_usage": None,
            "worker_id": None,
            "created_at": now,
            "updated_at": now,
            "started_at": None,
            "completed_at": None
        }

        await self.collection.insert_one(job)
        return job

    async def get_job(self, job_id: str) -> Optional[Dict[str, Any]]:
        """Get a job by ID."""
        return await self.collection.find_one({"_id": job_id})

    async def claim_job(self, job_id: str, worker_id: str) -> Dict[str, Any]:
        """Atomically move a job from PENDING to PROCESSING.

        Raises ConflictOrNotFoundError when the job is missing or another
        claimant got there first.
        """
        now = get_utc_now()
        result = await self.collection.find_one_and_update(
            {"_id": job_id, "status": JobStatus.PENDING},
            {
                "$set": {
                    "status": JobStatus.PROCESSING,
                    "worker_id": worker_id,
                    "started_at": now,
                    "updated_at": now
                }
            },
            return_document=True
        )
        if result is None:
            raise ConflictOrNotFoundError(
                f"Job {job_id} is not claimable", resource_id=job_id
            )
        return result

    async def mark_streaming(self, job_id: str) -> Dict[str, Any]:
        """Mark a job PROCESSING on behalf of a streaming session.

        Unlike a claim this also matches a job a worker already holds; it
        only refuses missing or terminal jobs.
        """
        now = get_utc_now()
        result = await self.collection.find_one_and_update(
            {"_id": job_id, "status": {"$in": list(JobStatus.ACTIVE)}},
            {
                "$set": {
                    "status": JobStatus.PROCESSING,
                    "worker_id": STREAM_WORKER_ID,
                    "started_at": now,
                    "updated_at": now
                }
            },
            return_document=True
        )
        if result is None:
            raise ConflictOrNotFoundError(
                f"Job {job_id} is missing or already finished", resource_id=job_id
            )
        return result

    async def record_attempt(self, job_id: str, attempt: int) -> bool:
        """Persist the number of generation attempts made so far."""
        result = await self.collection.update_one(
            {"_id": job_id, "status": JobStatus.PROCESSING},
            {"$set": {"attempts": attempt, "updated_at": get_utc_now()}}
        )
        return result.modified_count > 0

    async def complete_job(
        self,
        job_id: str,
        content: str,
        metrics: Optional[Dict[str, Any]] = None,
        duration_ms: Optional[int] = None,
        token_usage: Optional[int] = None
    ) -> bool:
        """Mark a job as completed with its content.

        Returns False when the job was already terminal (or gone), in which
        case nothing is written.
        """
        now = get_utc_now()
        result = await self.collection.update_one(
            {"_id": job_id, "status": {"$in": list(JobStatus.ACTIVE)}},
            {
                "$set": {
                    "status": JobStatus.COMPLETED,
                    "content": content,
                    "metrics": metrics,
                    "error": None,
                    "duration_ms": duration_ms,
                    "token_usage": token_usage,
                    "updated_at": now,
                    "completed_at": now
                }
            }
        )
        return result.modified_count > 0

    async def fail_job(self, job_id: str, error: str) -> bool:
        """Mark a job as failed with the captured error message."""
        now = get_utc_now()
        result = await self.collection.update_one(
            {"_id": job_id, "status": {"$in": list(JobStatus.ACTIVE)}},
            {
                "$set": {
                    "status": JobStatus.FAILED,
                    "error": error,
                    "content": None,
                    "metrics": None,
                    "updated_at": now,
                    "completed_at": now
                }
            }
        )
        return result.modified_count > 0

    async def list_jobs_by_owner(
        self,
        owner_id: str,
        limit: int = 20
    ) -> List[Dict[str, Any]]:
        """List an owner's jobs, newest first."""
        cursor = self.collection.find({"owner_id": owner_id}).sort("created_at", -1).limit(limit)
        return await cursor.to_list(length=limit)
