"""Worker processes for consuming and executing generation tasks."""
import asyncio
import json
import logging
import time
from typing import Optional, Dict, Any, List
import redis.asyncio as redis
from motor.motor_asyncio import AsyncIOMotorDatabase

from analysis.scoring import ScoringEngine
from consumer.generator import GenerationClient
from database.repositories.job_repo import JobRepository, JobStatus
from database.repositories.profile_repo import VoiceProfileRepository
from shared.config import settings
from shared.errors import ConflictOrNotFoundError, GenerationError
from shared.utils import calculate_exponential_backoff, estimate_token_usage

logger = logging.getLogger(__name__)


async def resolve_voice_samples(
    profile_repo: VoiceProfileRepository,
    profile_ids: List[str]
) -> List[str]:
    """Collect writing samples for each referenced profile, in order.

    Missing or unreadable profiles are logged and skipped.
    """
    samples: List[str] = []
    for profile_id in profile_ids:
        try:
            profile_samples = await profile_repo.get_samples(profile_id)
        except Exception as e:
            logger.warning(f"Failed to get samples for profile {profile_id}: {e}")
            continue
        if profile_samples is None:
            logger.warning(f"Voice profile {profile_id} not found, skipping")
            continue
        samples.extend(profile_samples)
    return samples


class GenerationWorker:
    """Worker that processes generation tasks from the Redis queue."""

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        redis_client: redis.Redis,
        worker_id: str = "worker-1",
        generator: Optional[GenerationClient] = None,
        scoring: Optional[ScoringEngine] = None,
        job_repo: Optional[JobRepository] = None,
        profile_repo: Optional[VoiceProfileRepository] = None
    ):
        self.db = db
        self.redis = redis_client
        self.worker_id = worker_id
        self.job_repo = job_repo or JobRepository(db)
        self.profile_repo = profile_repo or VoiceProfileRepository(db)
        self.generator = generator or GenerationClient()
        self.scoring = scoring or ScoringEngine(settings.reading_speed_wpm)
        self.queue_name = settings.redis_queue_name
        self.max_attempts = max(1, settings.max_attempts)
        self.retry_base_delay = settings.retry_base_delay
        self.retry_max_delay = settings.retry_max_delay
        self.running = True

    async def start(self):
        """Start the worker loop."""
        logger.info(f"Worker {self.worker_id} starting...")

        while self.running:
            try:
                task = await self._get_next_task()
            except redis.RedisError as e:
                logger.error(f"Worker {self.worker_id} failed to poll queue: {e}")
                task = None

            if task:
                await self.run_task(task)
            else:
                # No tasks available, wait before polling again
                await asyncio.sleep(settings.worker_poll_interval)

        logger.info(f"Worker {self.worker_id} stopped")

    async def stop(self):
        """Stop the worker after its current job."""
        logger.info(f"Worker {self.worker_id} stopping...")
        self.running = False

    async def _get_next_task(self) -> Optional[Dict[str, Any]]:
        """Pop the oldest task (producers LPUSH, workers RPOP)."""
        result = await self.redis.rpop(self.queue_name)
        if not result:
            return None
        try:
            return json.loads(result)
        except json.JSONDecodeError:
            logger.error(f"Failed to parse task: {result}")
            return None

    async def run_task(self, task: Dict[str, Any]):
        """Run one task; a crash here never escapes into the worker loop."""
        job_id = task.get("job_id")
        if not job_id:
            logger.error(f"Task without job_id: {task}")
            return

        try:
            await self.process_job(job_id)
        except Exception:
            logger.exception(f"Worker {self.worker_id} crashed on job {job_id}")

    async def process_job(self, job_id: str) -> Optional[str]:
        """Claim and execute a job. Returns the terminal status written, if any."""
        try:
            job = await self.job_repo.claim_job(job_id, self.worker_id)
        except ConflictOrNotFoundError:
            logger.info(f"Worker {self.worker_id} skipping job {job_id}: already claimed or gone")
            return None

        logger.info(f"Worker {self.worker_id} claimed job {job_id}")
        await self._publish_update(job_id, JobStatus.PROCESSING)

        try:
            samples = await resolve_voice_samples(
                self.profile_repo, job.get("voice_profile_ids") or []
            )

            started = time.perf_counter()
            content = await self._generate_with_retry(job, samples)
            duration_ms = int((time.perf_counter() - started) * 1000)

            result = self.scoring.analyze(content, job.get("keywords") or [])

            written = await self.job_repo.complete_job(
                job_id,
                content,
                metrics=result.to_dict(),
                duration_ms=duration_ms,
                token_usage=estimate_token_usage(content)
            )
            status = JobStatus.COMPLETED
            logger.info(f"Generation job {job_id} completed (solid score {result.solid_score})")
        except Exception as e:
            message = str(e) or e.__class__.__name__
            logger.error(f"Generation job {job_id} failed: {message}")
            try:
                written = await self.job_repo.fail_job(job_id, message)
            except Exception:
                logger.exception(f"Failed to record failure of job {job_id}")
                return None
            status = JobStatus.FAILED

        if not written:
            logger.warning(f"Job {job_id} was already finished elsewhere; {status} write dropped")
            return None

        await self._publish_update(job_id, status)
        return status

    async def _generate_with_retry(self, job: Dict[str, Any], samples: List[str]) -> str:
        """Run the generation step up to ``max_attempts`` times."""
        job_id = job["_id"]
        last_error: Optional[GenerationError] = None

        for attempt in range(1, self.max_attempts + 1):
            await self.job_repo.record_attempt(job_id, attempt)
            logger.info(f"Worker {self.worker_id} job {job_id} attempt {attempt}/{self.max_attempts}")

            try:
                return await self.generator.generate(
                    topic=job["topic"],
                    outline=job.get("outline"),
                    context=job.get("context"),
                    voice_profile_samples=samples
                )
            except GenerationError as e:
                last_error = e
                logger.warning(f"Job {job_id} attempt {attempt} failed: {e}")

            if attempt < self.max_attempts:
                delay = calculate_exponential_backoff(
                    attempt - 1, self.retry_base_delay, self.retry_max_delay
                )
                logger.info(f"Retrying job {job_id} in {delay}s")
                await asyncio.sleep(delay)

        raise last_error

    async def _publish_update(self, job_id: str, status: str):
        """Publish a best-effort progress update for websocket watchers."""
        update = {
            "type": "job_update",
            "job_id": job_id,
            "status": status,
            "worker_id": self.worker_id
        }
        try:
            await self.redis.publish(settings.redis_update_channel, json.dumps(update))
        except redis.RedisError as e:
            logger.warning(f"Failed to publish update for job {job_id}: {e}")


class WorkerPool:
    """Fixed-size pool of workers sharing one queue."""

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        redis_client: redis.Redis,
        size: Optional[int] = None,
        name_prefix: str = "worker",
        generator: Optional[GenerationClient] = None,
        **worker_kwargs
    ):
        self.size = max(1, size or settings.worker_concurrency)
        shared_generator = generator or GenerationClient()
        self.workers = [
            GenerationWorker(
                db,
                redis_client,
                worker_id=f"{name_prefix}-{index + 1}",
                generator=shared_generator,
                **worker_kwargs
            )
            for index in range(self.size)
        ]

    async def start(self):
        """Run every worker until stopped."""
        logger.info(f"Starting worker pool with {self.size} workers")
        await asyncio.gather(*(worker.start() for worker in self.workers))

    async def stop(self):
        """Ask every worker to stop after its current job."""
        for worker in self.workers:
            await worker.stop()
