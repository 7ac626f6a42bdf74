"""Streaming session: live relay of generation fragments to one subscriber."""
import asyncio
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, List, Optional, Set
from motor.motor_asyncio import AsyncIOMotorDatabase

from analysis.scoring import ScoringEngine
from consumer.generator import GenerationClient
from consumer.worker import resolve_voice_samples
from database.repositories.job_repo import JobRepository
from database.repositories.profile_repo import VoiceProfileRepository
from shared.config import settings
from shared.utils import estimate_token_usage

logger = logging.getLogger(__name__)

CHUNK = "chunk"
DONE = "done"
ERROR = "error"
TERMINAL_EVENTS = (DONE, ERROR)

# Producers outlive their subscriber; hold references until they finish
_producers: Set[asyncio.Task] = set()


@dataclass
class StreamEvent:
    """One event of a streaming session."""
    type: str
    content: Optional[str] = None
    accumulated: Optional[str] = None
    error: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.type in TERMINAL_EVENTS

    def to_payload(self) -> Dict[str, Any]:
        if self.type == CHUNK:
            return {"type": CHUNK, "content": self.content, "accumulated": self.accumulated}
        if self.type == DONE:
            return {"type": DONE, "content": self.content}
        return {"type": ERROR, "error": self.error}

    def to_sse(self) -> str:
        """Server-sent event frame named after the event type."""
        return f"event: {self.type}\ndata: {json.dumps(self.to_payload())}\n\n"


class StreamingSession:
    """Runs generation inline for one job and forwards fragments as they arrive.

    The generation call runs in a producer task feeding a bounded queue; the
    subscriber drains that queue. When the subscriber goes away, or stops
    reading for longer than ``subscriber_timeout``, the producer keeps going
    (without queueing) so the job still reaches a terminal state.
    """

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        generator: GenerationClient,
        job_repo: Optional[JobRepository] = None,
        profile_repo: Optional[VoiceProfileRepository] = None,
        queue_size: Optional[int] = None,
        scoring: Optional[ScoringEngine] = None,
        subscriber_timeout: Optional[float] = None
    ):
        self.job_repo = job_repo or JobRepository(db)
        self.profile_repo = profile_repo or VoiceProfileRepository(db)
        self.generator = generator
        self.scoring = scoring or ScoringEngine(settings.reading_speed_wpm)
        self.subscriber_timeout = subscriber_timeout or settings.stream_subscriber_timeout
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=queue_size or settings.stream_queue_size)
        self._detached = False
        self.producer: Optional[asyncio.Task] = None

    async def open(
        self,
        job_id: str,
        topic: str,
        outline: Optional[str] = None,
        voice_profile_ids: Optional[List[str]] = None,
        context: Optional[str] = None
    ) -> AsyncIterator[StreamEvent]:
        """Mark the job PROCESSING, start generating and return the event stream.

        Raises ConflictOrNotFoundError (before any event exists) when the job
        is missing or already finished.
        """
        if self.producer is not None:
            raise RuntimeError("Streaming session already opened")

        job = await self.job_repo.mark_streaming(job_id)
        logger.info(f"Streaming session opened for job {job_id}")

        samples = await resolve_voice_samples(self.profile_repo, voice_profile_ids or [])

        self.producer = asyncio.create_task(
            self._produce(job_id, topic, outline, context, samples, job.get("keywords") or [])
        )
        _producers.add(self.producer)
        self.producer.add_done_callback(_producers.discard)

        return self._events()

    def detach(self):
        """Stop forwarding events; the producer still finishes the job."""
        self._detached = True
        while not self._queue.empty():
            self._queue.get_nowait()

    async def _events(self) -> AsyncIterator[StreamEvent]:
        try:
            while True:
                event = await self._queue.get()
                yield event
                if event.is_terminal:
                    break
        finally:
            self.detach()

    async def _emit(self, event: StreamEvent):
        if self._detached:
            return
        try:
            await asyncio.wait_for(self._queue.put(event), timeout=self.subscriber_timeout)
        except asyncio.TimeoutError:
            # Also covers a subscriber that never started iterating
            logger.warning(f"Subscriber stopped reading for {self.subscriber_timeout}s; detaching")
            self.detach()

    async def _produce(
        self,
        job_id: str,
        topic: str,
        outline: Optional[str],
        context: Optional[str],
        samples: List[str],
        keywords: List[str]
    ):
        accumulated = ""
        try:
            started = time.perf_counter()
            async for fragment in self.generator.generate_stream(
                topic=topic,
                outline=outline,
                context=context,
                voice_profile_samples=samples
            ):
                if not fragment:
                    continue
                accumulated += fragment
                await self._emit(StreamEvent(type=CHUNK, content=fragment, accumulated=accumulated))
            duration_ms = int((time.perf_counter() - started) * 1000)

            result = self.scoring.analyze(accumulated, keywords)

            written = await self.job_repo.complete_job(
                job_id,
                accumulated,
                metrics=result.to_dict(),
                duration_ms=duration_ms,
                token_usage=estimate_token_usage(accumulated)
            )
            if not written:
                logger.warning(f"Job {job_id} was already finished elsewhere; streamed result not stored")
            else:
                logger.info(f"Streaming job {job_id} completed (solid score {result.solid_score})")
            await self._emit(StreamEvent(type=DONE, content=accumulated))

        except Exception as e:
            message = str(e) or "Generation failed"
            logger.error(f"Streaming generation for job {job_id} failed: {message}")
            try:
                await self.job_repo.fail_job(job_id, message)
            except Exception:
                logger.exception(f"Failed to record failure of job {job_id}")
            await self._emit(StreamEvent(type=ERROR, error=message))
