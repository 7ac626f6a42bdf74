"""FastAPI dependencies for the service layer."""
from functools import lru_cache
from fastapi import Depends
from motor.motor_asyncio import AsyncIOMotorDatabase
import redis.asyncio as redis

from analysis.scoring import ScoringEngine
from analysis.similarity import EmbeddingModel, get_embedding_model
from api.services.job_queue import GenerationQueue
from api.services.streaming import StreamingSession
from api.services.voice_profiles import VoiceProfileService
from consumer.generator import GenerationClient
from database.connection import get_db, get_redis
from shared.config import settings


@lru_cache
def get_generation_client() -> GenerationClient:
    """Shared generation client (the SDK client is safe for concurrent use)."""
    return GenerationClient()


@lru_cache
def get_scoring_engine() -> ScoringEngine:
    return ScoringEngine(settings.reading_speed_wpm)


async def get_job_queue(
    db: AsyncIOMotorDatabase = Depends(get_db),
    redis_client: redis.Redis = Depends(get_redis)
) -> GenerationQueue:
    return GenerationQueue(db, redis_client)


async def get_profile_service(
    db: AsyncIOMotorDatabase = Depends(get_db),
    embedder: EmbeddingModel = Depends(get_embedding_model)
) -> VoiceProfileService:
    return VoiceProfileService(db, embedder)


async def get_streaming_session(
    db: AsyncIOMotorDatabase = Depends(get_db),
    generator: GenerationClient = Depends(get_generation_client),
    scoring: ScoringEngine = Depends(get_scoring_engine)
) -> StreamingSession:
    """A fresh session per connection."""
    return StreamingSession(db, generator, scoring=scoring)
