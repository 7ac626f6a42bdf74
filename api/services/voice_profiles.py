"""Voice profile service: style fingerprints built from writing samples."""
import logging
from typing import Any, Dict, List, Optional
from motor.motor_asyncio import AsyncIOMotorDatabase

from analysis.similarity import Embedder, SimilarityEngine, SimilarityMatch
from database.repositories.profile_repo import VoiceProfileRepository
from shared.errors import EmbeddingError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

SAMPLE_SEPARATOR = "\n\n"


def _clean_samples(samples: Optional[List[str]]) -> List[str]:
    cleaned = [sample.strip() for sample in samples or [] if sample and sample.strip()]
    if not cleaned:
        raise ValidationError("At least one writing sample is required")
    return cleaned


class VoiceProfileService:
    """Creates, updates and ranks voice profiles.

    Embeddings are computed before anything is written, so an embedding
    failure leaves the store untouched.
    """

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        embedder: Embedder,
        profile_repo: Optional[VoiceProfileRepository] = None
    ):
        self.profile_repo = profile_repo or VoiceProfileRepository(db)
        self.embedder = embedder
        self.similarity = SimilarityEngine(embedder)

    async def _embed_samples(self, samples: List[str]) -> List[float]:
        embedding = await self.embedder.embed(SAMPLE_SEPARATOR.join(samples))
        if not embedding:
            raise EmbeddingError(f"Embedding model {self.embedder.model_name} returned an empty vector")
        return embedding

    async def create(
        self,
        owner_id: str,
        name: str,
        samples: List[str],
        description: Optional[str] = None
    ) -> Dict[str, Any]:
        """Embed the samples and persist a new profile."""
        name = (name or "").strip()
        if not name:
            raise ValidationError("Profile name is required")
        samples = _clean_samples(samples)

        embedding = await self._embed_samples(samples)
        profile = await self.profile_repo.create_profile(
            owner_id=owner_id,
            name=name,
            samples=samples,
            embedding=embedding,
            model=self.embedder.model_name,
            description=description
        )
        logger.info(f"Created voice profile {profile['_id']} ({len(embedding)} dimensions)")
        return profile

    async def get(self, profile_id: str) -> Dict[str, Any]:
        profile = await self.profile_repo.get_profile(profile_id)
        if not profile:
            raise NotFoundError(f"Voice profile {profile_id} not found", resource_id=profile_id)
        return profile

    async def update(
        self,
        profile_id: str,
        name: Optional[str] = None,
        description: Optional[str] = None,
        samples: Optional[List[str]] = None
    ) -> Dict[str, Any]:
        """Patch a profile; new samples always re-embed."""
        fields: Dict[str, Any] = {}

        if name is not None:
            name = name.strip()
            if not name:
                raise ValidationError("Profile name cannot be blank")
            fields["name"] = name

        if description is not None:
            fields["description"] = description

        if samples is not None:
            samples = _clean_samples(samples)
            fields["samples"] = samples
            fields["embedding"] = await self._embed_samples(samples)
            fields["model"] = self.embedder.model_name

        if not fields:
            return await self.get(profile_id)

        profile = await self.profile_repo.update_profile(profile_id, fields)
        if not profile:
            raise NotFoundError(f"Voice profile {profile_id} not found", resource_id=profile_id)
        return profile

    async def delete(self, profile_id: str):
        if not await self.profile_repo.delete_profile(profile_id):
            raise NotFoundError(f"Voice profile {profile_id} not found", resource_id=profile_id)

    async def list_for_owner(self, owner_id: str) -> List[Dict[str, Any]]:
        return await self.profile_repo.list_profiles_by_owner(owner_id)

    async def find_similar(
        self,
        query_text: str,
        owner_id: str,
        limit: int = 5
    ) -> List[SimilarityMatch]:
        """Rank an owner's profiles by similarity to ``query_text``."""
        if not query_text or not query_text.strip():
            raise ValidationError("Query text is required")
        candidates = await self.profile_repo.list_embeddings_by_owner(owner_id)
        if not candidates:
            return []
        return await self.similarity.rank(query_text, candidates, limit)
