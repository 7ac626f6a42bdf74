"""Writing-style similarity engine.

Voice profiles are compared as sentence embeddings. The embedding model is a
process-wide, lazily loaded resource; services receive it through dependency
injection so tests can hand in a fake.
"""
import asyncio
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence

import numpy as np

from shared.config import settings
from shared.errors import EmbeddingError

logger = logging.getLogger(__name__)


class Embedder(Protocol):
    """Anything that can turn text into a fixed-length vector."""

    model_name: str

    async def embed(self, text: str) -> List[float]:
        ...


class EmbeddingModel:
    """Sentence-transformers encoder loaded at most once per process."""

    _instance: Optional["EmbeddingModel"] = None
    _instance_lock = threading.Lock()

    def __init__(self, model_name: str, device: Optional[str] = None):
        self.model_name = model_name
        self.device = device
        self._encoder: Any = None
        self._load_lock = threading.Lock()

    @classmethod
    def instance(cls) -> "EmbeddingModel":
        """Return the process-wide model, creating it on first use."""
        if cls._instance is None:
            with cls._instance_lock:
                if cls._instance is None:
                    cls._instance = cls(
                        settings.embedding_model_name,
                        device=settings.embedding_device
                    )
        return cls._instance

    @classmethod
    def reset_instance(cls):
        """Forget the process-wide model (used on shutdown and in tests)."""
        with cls._instance_lock:
            cls._instance = None

    def _get_encoder(self):
        if self._encoder is None:
            with self._load_lock:
                if self._encoder is None:
                    try:
                        from sentence_transformers import SentenceTransformer
                        logger.info(f"Loading embedding model {self.model_name}")
                        self._encoder = SentenceTransformer(self.model_name, device=self.device)
                    except Exception as e:
                        raise EmbeddingError(
                            f"Embedding model {self.model_name} unavailable: {e}"
                        ) from e
        return self._encoder

    def encode(self, text: str) -> List[float]:
        """Blocking encode of a single text."""
        encoder = self._get_encoder()
        try:
            vector = encoder.encode(text, show_progress_bar=False)
        except Exception as e:
            raise EmbeddingError(f"Failed to generate text embedding: {e}") from e
        return np.asarray(vector, dtype=np.float64).ravel().tolist()

    async def embed(self, text: str) -> List[float]:
        """Encode off the event loop."""
        return await asyncio.to_thread(self.encode, text)


def get_embedding_model() -> EmbeddingModel:
    """Dependency for getting the shared embedding model."""
    return EmbeddingModel.instance()


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity in [-1, 1]; 0.0 when either vector has zero magnitude."""
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    if va.shape != vb.shape:
        raise ValueError(f"Vector dimensions differ: {va.shape[0]} != {vb.shape[0]}")

    norm_a = float(np.linalg.norm(va))
    norm_b = float(np.linalg.norm(vb))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0

    value = float(np.dot(va, vb)) / (norm_a * norm_b)
    return max(-1.0, min(1.0, value))


@dataclass
class SimilarityMatch:
    """One ranked voice profile."""
    profile_id: str
    name: str
    similarity: float
    samples: List[str] = field(default_factory=list)


class SimilarityEngine:
    """Ranks stored voice profiles against a piece of text."""

    def __init__(self, embedder: Embedder):
        self.embedder = embedder

    async def embed(self, text: str) -> List[float]:
        return await self.embedder.embed(text)

    @staticmethod
    def similarity(a: Sequence[float], b: Sequence[float]) -> float:
        return cosine_similarity(a, b)

    async def rank(
        self,
        query_text: str,
        candidates: Sequence[Dict[str, Any]],
        limit: int = 5
    ) -> List[SimilarityMatch]:
        """Embed ``query_text`` once and rank candidate profiles by similarity."""
        query = await self.embed(query_text)

        matches = []
        for profile in candidates:
            embedding = profile.get("embedding") or []
            if len(embedding) != len(query):
                logger.warning(
                    f"Skipping profile {profile.get('_id')}: "
                    f"embedding has {len(embedding)} dimensions, expected {len(query)}"
                )
                continue
            matches.append(SimilarityMatch(
                profile_id=profile["_id"],
                name=profile.get("name", ""),
                similarity=cosine_similarity(query, embedding),
                samples=list(profile.get("samples") or [])
            ))

        matches.sort(key=lambda match: match.similarity, reverse=True)
        return matches[:max(0, limit)]
