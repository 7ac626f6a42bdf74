"""Pytest configuration and fixtures."""
import asyncio
import copy
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest
from unittest.mock import AsyncMock

from shared.errors import EmbeddingError, GenerationError

# Bound at import so tests that patch asyncio.sleep keep real suspension points
_real_sleep = asyncio.sleep


async def _round_trip():
    await _real_sleep(0)


def _matches(document: Dict[str, Any], query: Dict[str, Any]) -> bool:
    for key, condition in query.items():
        value = document.get(key)
        if isinstance(condition, dict) and "$in" in condition:
            if value not in condition["$in"]:
                return False
        elif value != condition:
            return False
    return True


def _project(document: Dict[str, Any], projection: Optional[Dict[str, int]]) -> Dict[str, Any]:
    if not projection:
        return copy.deepcopy(document)
    keys = {key for key, include in projection.items() if include}
    keys.add("_id")
    return {key: copy.deepcopy(value) for key, value in document.items() if key in keys}


class FakeCursor:
    """Just enough of a motor cursor for the repositories."""

    def __init__(self, documents: List[Dict[str, Any]]):
        self._documents = documents

    def sort(self, key: str, direction: int = 1):
        self._documents = sorted(self._documents, key=lambda d: d.get(key), reverse=direction < 0)
        return self

    def skip(self, count: int):
        self._documents = self._documents[count:]
        return self

    def limit(self, count: int):
        self._documents = self._documents[:count]
        return self

    async def to_list(self, length: Optional[int] = None):
        await _round_trip()
        if length is None:
            return list(self._documents)
        return list(self._documents[:length])


class FakeCollection:
    """In-memory stand-in for a motor collection.

    Every call suspends once before touching data, like a network round trip,
    but matching and updating a document happen without a suspension in
    between, which mirrors MongoDB's single-document atomicity.
    """

    def __init__(self):
        self.documents: Dict[str, Dict[str, Any]] = {}

    async def insert_one(self, document: Dict[str, Any]):
        await _round_trip()
        self.documents[document["_id"]] = copy.deepcopy(document)
        return SimpleNamespace(inserted_id=document["_id"])

    async def find_one(self, query: Dict[str, Any], projection: Optional[Dict[str, int]] = None):
        await _round_trip()
        for document in self.documents.values():
            if _matches(document, query):
                return _project(document, projection)
        return None

    def find(self, query: Dict[str, Any], projection: Optional[Dict[str, int]] = None):
        return FakeCursor([
            _project(document, projection)
            for document in self.documents.values()
            if _matches(document, query)
        ])

    async def update_one(self, query: Dict[str, Any], update: Dict[str, Any]):
        await _round_trip()
        for document in self.documents.values():
            if _matches(document, query):
                document.update(copy.deepcopy(update.get("$set", {})))
                return SimpleNamespace(matched_count=1, modified_count=1)
        return SimpleNamespace(matched_count=0, modified_count=0)

    async def find_one_and_update(self, query: Dict[str, Any], update: Dict[str, Any], return_document=False):
        await _round_trip()
        for document in self.documents.values():
            if _matches(document, query):
                before = copy.deepcopy(document)
                document.update(copy.deepcopy(update.get("$set", {})))
                return copy.deepcopy(document) if return_document else before
        return None

    async def delete_one(self, query: Dict[str, Any]):
        await _round_trip()
        for key, document in list(self.documents.items()):
            if _matches(document, query):
                del self.documents[key]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)


class FakeDatabase:
    """Creates collections on first attribute access."""

    def __init__(self):
        self._collections: Dict[str, FakeCollection] = {}

    def __getattr__(self, name: str) -> FakeCollection:
        if name.startswith("_"):
            raise AttributeError(name)
        return self._collections.setdefault(name, FakeCollection())


class FakeGenerationClient:
    """Scriptable generation capability.

    ``failures`` is how many calls fail before the first success; ``-1``
    means every call fails. ``stream_error`` is raised after the fragments
    have been yielded.
    """

    def __init__(
        self,
        content: str = "Generated article body.",
        fragments: Optional[List[str]] = None,
        failures: int = 0,
        error_message: str = "model unavailable",
        stream_error: Optional[Exception] = None
    ):
        self.content = content
        self.fragments = fragments if fragments is not None else ["Generated ", "article ", "body."]
        self.failures = failures
        self.error_message = error_message
        self.stream_error = stream_error
        self.calls: List[Dict[str, Any]] = []

    async def generate(self, topic, outline=None, context=None, voice_profile_samples=None):
        self.calls.append({
            "topic": topic,
            "outline": outline,
            "context": context,
            "voice_profile_samples": list(voice_profile_samples or [])
        })
        await _round_trip()
        if self.failures < 0 or len(self.calls) <= self.failures:
            raise GenerationError(f"{self.error_message} (call {len(self.calls)})")
        return self.content

    async def generate_stream(self, topic, outline=None, context=None, voice_profile_samples=None):
        self.calls.append({
            "topic": topic,
            "outline": outline,
            "context": context,
            "voice_profile_samples": list(voice_profile_samples or [])
        })
        for fragment in self.fragments:
            await _round_trip()
            yield fragment
        if self.stream_error is not None:
            raise self.stream_error

    async def generate_outline(self, topic, context=None):
        return f"1. Introduction to {topic}\n2. Details\n3. Conclusion"


class FakeEmbedder:
    """Deterministic letter-frequency embedder."""

    model_name = "fake-embedder"
    alphabet = "etaoinsr"

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.inputs: List[str] = []

    async def embed(self, text: str) -> List[float]:
        self.inputs.append(text)
        if self.fail:
            raise EmbeddingError("Embedding model unavailable")
        lowered = text.lower()
        return [float(lowered.count(letter)) for letter in self.alphabet]


@pytest.fixture
def fake_db():
    """Create an in-memory database."""
    return FakeDatabase()


@pytest.fixture
def mock_redis_client():
    """Create mock Redis client."""
    redis = AsyncMock()

    redis.lpush = AsyncMock(return_value=1)
    redis.rpop = AsyncMock(return_value=None)
    redis.llen = AsyncMock(return_value=0)
    redis.publish = AsyncMock(return_value=1)

    return redis


@pytest.fixture
def fake_generator():
    """Create a generation client that always succeeds."""
    return FakeGenerationClient()


@pytest.fixture
def fake_embedder():
    """Create a deterministic embedder."""
    return FakeEmbedder()


@pytest.fixture
def sample_job_spec():
    """Create sample job submission data."""
    return {
        "owner_id": "user_123",
        "topic": "Sustainable urban gardening",
        "context": "Audience: apartment dwellers",
        "outline": None,
        "voice_profile_ids": [],
        "keywords": ["garden", "urban gardening"]
    }
