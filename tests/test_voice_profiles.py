"""Voice profile service tests."""
from unittest.mock import AsyncMock

import pytest

from api.services.voice_profiles import VoiceProfileService
from shared.errors import EmbeddingError, NotFoundError, ValidationError
from conftest import FakeEmbedder


@pytest.fixture
def service(fake_db, fake_embedder):
    """Create voice profile service."""
    return VoiceProfileService(fake_db, fake_embedder)


class TestCreateProfile:
    """Tests for profile creation."""

    @pytest.mark.asyncio
    async def test_create_stores_embedding(self, service, fake_embedder):
        """Test the embedding is computed from all samples."""
        profile = await service.create("user_1", " Casual ", ["First sample.", "Second sample."])

        assert profile["name"] == "Casual"
        assert profile["samples"] == ["First sample.", "Second sample."]
        assert profile["dimensions"] == len(FakeEmbedder.alphabet)
        assert profile["model"] == "fake-embedder"
        assert fake_embedder.inputs == ["First sample.\n\nSecond sample."]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("samples", [[], ["", "   "], None])
    async def test_create_without_samples(self, service, fake_db, fake_embedder, samples):
        """Test profiles need at least one non-blank sample."""
        with pytest.raises(ValidationError):
            await service.create("user_1", "Casual", samples)

        assert fake_db.voice_profiles.documents == {}
        assert fake_embedder.inputs == []

    @pytest.mark.asyncio
    async def test_create_without_name(self, service):
        """Test a blank name is rejected."""
        with pytest.raises(ValidationError):
            await service.create("user_1", "  ", ["sample"])

    @pytest.mark.asyncio
    async def test_embedding_failure_stores_nothing(self, fake_db):
        """Test an embedding failure leaves the store untouched."""
        service = VoiceProfileService(fake_db, FakeEmbedder(fail=True))

        with pytest.raises(EmbeddingError):
            await service.create("user_1", "Casual", ["sample"])

        assert fake_db.voice_profiles.documents == {}

    @pytest.mark.asyncio
    async def test_empty_vector_is_embedding_error(self, fake_db):
        """Test an empty vector from the model is a model failure."""
        embedder = FakeEmbedder()
        embedder.embed = AsyncMock(return_value=[])
        service = VoiceProfileService(fake_db, embedder)

        with pytest.raises(EmbeddingError):
            await service.create("user_1", "Casual", ["sample"])

        assert fake_db.voice_profiles.documents == {}


class TestUpdateProfile:
    """Tests for profile updates."""

    @pytest.mark.asyncio
    async def test_new_samples_reembed(self, service, fake_embedder):
        """Test replacing samples recomputes the embedding."""
        profile = await service.create("user_1", "Casual", ["aaaa"])

        updated = await service.update(profile["_id"], samples=["eeee tttt"])

        assert updated["samples"] == ["eeee tttt"]
        assert updated["embedding"] != profile["embedding"]
        assert len(fake_embedder.inputs) == 2

    @pytest.mark.asyncio
    async def test_rename_keeps_embedding(self, service, fake_embedder):
        """Test metadata edits do not re-embed."""
        profile = await service.create("user_1", "Casual", ["aaaa"])

        updated = await service.update(profile["_id"], name="Formal", description="Board reports")

        assert updated["name"] == "Formal"
        assert updated["description"] == "Board reports"
        assert updated["embedding"] == profile["embedding"]
        assert len(fake_embedder.inputs) == 1

    @pytest.mark.asyncio
    async def test_update_missing_profile(self, service):
        """Test updating an unknown profile raises NotFoundError."""
        with pytest.raises(NotFoundError):
            await service.update("vp_missing", name="Formal")

    @pytest.mark.asyncio
    async def test_update_with_empty_samples(self, service):
        """Test samples cannot be replaced with nothing."""
        profile = await service.create("user_1", "Casual", ["aaaa"])

        with pytest.raises(ValidationError):
            await service.update(profile["_id"], samples=[])


class TestProfileLookup:
    """Tests for get, delete and listing."""

    @pytest.mark.asyncio
    async def test_get_missing(self, service):
        """Test unknown profiles raise NotFoundError."""
        with pytest.raises(NotFoundError):
            await service.get("vp_missing")

    @pytest.mark.asyncio
    async def test_delete(self, service):
        """Test delete removes the profile once."""
        profile = await service.create("user_1", "Casual", ["sample"])

        await service.delete(profile["_id"])

        with pytest.raises(NotFoundError):
            await service.delete(profile["_id"])

    @pytest.mark.asyncio
    async def test_list_scoped_to_owner(self, service):
        """Test listings only show the owner's profiles."""
        await service.create("user_1", "Mine", ["sample"])
        await service.create("user_2", "Theirs", ["sample"])

        profiles = await service.list_for_owner("user_1")

        assert [profile["name"] for profile in profiles] == ["Mine"]


class TestFindSimilar:
    """Tests for similarity lookup."""

    @pytest.mark.asyncio
    async def test_ranks_owner_profiles(self, service):
        """Test the closest profile comes first."""
        await service.create("user_1", "Vowels", ["aaaa eeee oooo"])
        await service.create("user_1", "Consonants", ["ssss rrrr nnnn tttt"])
        await service.create("user_2", "Other owner", ["aaaa eeee oooo"])

        matches = await service.find_similar("aaa eee ooo", "user_1")

        assert [match.name for match in matches] == ["Vowels", "Consonants"]
        assert matches[0].similarity == pytest.approx(1.0)
        assert matches[0].samples == ["aaaa eeee oooo"]

    @pytest.mark.asyncio
    async def test_limit(self, service):
        """Test the number of matches is capped."""
        for i in range(4):
            await service.create("user_1", f"Profile {i}", [f"sample {i}"])

        matches = await service.find_similar("sample", "user_1", limit=2)

        assert len(matches) == 2

    @pytest.mark.asyncio
    async def test_no_profiles(self, service, fake_embedder):
        """Test an owner without profiles gets an empty list."""
        assert await service.find_similar("text", "nobody") == []
        assert fake_embedder.inputs == []

    @pytest.mark.asyncio
    async def test_blank_query(self, service):
        """Test a blank query is rejected."""
        with pytest.raises(ValidationError):
            await service.find_similar("   ", "user_1")
