"""Voice profile repository for CRUD operations on the voice_profiles collection."""
from typing import Optional, List, Dict, Any
from motor.motor_asyncio import AsyncIOMotorDatabase
from shared.utils import generate_profile_id, get_utc_now


# Listing views leave the (large) embedding and samples out
SUMMARY_PROJECTION = {
    "owner_id": 1,
    "name": 1,
    "description": 1,
    "dimensions": 1,
    "model": 1,
    "created_at": 1,
    "updated_at": 1
}


class VoiceProfileRepository:
    """Repository for VoiceProfile CRUD operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.collection = db.voice_profiles

    async def create_profile(
        self,
        owner_id: str,
        name: str,
        samples: List[str],
        embedding: List[float],
        model: str,
        description: Optional[str] = None
    ) -> Dict[str, Any]:
        """Create a new voice profile record with a precomputed embedding."""
        profile_id = generate_profile_id()
        now = get_utc_now()

        profile = {
            "_id": profile_id,
            "owner_id": owner_id,
            "name": name,
            "description": description,
            "samples": samples,
            "embedding": embedding,
            "dimensions": len(embedding),
            "model": model,
            "created_at": now,
            "updated_at": now
        }

        await self.collection.insert_one(profile)
        return profile

    async def get_profile(self, profile_id: str) -> Optional[Dict[str, Any]]:
        """Get a voice profile by ID."""
        return await self.collection.find_one({"_id": profile_id})

    async def get_samples(self, profile_id: str) -> Optional[List[str]]:
        """Get only the writing samples of a profile."""
        profile = await self.collection.find_one({"_id": profile_id}, {"samples": 1})
        if not profile:
            return None
        return profile.get("samples") or []

    async def update_profile(self, profile_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Apply a partial update and return the updated profile."""
        update = dict(fields)
        if "embedding" in update:
            update["dimensions"] = len(update["embedding"])
        update["updated_at"] = get_utc_now()

        return await self.collection.find_one_and_update(
            {"_id": profile_id},
            {"$set": update},
            return_document=True
        )

    async def delete_profile(self, profile_id: str) -> bool:
        """Delete a voice profile."""
        result = await self.collection.delete_one({"_id": profile_id})
        return result.deleted_count > 0

    async def list_profiles_by_owner(
        self,
        owner_id: str,
        limit: int = 100
    ) -> List[Dict[str, Any]]:
        """List an owner's profiles, newest first, without embeddings."""
        cursor = (
            self.collection.find({"owner_id": owner_id}, SUMMARY_PROJECTION)
            .sort("created_at", -1)
            .limit(limit)
        )
        return await cursor.to_list(length=limit)

    async def list_embeddings_by_owner(self, owner_id: str) -> List[Dict[str, Any]]:
        """List every profile of an owner with what similarity ranking needs."""
        cursor = self.collection.find(
            {"owner_id": owner_id},
            {"name": 1, "samples": 1, "embedding": 1}
        )
        return await cursor.to_list(length=None)
