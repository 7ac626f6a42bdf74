"""Request schemas for API endpoints."""
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator


class GenerationRequest(BaseModel):
    """Request schema for job submission.

    ``topic`` is checked by the job queue itself so that direct callers and
    HTTP callers get the same ValidationError.
    """
    owner_id: str = Field(..., min_length=1, description="Owner of the job")
    topic: Optional[str] = Field(None, description="What the article is about")
    context: Optional[str] = Field(None, description="Extra context for the writer")
    outline: Optional[str] = Field(None, description="Outline to follow")
    voice_profile_ids: List[str] = Field(
        default_factory=list,
        max_length=10,
        description="Voice profiles whose samples shape the style"
    )
    keywords: List[str] = Field(
        default_factory=list,
        max_length=50,
        description="Keywords used for scoring"
    )
    stream: bool = Field(
        default=False,
        description="Reserve the job for a streaming session instead of the worker queue"
    )

    @field_validator('keywords')
    @classmethod
    def strip_keywords(cls, v: List[str]) -> List[str]:
        """Drop blank keywords."""
        return [keyword.strip() for keyword in v if keyword and keyword.strip()]


class OutlineRequest(BaseModel):
    """Request schema for outline generation."""
    topic: str = Field(..., min_length=1, description="What the article is about")
    context: Optional[str] = Field(None, description="Extra context for the writer")


class VoiceProfileCreateRequest(BaseModel):
    """Request schema for voice profile creation."""
    owner_id: str = Field(..., min_length=1, description="Owner of the profile")
    name: str = Field(..., description="Display name")
    description: Optional[str] = Field(None, description="Optional description")
    samples: List[str] = Field(default_factory=list, description="Writing samples")


class VoiceProfileUpdateRequest(BaseModel):
    """Request schema for a partial voice profile update."""
    name: Optional[str] = Field(None, description="New display name")
    description: Optional[str] = Field(None, description="New description")
    samples: Optional[List[str]] = Field(None, description="Replacement writing samples")


class SimilarityRequest(BaseModel):
    """Request schema for voice profile similarity lookup."""
    owner_id: str = Field(..., min_length=1, description="Whose profiles to search")
    text: str = Field(..., min_length=1, description="Text to compare against")
    limit: int = Field(default=5, ge=1, le=50, description="Maximum number of matches")


class ScoreRequest(BaseModel):
    """Request schema for ad-hoc content scoring."""
    text: str = Field(default="", description="Content to score")
    keywords: List[str] = Field(default_factory=list, description="Target keywords")
