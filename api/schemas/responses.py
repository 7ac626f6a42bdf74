"""Response schemas for API endpoints."""
from typing import Any, Dict, List, Optional
from datetime import datetime
from pydantic import BaseModel, Field

from api.models.job import JobMetrics, JobStatusEnum


class JobSubmitResponse(BaseModel):
    """Response schema for job submission."""
    job_id: str = Field(..., description="Unique job identifier")
    status: JobStatusEnum = Field(..., description="Current job status")
    message: str = Field(default="Generation job created successfully")


class JobResponse(BaseModel):
    """Full view of a generation job."""
    job_id: str = Field(..., description="Unique job identifier")
    owner_id: str = Field(..., description="Owner of the job")
    topic: str = Field(..., description="Requested topic")
    context: Optional[str] = Field(None, description="Extra context")
    outline: Optional[str] = Field(None, description="Requested outline")
    voice_profile_ids: List[str] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)
    status: JobStatusEnum = Field(..., description="Current job status")
    content: Optional[str] = Field(None, description="Generated content (COMPLETED only)")
    error: Optional[str] = Field(None, description="Failure message (FAILED only)")
    metrics: Optional[JobMetrics] = Field(None, description="Scoring metrics")
    attempts: int = Field(default=0, description="Generation attempts made")
    duration_ms: Optional[int] = Field(None, description="Generation time in milliseconds")
    token_usage: Optional[int] = Field(None, description="Estimated token usage")
    created_at: datetime = Field(..., description="Job creation timestamp")
    completed_at: Optional[datetime] = Field(None, description="Terminal transition timestamp")

    @classmethod
    def from_record(cls, job: Dict[str, Any]) -> "JobResponse":
        return cls(
            job_id=job["_id"],
            owner_id=job["owner_id"],
            topic=job["topic"],
            context=job.get("context"),
            outline=job.get("outline"),
            voice_profile_ids=job.get("voice_profile_ids") or [],
            keywords=job.get("keywords") or [],
            status=job["status"],
            content=job.get("content"),
            error=job.get("error"),
            metrics=job.get("metrics"),
            attempts=job.get("attempts", 0),
            duration_ms=job.get("duration_ms"),
            token_usage=job.get("token_usage"),
            created_at=job["created_at"],
            completed_at=job.get("completed_at")
        )


class JobSummary(BaseModel):
    """Compact job entry for history listings."""
    job_id: str = Field(..., description="Unique job identifier")
    topic: str = Field(..., description="Requested topic")
    status: JobStatusEnum = Field(..., description="Current job status")
    solid_score: Optional[int] = Field(None, description="Composite score when completed")
    error: Optional[str] = Field(None, description="Failure message")
    created_at: datetime = Field(..., description="Job creation timestamp")
    completed_at: Optional[datetime] = Field(None, description="Terminal transition timestamp")


class OutlineResponse(BaseModel):
    """Response schema for outline generation."""
    topic: str
    outline: str


class VoiceProfileResponse(BaseModel):
    """Voice profile view without the embedding vector."""
    id: str = Field(..., description="Unique profile identifier")
    owner_id: str
    name: str
    description: Optional[str] = None
    samples: Optional[List[str]] = Field(None, description="Samples (detail view only)")
    dimensions: int
    model: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, profile: Dict[str, Any]) -> "VoiceProfileResponse":
        return cls(
            id=profile["_id"],
            owner_id=profile["owner_id"],
            name=profile["name"],
            description=profile.get("description"),
            samples=profile.get("samples"),
            dimensions=profile["dimensions"],
            model=profile["model"],
            created_at=profile["created_at"],
            updated_at=profile["updated_at"]
        )


class SimilarityMatchResponse(BaseModel):
    """One ranked voice profile."""
    profile_id: str
    name: str
    similarity: float
    samples: List[str] = Field(default_factory=list)


class ScoreResponse(BaseModel):
    """Response schema for ad-hoc content scoring."""
    metrics: JobMetrics
    label: str
    recommendations: List[str] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """Schema for error responses."""
    error: str = Field(..., description="Error message")
    detail: Optional[str] = Field(None, description="Detailed error information")
