"""Generation job model definitions."""
from enum import Enum
from typing import Dict, List, Optional
from pydantic import BaseModel, Field


class JobStatusEnum(str, Enum):
    """Job status enumeration."""
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class JobMetrics(BaseModel):
    """Scoring metrics stored on a completed job."""
    word_count: int
    reading_time: int
    readability_score: float
    keyword_density: Dict[str, float] = Field(default_factory=dict)
    solid_score: int


class GenerationJobSpec(BaseModel):
    """What a caller asks for when submitting a job.

    ``context`` and ``outline`` keep ``None`` (not given) apart from ``""``
    (given but empty).
    """
    owner_id: str
    topic: str
    context: Optional[str] = None
    outline: Optional[str] = None
    voice_profile_ids: List[str] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)
    stream: bool = False
