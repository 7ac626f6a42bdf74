# Schemas module
from .requests import (
    GenerationRequest,
    OutlineRequest,
    VoiceProfileCreateRequest,
    VoiceProfileUpdateRequest,
    SimilarityRequest,
    ScoreRequest
)
from .responses import (
    JobSubmitResponse,
    JobResponse,
    JobSummary,
    OutlineResponse,
    VoiceProfileResponse,
    SimilarityMatchResponse,
    ScoreResponse,
    ErrorResponse
)

__all__ = [
    "GenerationRequest",
    "OutlineRequest",
    "VoiceProfileCreateRequest",
    "VoiceProfileUpdateRequest",
    "SimilarityRequest",
    "ScoreRequest",
    "JobSubmitResponse",
    "JobResponse",
    "JobSummary",
    "OutlineResponse",
    "VoiceProfileResponse",
    "SimilarityMatchResponse",
    "ScoreResponse",
    "ErrorResponse"
]
