"""Voice profile routes for the REST API."""
from typing import List
from fastapi import APIRouter, Depends, Query, Response, status

from api.dependencies import get_profile_service
from api.schemas.requests import (
    SimilarityRequest,
    VoiceProfileCreateRequest,
    VoiceProfileUpdateRequest
)
from api.schemas.responses import SimilarityMatchResponse, VoiceProfileResponse
from api.services.voice_profiles import VoiceProfileService


router = APIRouter(prefix="/profiles", tags=["profiles"])


@router.post("", response_model=VoiceProfileResponse, status_code=status.HTTP_201_CREATED)
async def create_profile(
    request: VoiceProfileCreateRequest,
    service: VoiceProfileService = Depends(get_profile_service)
):
    """Create a voice profile; the embedding is computed before it is stored."""
    profile = await service.create(
        owner_id=request.owner_id,
        name=request.name,
        samples=request.samples,
        description=request.description
    )
    return VoiceProfileResponse.from_record(profile)


@router.get("", response_model=List[VoiceProfileResponse])
async def list_profiles(
    owner_id: str = Query(..., min_length=1),
    service: VoiceProfileService = Depends(get_profile_service)
):
    """List an owner's voice profiles, newest first."""
    profiles = await service.list_for_owner(owner_id)
    return [VoiceProfileResponse.from_record(profile) for profile in profiles]


@router.post("/similar", response_model=List[SimilarityMatchResponse])
async def find_similar_profiles(
    request: SimilarityRequest,
    service: VoiceProfileService = Depends(get_profile_service)
):
    """Rank an owner's profiles by similarity to a piece of text."""
    matches = await service.find_similar(request.text, request.owner_id, request.limit)
    return [
        SimilarityMatchResponse(
            profile_id=match.profile_id,
            name=match.name,
            similarity=match.similarity,
            samples=match.samples
        )
        for match in matches
    ]


@router.get("/{profile_id}", response_model=VoiceProfileResponse)
async def get_profile(
    profile_id: str,
    service: VoiceProfileService = Depends(get_profile_service)
):
    """Get a voice profile with its samples."""
    profile = await service.get(profile_id)
    return VoiceProfileResponse.from_record(profile)


@router.patch("/{profile_id}", response_model=VoiceProfileResponse)
async def update_profile(
    profile_id: str,
    request: VoiceProfileUpdateRequest,
    service: VoiceProfileService = Depends(get_profile_service)
):
    """Patch a voice profile; replacing samples recomputes the embedding."""
    profile = await service.update(
        profile_id,
        name=request.name,
        description=request.description,
        samples=request.samples
    )
    return VoiceProfileResponse.from_record(profile)


@router.delete("/{profile_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_profile(
    profile_id: str,
    service: VoiceProfileService = Depends(get_profile_service)
):
    """Delete a voice profile."""
    await service.delete(profile_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
