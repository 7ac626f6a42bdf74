"""Generation job routes for the REST API."""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import StreamingResponse

from api.dependencies import get_generation_client, get_job_queue, get_streaming_session
from api.models.job import GenerationJobSpec
from api.schemas.requests import GenerationRequest, OutlineRequest
from api.schemas.responses import JobResponse, JobSubmitResponse, JobSummary, OutlineResponse
from api.services.job_queue import GenerationQueue
from api.services.streaming import StreamingSession
from consumer.generator import GenerationClient


router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.post("", response_model=JobSubmitResponse, status_code=status.HTTP_201_CREATED)
async def submit_job(
    request: GenerationRequest,
    queue: GenerationQueue = Depends(get_job_queue)
):
    """
    Submit a new generation job.

    - Validates the topic
    - Creates a PENDING job record
    - Queues it for the worker pool, unless it is reserved for streaming
    """
    job = await queue.submit(GenerationJobSpec(
        owner_id=request.owner_id,
        topic=request.topic or "",
        context=request.context,
        outline=request.outline,
        voice_profile_ids=request.voice_profile_ids,
        keywords=request.keywords,
        stream=request.stream
    ))

    message = (
        "Generation job reserved for streaming"
        if request.stream
        else "Generation job created successfully"
    )
    return JobSubmitResponse(job_id=job["_id"], status=job["status"], message=message)


@router.post("/outline", response_model=OutlineResponse)
async def generate_outline(
    request: OutlineRequest,
    generator: GenerationClient = Depends(get_generation_client)
):
    """Generate an outline that can be passed back on submission."""
    outline = await generator.generate_outline(request.topic, request.context)
    return OutlineResponse(topic=request.topic, outline=outline)


@router.get("", response_model=List[JobSummary])
async def list_jobs(
    owner_id: str = Query(..., min_length=1),
    limit: Optional[int] = Query(None, ge=1),
    queue: GenerationQueue = Depends(get_job_queue)
):
    """List an owner's recent jobs, newest first."""
    jobs = await queue.list_for_owner(owner_id, limit)

    return [
        JobSummary(
            job_id=job["_id"],
            topic=job["topic"],
            status=job["status"],
            solid_score=(job.get("metrics") or {}).get("solid_score"),
            error=job.get("error"),
            created_at=job["created_at"],
            completed_at=job.get("completed_at")
        )
        for job in jobs
    ]


@router.get("/{job_id}", response_model=JobResponse)
async def get_job(
    job_id: str,
    queue: GenerationQueue = Depends(get_job_queue)
):
    """Get the current state of a job."""
    job = await queue.status(job_id)
    return JobResponse.from_record(job)


@router.get("/{job_id}/stream")
async def stream_job(
    job_id: str,
    topic: Optional[str] = Query(None, description="Overrides the stored topic"),
    outline: Optional[str] = Query(None, description="Overrides the stored outline"),
    voice_profile_ids: Optional[List[str]] = Query(None, description="Overrides the stored profiles"),
    queue: GenerationQueue = Depends(get_job_queue),
    session: StreamingSession = Depends(get_streaming_session)
):
    """
    Generate a job inline and stream fragments as server-sent events.

    Emits ``chunk`` events, then exactly one ``done`` or ``error`` event.
    """
    job = await queue.status(job_id)

    events = await session.open(
        job_id,
        topic=topic or job["topic"],
        outline=outline if outline is not None else job.get("outline"),
        voice_profile_ids=(
            voice_profile_ids if voice_profile_ids is not None
            else job.get("voice_profile_ids") or []
        ),
        context=job.get("context")
    )

    async def event_stream():
        try:
            async for event in events:
                yield event.to_sse()
        finally:
            await events.aclose()

    return StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",
            "Connection": "keep-alive",
        }
    )
