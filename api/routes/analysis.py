"""Ad-hoc content scoring route."""
from fastapi import APIRouter, Depends

from analysis.scoring import ScoringEngine, recommendations, score_label
from api.dependencies import get_scoring_engine
from api.schemas.requests import ScoreRequest
from api.schemas.responses import ScoreResponse


router = APIRouter(prefix="/analysis", tags=["analysis"])


@router.post("/score", response_model=ScoreResponse)
async def score_content(
    request: ScoreRequest,
    engine: ScoringEngine = Depends(get_scoring_engine)
):
    """Score a draft the same way completed jobs are scored."""
    result = engine.analyze(request.text, request.keywords)
    return ScoreResponse(
        metrics=result.to_dict(),
        label=score_label(result.solid_score),
        recommendations=recommendations(result)
    )
