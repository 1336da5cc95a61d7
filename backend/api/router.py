from fastapi import APIRouter, Depends, HTTPException, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from api.dependencies import get_pipeline
from config import settings
from models.requests import AnalyzeRequest, LocationCorrectRequest
from models.responses import AnalyzeResponse, HealthResponse
from models.schemas.geocode_result import GeocodeResult
from services.pipeline.orchestrator import GigExtractionPipeline
from services.pipeline.s2_dialect_classifier import describe

router = APIRouter()
limiter = Limiter(key_func=get_remote_address)


@router.get("/health", response_model=HealthResponse)
async def health(pipeline: GigExtractionPipeline = Depends(get_pipeline)):
    return HealthResponse(
        status="ok",
        llm_configured=pipeline.llm is not None,
        geocoder_configured=pipeline.geocoder is not None,
        location_cache=pipeline.location_cache.stats() if pipeline.location_cache is not None else {},
    )


@router.post("/analyze", response_model=AnalyzeResponse)
@limiter.limit("30/minute")
async def analyze(
    request: Request,
    body: AnalyzeRequest,
    pipeline: GigExtractionPipeline = Depends(get_pipeline),
):
    transcription = body.transcription.strip()
    if not transcription:
        raise HTTPException(status_code=400, detail="Transcription is empty")
    if len(transcription) > settings.max_transcription_chars:
        raise HTTPException(
            status_code=400,
            detail=f"Transcription too long (max {settings.max_transcription_chars} chars)",
        )

    remaining = None
    if body.caller_id and pipeline.rate_limiter is not None:
        if not pipeline.rate_limiter.check(body.caller_id):
            raise HTTPException(
                status_code=429,
                detail="Too many voice notes from this caller. Please try again later.",
            )
        remaining = pipeline.rate_limiter.remaining(body.caller_id)

    analysis = await pipeline.analyze(
        transcription, location_hint=body.location_hint, audio_meta=body.audio
    )
    return AnalyzeResponse(
        **analysis.model_dump(),
        dialect_description=describe(analysis.dialect),
        rate_limit_remaining=remaining,
    )


@router.post("/locations/correct", response_model=GeocodeResult)
@limiter.limit("30/minute")
async def correct_location(
    request: Request,
    body: LocationCorrectRequest,
    pipeline: GigExtractionPipeline = Depends(get_pipeline),
):
    result = await pipeline.corrector.acorrect(body.candidate, body.country_hint)
    if result is None:
        raise HTTPException(status_code=404, detail="Location could not be resolved")
    return result
