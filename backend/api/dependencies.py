"""Shared dependencies for API routes."""

from functools import lru_cache

from config import settings
from services.pipeline.orchestrator import GigExtractionPipeline


@lru_cache(maxsize=1)
def get_pipeline() -> GigExtractionPipeline:
    """One pipeline (and so one location cache and rate limiter) per process."""
    return GigExtractionPipeline.from_settings(settings)
