from pydantic import BaseModel

from models.schemas.analysis import VoiceGigAnalysis


class HealthResponse(BaseModel):
    status: str = "ok"
    llm_configured: bool = False
    geocoder_configured: bool = False
    location_cache: dict[str, int] = {}


class AnalyzeResponse(VoiceGigAnalysis):
    dialect_description: str = ""
    rate_limit_remaining: int | None = None
