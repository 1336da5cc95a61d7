from pydantic import BaseModel, Field

from models.schemas.confidence_breakdown import AudioMetadata


class AnalyzeRequest(BaseModel):
    transcription: str = Field(..., description="Speech-to-text output of the voice note")
    location_hint: str | None = Field(None, description="Island the caller is in, e.g. 'Jamaica'")
    caller_id: str | None = Field(None, max_length=64, description="Phone number or WhatsApp id")
    audio: AudioMetadata | None = None


class LocationCorrectRequest(BaseModel):
    candidate: str = Field(..., min_length=1, max_length=200, description="Spoken place name")
    country_hint: str | None = None
