"""Whole-pipeline output: everything the persistence/display layer stores."""

from pydantic import BaseModel, ConfigDict

from models.schemas.cleaning_result import PatoisCleaningResult
from models.schemas.confidence_breakdown import ConfidenceBreakdown
from models.schemas.dialect_profile import DialectProfile
from models.schemas.geocode_result import GeocodeResult
from models.schemas.job_extraction import JobExtraction
from models.schemas.moderation import ModerationResult
from models.schemas.speech_context import SpeechContext


class VoiceGigAnalysis(BaseModel):
    """Stages 1-5 combined.

    ``needs_clarification`` is set when the job type is unclear or overall
    confidence is below 0.5; the UI should ask the caller for more detail
    rather than posting a miscategorized listing.
    """
    model_config = ConfigDict(frozen=True)

    transcription: str = ""
    cleaning: PatoisCleaningResult = PatoisCleaningResult()
    dialect: DialectProfile = DialectProfile()
    extraction: JobExtraction = JobExtraction()
    location_match: GeocodeResult | None = None
    speech: SpeechContext = SpeechContext()
    confidence: ConfidenceBreakdown = ConfidenceBreakdown()
    moderation: ModerationResult = ModerationResult()
    needs_clarification: bool = True
