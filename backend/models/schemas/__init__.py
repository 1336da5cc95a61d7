"""Inter-stage Pydantic contracts for the extraction pipeline."""

from models.schemas.analysis import VoiceGigAnalysis
from models.schemas.cleaning_result import PatoisCleaningResult
from models.schemas.confidence_breakdown import AudioMetadata, ConfidenceBreakdown
from models.schemas.dialect_profile import DialectProfile
from models.schemas.geocode_result import GeocodeResult
from models.schemas.job_extraction import Budget, JobExtraction
from models.schemas.moderation import ModerationResult
from models.schemas.speech_context import SpeechContext

__all__ = [
    "AudioMetadata",
    "Budget",
    "ConfidenceBreakdown",
    "DialectProfile",
    "GeocodeResult",
    "JobExtraction",
    "ModerationResult",
    "PatoisCleaningResult",
    "SpeechContext",
    "VoiceGigAnalysis",
]
