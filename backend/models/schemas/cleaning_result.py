"""Stage 1 output: ASR-corrected transcription with an English gloss."""

from pydantic import BaseModel, ConfigDict


class PatoisCleaningResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    original: str = ""
    cleaned: str = ""  # ASR corrections applied (only when patois detected)
    english: str = ""  # word-level English gloss
    confidence: float = 0.0
    is_patois: bool = False
    detected_terms: list[str] = []
