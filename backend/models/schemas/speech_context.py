"""Speech pattern and Caribbean cultural context of a transcription."""

from typing import Literal

from pydantic import BaseModel, ConfigDict


class SpeechContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    pace: Literal["slow", "normal", "fast"] = "slow"
    clarity: Literal["poor", "fair", "good", "excellent"] = "poor"
    formality: Literal["casual", "semi-formal", "formal"] = "casual"
    local_terms: list[str] = []
    cultural_references: list[str] = []
    island_specific: bool = False
