"""Stage 5 output: overall confidence with its five sub-scores."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ConfidenceLevel = Literal["Very Low", "Low", "Medium", "High", "Very High"]


class ConfidenceBreakdown(BaseModel):
    """Weighted confidence summary.

    Weights: linguistic 25%, semantic 20%, cultural 20%, technical 20%,
    contextual 15%. ``overall`` never exceeds 0.98.
    """
    model_config = ConfigDict(frozen=True)

    overall: float = Field(default=0.0, ge=0.0, le=0.98)
    linguistic: float = Field(default=0.0, ge=0.0, le=1.0)
    semantic: float = Field(default=0.0, ge=0.0, le=1.0)
    cultural: float = Field(default=0.0, ge=0.0, le=1.0)
    technical: float = Field(default=0.0, ge=0.0, le=1.0)
    contextual: float = Field(default=0.0, ge=0.0, le=1.0)
    level: ConfidenceLevel = "Very Low"
    description: str = ""


class AudioMetadata(BaseModel):
    """Optional recording properties supplied by the speech-to-text caller."""
    duration: float = 0.0  # seconds
    sample_rate: int = 0  # Hz
    bitrate: int = 0
    signal_to_noise: float | None = None  # dB
