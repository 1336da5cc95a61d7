"""Stage 2 output: Caribbean dialect / accent profile of a transcription."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Dialect = Literal[
    "jamaican",
    "trinidadian",
    "barbadian",
    "guyanese",
    "general_caribbean",
    "standard_english",
]
PatoisLevel = Literal["none", "light", "moderate", "heavy"]

ISLANDS = ("jamaica", "trinidad", "barbados", "guyana", "other")


class DialectProfile(BaseModel):
    """Structured output of the Dialect Classifier (Stage 2).

    ACCENT (pronunciation) and PATOIS (vocabulary/grammar) are distinct:
    ``primary_dialect`` names the accent family, ``patois_level`` says how
    much Creole vocabulary/grammar was actually used.
    """
    model_config = ConfigDict(frozen=True)

    primary_dialect: Dialect = "standard_english"
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    patois_level: PatoisLevel = "none"
    island_probability: dict[str, float] = Field(
        default_factory=lambda: {island: 0.0 for island in ISLANDS[:-1]} | {"other": 1.0}
    )
    detected_terms: list[str] = []  # ordered, de-duplicated markers

    # Supplementary analysis (populated richly by the LLM strategy)
    linguistic_features: list[str] = []
    cultural_references: list[str] = []
    speech_patterns: list[str] = []
    dialect_variant: str | None = None
    recommendation: str | None = None
    source: Literal["llm", "patterns"] = "patterns"

    @property
    def is_caribbean(self) -> bool:
        return self.primary_dialect != "standard_english"
