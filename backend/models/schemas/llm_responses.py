"""Strict schemas for JSON returned by the LLM provider.

Any payload that fails validation is treated like a transport failure and
the pipeline falls back to its heuristic stage.
"""

from pydantic import BaseModel, ConfigDict, Field

from models.schemas.dialect_profile import Dialect, PatoisLevel
from models.schemas.job_extraction import BudgetType, Experience, JobType, Urgency


class IslandProbabilityPayload(BaseModel):
    jamaica: float = Field(default=0.0, ge=0.0, le=1.0)
    trinidad: float = Field(default=0.0, ge=0.0, le=1.0)
    barbados: float = Field(default=0.0, ge=0.0, le=1.0)
    guyana: float = Field(default=0.0, ge=0.0, le=1.0)
    other: float = Field(default=0.0, ge=0.0, le=1.0)


class DialectLLMResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    accent: Dialect
    confidence: float = Field(ge=0.0, le=1.0)
    patois_level: PatoisLevel
    indicators: list[str] = []
    linguistic_features: list[str] = []
    cultural_references: list[str] = []
    dialect_variant: str | None = None
    speech_patterns: list[str] = []
    island_probability: IslandProbabilityPayload
    recommendation: str | None = None


class BudgetPayload(BaseModel):
    amount: float | None = Field(default=None, ge=0)
    currency: str | None = None
    type: BudgetType | None = None


class ExtractionLLMResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    job_type: JobType
    skills: list[str] = []
    location: str | None = None
    budget: BudgetPayload = BudgetPayload()
    urgency: Urgency | None = None
    experience: Experience | None = None
    timing: str | None = None
