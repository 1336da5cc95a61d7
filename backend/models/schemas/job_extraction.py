"""Stage 3 output: structured gig fields extracted from a transcription."""

from typing import Literal

from pydantic import BaseModel, ConfigDict

JobType = Literal["job_posting", "work_request", "unclear"]
Urgency = Literal["low", "medium", "high"]
Experience = Literal["beginner", "intermediate", "expert", "unclear"]
BudgetType = Literal["fixed", "hourly", "negotiable"]


class Budget(BaseModel):
    model_config = ConfigDict(frozen=True)

    amount: float | None = None
    currency: str = "JMD"
    type: BudgetType = "negotiable"


class JobExtraction(BaseModel):
    """Structured output of the Job-Type & Field Extractor (Stage 3).

    ``job_type == "unclear"`` marks every other field as low-confidence:
    callers should ask the user to clarify instead of publishing the gig.
    """
    model_config = ConfigDict(frozen=True)

    job_type: JobType = "unclear"
    skills: list[str] = []  # canonical skill tags, de-duplicated
    location: str | None = None
    country: str | None = None  # island the location belongs to
    budget: Budget = Budget()
    urgency: Urgency = "medium"
    experience: Experience = "unclear"
    timing: str | None = None
    indicators: list[str] = []  # job-type evidence, for debugging
    source: Literal["heuristic", "llm"] = "heuristic"
