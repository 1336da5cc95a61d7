"""Content moderation verdict for an inbound voice note."""

from pydantic import BaseModel, ConfigDict


class ModerationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    safe: bool = True
    reason: str | None = None
