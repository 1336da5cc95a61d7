"""Stage 4 output: a gazetteer match for a spoken place name."""

from pydantic import BaseModel, ConfigDict, Field


class GeocodeResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    formatted_address: str = ""
    place_name: str = ""
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    country: str = ""
    locality: str | None = None
    region: str | None = None
