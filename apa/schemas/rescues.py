"""Rescue tracking schemas (admin only)."""

from pydantic import BaseModel, ConfigDict, Field

from apa.domain.enums import RescueUrgency


class RescueCreate(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    description: str = Field(..., min_length=10)
    location: str = Field(..., min_length=5)
    urgency: RescueUrgency
    contactInfo: str = Field(..., min_length=5)


class RescueUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    description: str | None = Field(default=None, min_length=10)
    location: str | None = Field(default=None, min_length=5)
    urgency: RescueUrgency | None = None
    contactInfo: str | None = Field(default=None, min_length=5)
