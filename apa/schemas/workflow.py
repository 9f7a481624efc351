"""Request bodies for workflow transitions."""

from pydantic import BaseModel, Field


class TransitionRequest(BaseModel):
    """Target status plus the reason some targets (rejected) require."""

    status: str = Field(..., min_length=1)
    reason: str | None = Field(default=None, max_length=1000)


class RejectRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=1000)
