"""Lost/found board schemas."""

from pydantic import BaseModel, ConfigDict, Field, model_validator

from apa.domain.enums import LostPetSpecies, LostPetStatus
from apa.schemas.common import ImageUrl, Phone


class LostPetCreate(BaseModel):
    """Post submitted by a user. The poster picks perdido/encontrado; moderation always starts pending."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    name: str = Field(..., min_length=2, max_length=80)
    species: LostPetSpecies
    status: LostPetStatus = LostPetStatus.PERDIDO
    description: str = Field(..., min_length=10)
    lastSeenLocation: str = Field(..., min_length=5)
    lastSeenDate: str = Field(..., min_length=1)
    contactPhone: Phone
    photoUrl: ImageUrl = ""
    hasReward: bool = False
    rewardValue: str | None = None

    @model_validator(mode="after")
    def drop_reward_without_flag(self) -> "LostPetCreate":
        if not self.hasReward:
            self.rewardValue = None
        return self


class SuccessStory(BaseModel):
    """Optional story published when a post is marked encontrado. title defaults to "Final Feliz para <name>!"."""

    title: str | None = Field(default=None, min_length=3, max_length=160)
    content: str = Field(..., min_length=10)


class LostPetStatusRequest(BaseModel):
    status: LostPetStatus
    story: SuccessStory | None = None
