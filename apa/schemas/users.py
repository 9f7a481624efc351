"""Profile schemas (users/{uid})."""

from pydantic import BaseModel, ConfigDict, Field

from apa.domain.enums import DwellingType, YesNo
from apa.schemas.common import Phone


class ProfileUpdate(BaseModel):
    """Fields a user may change on their own profile. role is never accepted."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    displayName: str | None = Field(default=None, min_length=2, max_length=120)
    phone: Phone | None = None
    address: str | None = None
    dwellingType: DwellingType | None = None
    hasOtherPets: YesNo | None = None
    petDetails: str | None = None
    householdCount: str | None = None
    spaceDescription: str | None = None
    availability: str | None = None


class RoleUpdate(BaseModel):
    """Admin-only role change."""

    role: str = Field(..., pattern=r"^(user|admin)$")
