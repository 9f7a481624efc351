"""Lead schemas: adoption interest, volunteer and foster-home (LT) applications.

Client-supplied status fields are ignored (extra="ignore"); the workflow
writes the initial status.
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from apa.domain.enums import DwellingType, VolunteerArea, YesNo
from apa.schemas.common import Phone


class LeadContact(BaseModel):
    """Applicant contact fields shared by every lead kind."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    name: str = Field(..., min_length=2, max_length=120)
    phone: Phone
    email: EmailStr
    message: str | None = Field(default=None, max_length=2000)


class AdoptionLeadCreate(LeadContact):
    petId: str = Field(..., min_length=1)


class VolunteerLeadCreate(LeadContact):
    area: VolunteerArea


class FosterHomeLeadCreate(LeadContact):
    address: str = Field(..., min_length=5)
    dwellingType: DwellingType
    hasOtherPets: YesNo
    petDetails: str | None = None
    householdCount: str = Field(..., min_length=1)
    spaceDescription: str = Field(..., min_length=5)
    availability: str = Field(..., min_length=1)
