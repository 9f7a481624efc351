"""Site-wide documents: feature flags (flags/global) and general settings (config/general)."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class FeatureFlags(BaseModel):
    """Section switches. Missing keys (or a missing document) mean enabled."""

    model_config = ConfigDict(extra="ignore")

    adoption: bool = True
    donations: bool = True
    lostPets: bool = True
    partners: bool = True
    stories: bool = True
    volunteers: bool = True


class GeneralSettings(BaseModel):
    """Donation and contact info shown on the public site."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    pixKey: str = Field(..., min_length=5)
    contactPhone: str = Field(..., min_length=8)
    contactEmail: EmailStr
    address: str = Field(..., min_length=5)
    socialInstagram: str | None = None
    socialFacebook: str | None = None
    donationItems: list[str] = Field(default_factory=list)
