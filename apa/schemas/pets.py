"""Adoption listing schemas."""

from pydantic import BaseModel, ConfigDict, Field, model_validator

from apa.domain.enums import AgeUnit, PetGender, PetSize, PetSpecies
from apa.schemas.common import ImageUrl, Phone


class PetCreate(BaseModel):
    """Registration form. Age is given as value + unit and stored as one label."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    species: PetSpecies
    gender: PetGender
    name: str = Field(..., min_length=2, max_length=80)
    breed: str | None = None
    color: str | None = None
    ageValue: int = Field(..., ge=0, le=40)
    ageUnit: AgeUnit
    size: PetSize
    description: str = Field(..., min_length=10)
    address: str = Field(..., min_length=5)
    contactPhone: Phone
    photos: list[ImageUrl] = Field(..., min_length=1)


class PetUpdate(BaseModel):
    """Admin edit of listing fields (status changes go through transitions)."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    name: str | None = Field(default=None, min_length=2, max_length=80)
    breed: str | None = None
    color: str | None = None
    ageValue: int | None = Field(default=None, ge=0, le=40)
    ageUnit: AgeUnit | None = None
    size: PetSize | None = None
    description: str | None = Field(default=None, min_length=10)
    address: str | None = Field(default=None, min_length=5)
    contactPhone: Phone | None = None
    photos: list[ImageUrl] | None = Field(default=None, min_length=1)

    @model_validator(mode="after")
    def age_value_with_unit(self) -> "PetUpdate":
        if (self.ageValue is None) != (self.ageUnit is None):
            raise ValueError("ageValue and ageUnit must be given together")
        return self


class ReorderRequest(BaseModel):
    """Full ordering of listings; position i becomes sortOrder i."""

    ids: list[str] = Field(..., min_length=1)
