"""Medical record schemas (admin only)."""

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field

from apa.domain.enums import MedicalRecordStatus, MedicalRecordType


class MedicalRecordCreate(BaseModel):
    """Procedure for a sheltered pet. status may be agendado or concluido (past procedures)."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    petId: str = Field(..., min_length=1)
    petName: str = Field(..., min_length=1)
    procedure: str = Field(..., min_length=5)
    vetName: str = Field(..., min_length=3)
    date: dt.date
    type: MedicalRecordType
    status: MedicalRecordStatus | None = None
    notes: str | None = None


class MedicalRecordUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    procedure: str | None = Field(default=None, min_length=5)
    vetName: str | None = Field(default=None, min_length=3)
    date: dt.date | None = None
    type: MedicalRecordType | None = None
    notes: str | None = None
