"""Tests for the admin CSV exports."""

import csv
import io
import re

import pytest

from apa.application.dtos.identity import Actor
from apa.application.services.export_service import EXPORTS, ExportService
from apa.application.services.lead_service import VolunteerLeadService
from apa.core.config import Settings
from apa.domain.exceptions import ResourceNotFoundException, UnauthorizedException
from apa.infrastructure.firebase.collections import COLLECTION_LEADS_VOLUNTEER
from apa.infrastructure.store import RecordStore, build_record_store


@pytest.fixture
def store() -> RecordStore:
    return build_record_store(Settings(store_backend="memory"))


def _rows(text: str) -> list[list[str]]:
    return list(csv.reader(io.StringIO(text)))


async def test_volunteer_export_formats_cells(store: RecordStore, admin: Actor, user: Actor) -> None:
    leads = VolunteerLeadService(store.repo(COLLECTION_LEADS_VOLUNTEER))
    await leads.create(
        {
            "name": "Ana Souza",
            "email": "ana@example.org",
            "phone": "11987654321",
            "area": "passeios",
            "message": 'Posso aos sábados, "manhã"',
        },
        user,
    )
    filename, text = await ExportService(store).export("volunteer-leads", admin)

    assert re.fullmatch(r"voluntarios_\d{4}-\d{2}-\d{2}\.csv", filename)
    header, row = _rows(text)
    assert header == ["Data", "Nome", "Email", "Telefone", "Área", "Mensagem", "Status"]
    assert re.fullmatch(r"\d{2}/\d{2}/\d{4}", row[0])
    assert row[1:] == [
        "Ana Souza",
        "ana@example.org",
        "(11) 98765-4321",
        "passeios",
        'Posso aos sábados, "manhã"',
        "pending",
    ]
    assert text.splitlines()[0].startswith('"Data","Nome"')


async def test_medical_export_uses_record_date(store: RecordStore, admin: Actor) -> None:
    repo = store.repo(EXPORTS["medical-records"].collection)
    await repo.add({"petName": "Rex", "procedure": "Castração", "date": "2024-03-01", "type": "cirurgia"})
    await repo.add({"petName": "Mel", "procedure": "Vacina V10", "date": "2024-05-20", "type": "vacina"})

    filename, text = await ExportService(store).export("medical-records", admin)
    rows = _rows(text)[1:]
    assert filename.startswith("prontuarios_apa_")
    assert [(r[0], r[1]) for r in rows] == [("20/05/2024", "Mel"), ("01/03/2024", "Rex")]


async def test_export_requires_admin_and_known_name(store: RecordStore, admin: Actor, user: Actor) -> None:
    service = ExportService(store)
    with pytest.raises(UnauthorizedException):
        await service.export("rescues", user)
    with pytest.raises(ResourceNotFoundException):
        await service.export("donors", admin)


async def test_empty_export_has_header_only(store: RecordStore, admin: Actor) -> None:
    _, text = await ExportService(store).export("rescues", admin)
    assert len(_rows(text)) == 1
