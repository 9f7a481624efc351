"""Tests for payload schemas and parse_payload error reporting."""

import pytest

from apa.domain.exceptions import ValidationException
from apa.schemas.common import parse_payload
from apa.schemas.content import PartnerCreate, PostCreate
from apa.schemas.leads import AdoptionLeadCreate, FosterHomeLeadCreate
from apa.schemas.settings import FeatureFlags


def test_phone_is_stored_as_digits() -> None:
    lead = parse_payload(
        AdoptionLeadCreate,
        {"name": "Ana", "email": "ana@example.org", "phone": "(11) 98765-4321", "petId": "p1"},
    )
    assert lead.phone == "11987654321"


@pytest.mark.parametrize("phone", ["1198765432", "119876543210", "abc"])
def test_phone_must_have_eleven_digits(phone: str) -> None:
    with pytest.raises(ValidationException) as exc_info:
        parse_payload(
            AdoptionLeadCreate,
            {"name": "Ana", "email": "ana@example.org", "phone": phone, "petId": "p1"},
        )
    assert exc_info.value.details["field"] == "phone"


def test_client_status_is_ignored() -> None:
    lead = parse_payload(
        AdoptionLeadCreate,
        {
            "name": "Ana",
            "email": "ana@example.org",
            "phone": "11987654321",
            "petId": "p1",
            "status": "approved",
        },
    )
    assert "status" not in lead.model_dump()


def test_all_failures_are_reported() -> None:
    with pytest.raises(ValidationException) as exc_info:
        parse_payload(FosterHomeLeadCreate, {"name": "A"})
    fields = {e["field"] for e in exc_info.value.details["errors"]}
    assert {"name", "phone", "email", "address", "dwellingType"} <= fields


def test_image_fields_must_be_urls() -> None:
    with pytest.raises(ValidationException):
        parse_payload(PartnerCreate, {"name": "Clínica", "logo": "logo.png"})
    partner = parse_payload(PartnerCreate, {"name": "Clínica", "logo": "https://cdn.example.org/l.png"})
    assert partner.order == 0 and partner.isActive


def test_post_category_must_be_known() -> None:
    with pytest.raises(ValidationException):
        parse_payload(PostCreate, {"title": "Feira", "content": "Feira de adoção no sábado.", "category": "blog"})


def test_feature_flags_ignore_unknown_keys_and_default_enabled() -> None:
    flags = FeatureFlags.model_validate({"adoption": False, "legacy": True})
    assert flags.adoption is False
    assert flags.donations and flags.stories
