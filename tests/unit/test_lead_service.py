"""Tests for lead services over the in-memory store."""

import pytest

from apa.application.dtos.identity import Actor
from apa.application.events import TransitionCompleted, TransitionEventBus
from apa.application.services.lead_service import (
    AdoptionLeadService,
    FosterHomeLeadService,
    VolunteerLeadService,
)
from apa.domain.exceptions import (
    AuthenticationException,
    DuplicateActiveLeadException,
    IllegalTransitionException,
    ResourceNotFoundException,
    UnauthorizedException,
    ValidationException,
)
from apa.infrastructure.memory.record_repo_memory import InMemoryRecordRepository


def _adoption_payload(pet_id: str, **overrides) -> dict:
    payload = {
        "petId": pet_id,
        "name": "Ana Souza",
        "phone": "(11) 98765-4321",
        "email": "ana@example.org",
        "message": "Tenho quintal grande",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def pets_repo() -> InMemoryRecordRepository:
    return InMemoryRecordRepository("pets")


@pytest.fixture
def events() -> TransitionEventBus:
    return TransitionEventBus()


@pytest.fixture
def adoption(pets_repo: InMemoryRecordRepository, events: TransitionEventBus) -> AdoptionLeadService:
    return AdoptionLeadService(InMemoryRecordRepository("leads_adoption"), pets_repo, events)


@pytest.fixture
async def pet_id(pets_repo: InMemoryRecordRepository) -> str:
    pet = await pets_repo.add({"name": "Rex", "status": "disponível"})
    return pet.id


async def test_create_forces_pending_and_normalizes_phone(
    adoption: AdoptionLeadService, pet_id: str, user: Actor
) -> None:
    lead = await adoption.create(_adoption_payload(pet_id, status="approved"), user)
    assert lead.get("status") == "pending"
    assert lead.get("phone") == "11987654321"
    assert lead.get("userId") == user.uid
    assert lead.get("petName") == "Rex"


async def test_create_requires_authentication(adoption: AdoptionLeadService, pet_id: str) -> None:
    with pytest.raises(AuthenticationException):
        await adoption.create(_adoption_payload(pet_id), None)


async def test_malformed_phone_is_validation_error(
    adoption: AdoptionLeadService, pet_id: str, user: Actor
) -> None:
    with pytest.raises(ValidationException) as exc_info:
        await adoption.create(_adoption_payload(pet_id, phone="(11) 8765-432"), user)
    assert exc_info.value.field == "phone"


async def test_profile_fills_missing_contact_fields(
    adoption: AdoptionLeadService, pet_id: str, user: Actor
) -> None:
    payload = _adoption_payload(pet_id)
    del payload["name"], payload["phone"]
    lead = await adoption.create(payload, user)
    assert lead.get("name") == "Ana Souza"
    assert lead.get("phone") == "11987654321"


async def test_adoption_requires_available_pet(
    adoption: AdoptionLeadService, pets_repo: InMemoryRecordRepository, user: Actor
) -> None:
    with pytest.raises(ResourceNotFoundException):
        await adoption.create(_adoption_payload("missing"), user)
    adopted = await pets_repo.add({"name": "Mia", "status": "adotado"})
    with pytest.raises(ValidationException):
        await adoption.create(_adoption_payload(adopted.id), user)


async def test_second_active_lead_for_same_pet_is_rejected(
    adoption: AdoptionLeadService, pet_id: str, user: Actor
) -> None:
    first = await adoption.create(_adoption_payload(pet_id), user)
    with pytest.raises(DuplicateActiveLeadException) as exc_info:
        await adoption.create(_adoption_payload(pet_id), user)
    assert exc_info.value.details["lead_id"] == first.id


async def test_leads_for_different_pets_or_users_are_independent(
    adoption: AdoptionLeadService,
    pets_repo: InMemoryRecordRepository,
    pet_id: str,
    user: Actor,
    other_user: Actor,
) -> None:
    other_pet = await pets_repo.add({"name": "Mia", "status": "disponível"})
    await adoption.create(_adoption_payload(pet_id), user)
    await adoption.create(_adoption_payload(other_pet.id), user)
    await adoption.create(_adoption_payload(pet_id), other_user)


async def test_adoption_lead_scenario(
    adoption: AdoptionLeadService, pet_id: str, user: Actor, admin: Actor
) -> None:
    """Submit, approve, mark contacted; the current lead follows each step."""
    lead = await adoption.create(_adoption_payload(pet_id), user)
    await adoption.transition(lead.id, "approved", admin)
    contacted = await adoption.transition(lead.id, "contacted", admin)
    assert contacted.get("status") == "contacted"
    current = await adoption.current_for(user.uid, petId=pet_id)
    assert current.id == lead.id
    assert current.get("status") == "contacted"


async def test_rejection_reason_is_stored_and_required(
    adoption: AdoptionLeadService, pet_id: str, user: Actor, admin: Actor
) -> None:
    lead = await adoption.create(_adoption_payload(pet_id), user)
    with pytest.raises(ValidationException):
        await adoption.transition(lead.id, "rejected", admin)
    rejected = await adoption.transition(lead.id, "rejected", admin, reason="Sem tela nas janelas")
    assert rejected.get("rejectionReason") == "Sem tela nas janelas"
    # a rejected lead is not active, so the applicant may apply again
    again = await adoption.create(_adoption_payload(pet_id), user)
    assert (await adoption.current_for(user.uid, petId=pet_id)).id == again.id


async def test_non_admin_transition_is_unauthorized(
    adoption: AdoptionLeadService, pet_id: str, user: Actor
) -> None:
    lead = await adoption.create(_adoption_payload(pet_id), user)
    with pytest.raises(UnauthorizedException):
        await adoption.transition(lead.id, "approved", user)
    with pytest.raises(UnauthorizedException):
        await adoption.transition("missing", "bogus", user)


async def test_idempotent_approve_emits_one_event(
    adoption: AdoptionLeadService,
    events: TransitionEventBus,
    pet_id: str,
    user: Actor,
    admin: Actor,
) -> None:
    seen: list[TransitionCompleted] = []

    async def record(event: TransitionCompleted) -> None:
        seen.append(event)

    events.subscribe("lead", record)
    lead = await adoption.create(_adoption_payload(pet_id), user)
    first = await adoption.transition(lead.id, "approved", admin)
    second = await adoption.transition(lead.id, "approved", admin)
    await events.drain()
    assert second.get("updatedAt") == first.get("updatedAt")
    assert len(seen) == 1
    assert (seen[0].from_state, seen[0].to_state) == ("pending", "approved")


async def test_admin_reopen_moves_same_record_to_pending(
    adoption: AdoptionLeadService, pet_id: str, user: Actor, admin: Actor
) -> None:
    lead = await adoption.create(_adoption_payload(pet_id), user)
    await adoption.transition(lead.id, "rejected", admin, reason="x")
    reopened = await adoption.reopen(lead.id, admin)
    assert reopened.id == lead.id
    assert reopened.get("status") == "pending"


async def test_applicant_reopen_resubmits_fresh_record(
    adoption: AdoptionLeadService, pet_id: str, user: Actor, admin: Actor, other_user: Actor
) -> None:
    lead = await adoption.create(_adoption_payload(pet_id), user)
    await adoption.transition(lead.id, "rejected", admin, reason="x")
    with pytest.raises(UnauthorizedException):
        await adoption.reopen(lead.id, other_user)
    fresh = await adoption.reopen(lead.id, user)
    assert fresh.id != lead.id
    assert fresh.get("status") == "pending"
    assert fresh.get("message") == "Tenho quintal grande"
    assert "rejectionReason" not in fresh.data
    assert (await adoption.get(lead.id)).get("status") == "rejected"


async def test_reopen_of_non_rejected_lead_is_illegal(
    adoption: AdoptionLeadService, pet_id: str, user: Actor, admin: Actor
) -> None:
    lead = await adoption.create(_adoption_payload(pet_id), user)
    with pytest.raises(IllegalTransitionException):
        await adoption.reopen(lead.id, admin)


async def test_admin_list_filters_with_read_default(admin: Actor, user: Actor) -> None:
    repo = InMemoryRecordRepository("leads_volunteer")
    volunteers = VolunteerLeadService(repo)
    await repo.add({"userId": "legacy", "name": "Sem status"})
    await volunteers.create(
        {"name": "Ana", "phone": "11987654321", "email": "a@example.org", "area": "eventos"}, user
    )
    pending = await volunteers.list_for_admin(admin, "pending")
    assert len(pending) == 2
    with pytest.raises(UnauthorizedException):
        await volunteers.list_for_admin(user)


async def test_foster_home_lead_validates_fields(user: Actor) -> None:
    foster = FosterHomeLeadService(InMemoryRecordRepository("leads_lt"))
    with pytest.raises(ValidationException):
        await foster.create({"name": "Ana", "phone": "11987654321", "email": "a@example.org"}, user)
    lead = await foster.create(
        {
            "name": "Ana",
            "phone": "11987654321",
            "email": "a@example.org",
            "address": "Rua das Flores, 10",
            "dwellingType": "casa",
            "hasOtherPets": "sim",
            "householdCount": "3",
            "spaceDescription": "Quintal cercado",
            "availability": "Fins de semana",
        },
        user,
    )
    assert lead.get("status") == "pending"
    assert lead.get("dwellingType") == "casa"
