"""Tests for the lost and found board and the success-story hook."""

import pytest

from apa.application.dtos.identity import Actor
from apa.application.dtos.record import RecordQuery
from apa.application.events import TransitionEventBus
from apa.application.services.lost_pet_service import LostPetService
from apa.application.services.success_stories import register_success_story_hook
from apa.domain.exceptions import IllegalTransitionException, UnauthorizedException
from apa.infrastructure.memory.record_repo_memory import InMemoryRecordRepository


def _lost_pet_payload(**overrides) -> dict:
    payload = {
        "name": "Thor",
        "species": "cachorro",
        "description": "Vira-lata caramelo com coleira azul",
        "lastSeenLocation": "Praça Central",
        "lastSeenDate": "2024-03-01",
        "contactPhone": "11987654321",
        "photoUrl": "https://img.example.org/thor.jpg",
        "hasReward": False,
        "rewardValue": "R$ 100",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def events() -> TransitionEventBus:
    return TransitionEventBus()


@pytest.fixture
def posts_repo() -> InMemoryRecordRepository:
    return InMemoryRecordRepository("posts")


@pytest.fixture
def lost_pets(events: TransitionEventBus, posts_repo: InMemoryRecordRepository) -> LostPetService:
    register_success_story_hook(events, posts_repo)
    return LostPetService(InMemoryRecordRepository("lost_pets"), events)


async def test_new_post_is_pending_and_hidden(lost_pets: LostPetService, user: Actor) -> None:
    post = await lost_pets.create(_lost_pet_payload(moderationStatus="approved"), user)
    assert post.get("moderationStatus") == "pending"
    assert post.get("status") == "perdido"
    assert "rewardValue" not in post.data
    assert await lost_pets.list_public() == []
    assert [p.id for p in await lost_pets.list_mine(user)] == [post.id]


async def test_poster_may_report_a_found_pet(lost_pets: LostPetService, user: Actor) -> None:
    post = await lost_pets.create(_lost_pet_payload(status="encontrado"), user)
    assert post.get("status") == "encontrado"


async def test_only_approved_posts_are_public_whatever_their_status(
    lost_pets: LostPetService, user: Actor, admin: Actor
) -> None:
    lost = await lost_pets.create(_lost_pet_payload(), user)
    found = await lost_pets.create(_lost_pet_payload(name="Luna", status="encontrado"), user)
    rejected = await lost_pets.create(_lost_pet_payload(name="Bob"), user)
    await lost_pets.moderate(lost.id, "approved", admin)
    await lost_pets.moderate(found.id, "approved", admin)
    await lost_pets.moderate(rejected.id, "rejected", admin)

    public = await lost_pets.list_public()
    assert {p.id for p in public} == {lost.id, found.id}
    assert [p.id for p in await lost_pets.list_public("encontrado")] == [found.id]


async def test_moderation_table_and_privilege(
    lost_pets: LostPetService, user: Actor, admin: Actor
) -> None:
    post = await lost_pets.create(_lost_pet_payload(), user)
    with pytest.raises(UnauthorizedException):
        await lost_pets.moderate(post.id, "approved", user)
    await lost_pets.moderate(post.id, "rejected", admin)
    with pytest.raises(IllegalTransitionException):
        await lost_pets.moderate(post.id, "pending", admin)
    approved = await lost_pets.moderate(post.id, "approved", admin)
    assert approved.get("moderationStatus") == "approved"
    assert approved.get("status") == "perdido"


async def test_found_with_story_publishes_post(
    lost_pets: LostPetService,
    events: TransitionEventBus,
    posts_repo: InMemoryRecordRepository,
    user: Actor,
    admin: Actor,
) -> None:
    post = await lost_pets.create(_lost_pet_payload(), user)
    story = {"content": "Thor voltou para casa depois de três dias na praça. " * 3}
    found = await lost_pets.set_found_status(post.id, "encontrado", admin, story=story)
    await events.drain()

    assert found.get("status") == "encontrado"
    assert found.get("moderationStatus") == "pending"
    stories = await posts_repo.query(RecordQuery())
    assert len(stories) == 1
    published = stories[0]
    assert published.get("title") == "Final Feliz para Thor!"
    assert published.get("category") == "história"
    assert published.get("author") == "Sistema APA"
    assert published.get("image") == "https://img.example.org/thor.jpg"
    assert published.get("excerpt") == story["content"][:100] + "..."
    assert published.get("isActive") is True
    assert published.get("isHighlighted") is False


async def test_found_without_story_or_back_to_lost_publishes_nothing(
    lost_pets: LostPetService,
    events: TransitionEventBus,
    posts_repo: InMemoryRecordRepository,
    user: Actor,
    admin: Actor,
) -> None:
    post = await lost_pets.create(_lost_pet_payload(), user)
    await lost_pets.set_found_status(post.id, "encontrado", admin)
    await lost_pets.set_found_status(
        post.id, "perdido", admin, story={"title": "Nope", "content": "Não deve publicar nada"}
    )
    await events.drain()
    assert await posts_repo.query(RecordQuery()) == []


async def test_story_failure_does_not_undo_status(
    lost_pets: LostPetService,
    events: TransitionEventBus,
    posts_repo: InMemoryRecordRepository,
    user: Actor,
    admin: Actor,
) -> None:
    post = await lost_pets.create(_lost_pet_payload(), user)
    posts_repo.set_unavailable()
    found = await lost_pets.set_found_status(
        post.id, "encontrado", admin, story={"content": "História que não será salva"}
    )
    await events.drain()
    assert found.get("status") == "encontrado"
    assert (await lost_pets.get(post.id)).get("status") == "encontrado"
