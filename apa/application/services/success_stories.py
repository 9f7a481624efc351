"""Publishes a success-story post when a lost pet is marked encontrado.

Attached to the transition event bus; runs after the status write and
never affects it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from apa.application.events import TransitionCompleted, TransitionEventBus
from apa.application.interfaces.repositories import IRecordRepository
from apa.application.services.content_service import make_excerpt
from apa.domain.enums import LostPetStatus, PostCategory
from apa.domain.workflows import LOST_PET_STATUS
from apa.shared.utils.datetime import utc_now

logger = logging.getLogger(__name__)

STORY_AUTHOR = "Sistema APA"


def register_success_story_hook(
    events: TransitionEventBus, posts_repo: IRecordRepository
) -> Callable[[], None]:
    """Subscribe the hook; returns the unsubscribe callable."""

    async def publish_success_story(event: TransitionCompleted) -> None:
        story = event.context.get("story")
        if not story:
            return
        pet = event.record
        content = story["content"]
        post = await posts_repo.add({
            "title": story.get("title") or f"Final Feliz para {pet.get('name', '')}!",
            "content": content,
            "excerpt": make_excerpt(content),
            "image": pet.get("photoUrl", ""),
            "category": PostCategory.HISTORIA.value,
            "author": STORY_AUTHOR,
            "isActive": True,
            "isHighlighted": False,
            "publishDate": utc_now(),
            "lostPetId": pet.id,
        })
        logger.info("Published success story %s for lost pet %s", post.id, pet.id)

    return events.subscribe(
        LOST_PET_STATUS.name,
        publish_success_story,
        to_state=LostPetStatus.ENCONTRADO.value,
    )
