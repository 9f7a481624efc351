"""News and success-story posts API."""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query, Request, Response

from apa.api.v1.dependencies import AdminActor, CurrentActor, get_post_service, require_feature
from apa.application.services.content_service import PostService
from apa.core.limiter import limit_writes
from apa.domain.enums import FeatureFlag

router = APIRouter()

PostServiceDep = Annotated[PostService, Depends(get_post_service)]
_stories_enabled = Depends(require_feature(FeatureFlag.STORIES.value))


@router.get("", dependencies=[_stories_enabled])
async def list_posts(
    posts: PostServiceDep,
    category: Annotated[str | None, Query()] = None,
) -> list[dict[str, Any]]:
    """Active posts, most recent publishDate first."""
    return [r.to_dict() for r in await posts.list_public(category)]


@router.get("/highlighted", dependencies=[_stories_enabled])
async def list_highlighted_posts(posts: PostServiceDep) -> list[dict[str, Any]]:
    return [r.to_dict() for r in await posts.list_highlighted()]


@router.get("/all")
async def list_all_posts(posts: PostServiceDep, actor: AdminActor) -> list[dict[str, Any]]:
    return [r.to_dict() for r in await posts.list_for_admin(actor)]


@router.get("/{post_id}", dependencies=[_stories_enabled])
async def get_post(post_id: str, posts: PostServiceDep) -> dict[str, Any]:
    return (await posts.get(post_id)).to_dict()


@router.post("", status_code=201)
@limit_writes
async def create_post(
    request: Request,
    posts: PostServiceDep,
    actor: CurrentActor,
    body: Annotated[dict[str, Any], Body()],
) -> dict[str, Any]:
    return (await posts.create(body, actor)).to_dict()


@router.patch("/{post_id}")
@limit_writes
async def update_post(
    request: Request,
    post_id: str,
    posts: PostServiceDep,
    actor: CurrentActor,
    body: Annotated[dict[str, Any], Body()],
) -> dict[str, Any]:
    return (await posts.update(post_id, body, actor)).to_dict()


@router.delete("/{post_id}", status_code=204)
async def delete_post(post_id: str, posts: PostServiceDep, actor: CurrentActor) -> Response:
    await posts.delete(post_id, actor)
    return Response(status_code=204)
