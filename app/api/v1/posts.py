"""Blog post endpoints. Mutations pass the guard chain, then the ownership policy."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Path, Query, status

from app.api.deps import CurrentUser, OptionalUser, VerifiedUser, get_post_store
from app.core.errors import NotFound
from app.schemas.content import PostCreate, PostRead, PostUpdate
from app.schemas.envelope import ApiResponse
from app.services import ownership
from app.services.posts import PostStore

router = APIRouter()

Posts = Annotated[PostStore, Depends(get_post_store)]
PostId = Annotated[int, Path(ge=1)]


def _load_post(posts: PostStore, post_id: int):
    post = posts.get_by_id(post_id, include_unpublished=True)
    if post is None:
        raise NotFound("Post not found")
    return post


@router.get("", response_model=ApiResponse[dict[str, Any]], response_model_exclude_none=True)
def list_posts(
    posts: Posts,
    author: Annotated[str | None, Query(max_length=50)] = None,
) -> ApiResponse[dict[str, Any]]:
    """Published posts, newest first, optionally filtered by author username."""
    items = [PostRead.model_validate(p) for p in posts.list_published(author_username=author)]
    return ApiResponse(data={"posts": items})


@router.get("/my/posts", response_model=ApiResponse[dict[str, Any]], response_model_exclude_none=True)
def my_posts(current_user: CurrentUser, posts: Posts) -> ApiResponse[dict[str, Any]]:
    items = [PostRead.model_validate(p) for p in posts.list_by_author(current_user.id)]
    return ApiResponse(data={"posts": items})


@router.get("/{post_id}", response_model=ApiResponse[dict[str, Any]], response_model_exclude_none=True)
def get_post(post_id: PostId, posts: Posts, viewer: OptionalUser) -> ApiResponse[dict[str, Any]]:
    """Published posts are public; drafts and archived posts are visible to their author and admins."""
    post = posts.get_by_id(post_id, include_unpublished=True)
    if post is None or (
        post.status != "published"
        and (viewer is None or not ownership.can_modify(viewer, post.author_id))
    ):
        raise NotFound("Post not found")
    return ApiResponse(data={"post": PostRead.model_validate(post)})


@router.post(
    "",
    response_model=ApiResponse[dict[str, Any]],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
def create_post(body: PostCreate, current_user: VerifiedUser, posts: Posts) -> ApiResponse[dict[str, Any]]:
    """Create a post. Non-admin authors always get a draft, whatever status they asked for."""
    post = posts.create(
        author_id=current_user.id,
        title=body.title,
        content=body.content,
        excerpt=body.excerpt,
        status=ownership.resolve_post_status(current_user, body.status),
        featured_image=str(body.featured_image) if body.featured_image else None,
        tags=body.tags,
    )
    return ApiResponse(message="Post created successfully", data={"post": PostRead.model_validate(post)})


@router.put("/{post_id}", response_model=ApiResponse[dict[str, Any]], response_model_exclude_none=True)
def update_post(
    post_id: PostId,
    body: PostUpdate,
    current_user: VerifiedUser,
    posts: Posts,
) -> ApiResponse[dict[str, Any]]:
    post = _load_post(posts, post_id)
    ownership.ensure_can_modify(current_user, post)
    # Only fields present in the request change; an explicit null clears the column.
    changes = body.model_dump(exclude_unset=True, exclude={"status"})
    if "featured_image" in changes and body.featured_image is not None:
        changes["featured_image"] = str(body.featured_image)
    new_status = ownership.resolve_status_update(current_user, body.status)
    if new_status is not None:
        changes["status"] = new_status
    post = posts.update(post, changes)
    return ApiResponse(message="Post updated successfully", data={"post": PostRead.model_validate(post)})


@router.delete("/{post_id}", response_model=ApiResponse[None], response_model_exclude_none=True)
def delete_post(post_id: PostId, current_user: VerifiedUser, posts: Posts) -> ApiResponse[None]:
    post = _load_post(posts, post_id)
    ownership.ensure_can_modify(current_user, post)
    posts.delete(post)
    return ApiResponse(message="Post deleted successfully")
