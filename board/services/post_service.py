"""
Post service — business logic for the Post aggregate and its likes.

Design notes
------------
- Every mutating operation loads the target first, then checks that the
  caller owns it, and only then writes.  A rejected request therefore
  never flushes anything.
- Ownership and self-only checks compare account ids by value
  (``post.account_id == account.id``), never by object identity.
- ``like_count`` is a correlated COUNT mapped on ``Post``; it is read
  back together with the post and never written.
- Service functions flush but do not commit; the transaction boundary
  is owned by the ``get_db`` dependency in the router layer.
"""
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from board.exceptions import ConflictError, InvalidArgumentError, NotFoundError, PermissionDeniedError
from board.models import Account, Post, PostLike
from board.repositories import PageRequest, PostLikeRepository, PostRepository
from board.schemas import PagedPostResponse, PostRequest

logger = logging.getLogger(__name__)

# Public sort keys accepted by the paged listing -> mapped attribute names.
_SORT_KEYS: dict[str, str] = {
    "likeCount": "like_count",
    "createdAt": "created_at",
}


# ---------------------------------------------------------------------------
# Serialisation helpers
# ---------------------------------------------------------------------------

def _post_to_dict(post: Post) -> dict:
    """Serialise a Post ORM instance (with its account loaded) to a plain dict."""
    nickname = None
    if not post.is_anonymous and post.account is not None:
        nickname = post.account.nickname
    return {
        "id": post.id,
        "title": post.title,
        "content": post.content,
        "is_anonymous": post.is_anonymous,
        "account_id": post.account_id,
        "nickname": nickname,
        "like_count": post.like_count or 0,
        "created_at": post.created_at.isoformat() if post.created_at else None,
        "updated_at": post.updated_at.isoformat() if post.updated_at else None,
    }


# ---------------------------------------------------------------------------
# Lookup / authorization helpers
# ---------------------------------------------------------------------------

async def get_post_or_raise(db: AsyncSession, post_id: int, for_update: bool = False) -> Post:
    post = await PostRepository(db).find_by_id(post_id, for_update=for_update)
    if post is None:
        raise NotFoundError("Post", post_id)
    return post


def _check_owner(post: Post, account: Account, action: str) -> None:
    if post.account_id != account.id:
        logger.warning(
            "Account %s denied %s on post %s owned by %s",
            account.id, action, post.id, post.account_id,
        )
        raise PermissionDeniedError(f"You do not have permission to {action} this post")


def _check_self(account: Account, target_account_id: int, action: str) -> None:
    # A caller may only act on its own like, never on another account's.
    if account.id != target_account_id:
        logger.warning(
            "Account %s denied %s on behalf of account %s",
            account.id, action, target_account_id,
        )
        raise PermissionDeniedError(f"You do not have permission to {action} this like")


# ---------------------------------------------------------------------------
# Post queries
# ---------------------------------------------------------------------------

async def get_posts_by_account(db: AsyncSession, account: Account) -> list[dict]:
    """Return every post owned by *account*, newest first."""
    posts = await PostRepository(db).find_all_by_account_order_by_created_at_desc(account)
    return [_post_to_dict(p) for p in posts]


async def get_posts(db: AsyncSession) -> list[dict]:
    """Return every post in the storage default order."""
    posts = await PostRepository(db).find_all()
    return [_post_to_dict(p) for p in posts]


async def get_posts_page(
    db: AsyncSession,
    page: int = 0,
    size: int = 10,
    order: str = "createdAt",
) -> PagedPostResponse:
    """
    Return one page of posts sorted descending by *order*.

    *order* must be ``likeCount`` or ``createdAt``.  Pages are 0-based and
    carry a has-next flag instead of a total, so no COUNT query is issued.
    """
    if order not in _SORT_KEYS:
        raise InvalidArgumentError(
            f"No such sort key: {order!r}",
            context={"order": order, "allowed": sorted(_SORT_KEYS)},
        )

    posts_slice = await PostRepository(db).find_slice(
        PageRequest(page=page, size=size, sort_key=_SORT_KEYS[order], descending=True)
    )
    return PagedPostResponse(
        current_page=posts_slice.number,
        current_size=posts_slice.number_of_elements,
        has_next_page=posts_slice.has_next,
        posts=[_post_to_dict(p) for p in posts_slice.content],
    )


async def get_post(db: AsyncSession, post_id: int) -> dict:
    return _post_to_dict(await get_post_or_raise(db, post_id))


# ---------------------------------------------------------------------------
# Post mutations
# ---------------------------------------------------------------------------

async def create_post(db: AsyncSession, account: Account, data: PostRequest) -> dict:
    post = Post(
        title=data.title,
        content=data.content,
        is_anonymous=data.is_anonymous,
    )
    post.assign_account(account)

    post = await PostRepository(db).save(post)
    logger.info("Account %s created post %s", account.id, post.id)
    return _post_to_dict(post)


async def update_post(
    db: AsyncSession, account: Account, post_id: int, data: PostRequest
) -> dict:
    """
    Replace the title, content and anonymity of a post owned by *account*.

    Raises NotFoundError when the post does not exist and
    PermissionDeniedError when the caller is not its owner.
    """
    post = await get_post_or_raise(db, post_id)
    _check_owner(post, account, "update")

    post.update(data.title, data.content, data.is_anonymous)
    post = await PostRepository(db).save(post)
    logger.info("Account %s updated post %s", account.id, post.id)
    return _post_to_dict(post)


async def delete_post(db: AsyncSession, account: Account, post_id: int) -> None:
    post = await get_post_or_raise(db, post_id)
    _check_owner(post, account, "delete")

    await PostRepository(db).delete(post)
    logger.info("Account %s deleted post %s", account.id, post_id)


# ---------------------------------------------------------------------------
# Likes
# ---------------------------------------------------------------------------

async def like_post(db: AsyncSession, account: Account, post_id: int) -> None:
    """
    Record that *account* likes the post.

    The pre-check gives a clean error for the common case; the unique
    constraint on (account_id, post_id) catches two concurrent requests
    that both pass it.
    """
    post = await get_post_or_raise(db, post_id)
    likes = PostLikeRepository(db)

    if await likes.find_by_account_and_post(account, post) is not None:
        raise ConflictError("You have already liked this post")

    # A failed flush expires every loaded instance, so the ids are read
    # up front for the error path.
    account_id, post_id = account.id, post.id
    try:
        await likes.save(PostLike(account_id=account_id, post_id=post_id))
    except IntegrityError:
        raise ConflictError(
            "You have already liked this post",
            context={"account_id": account_id, "post_id": post_id},
        ) from None
    logger.info("Account %s liked post %s", account_id, post_id)


async def unlike_post(
    db: AsyncSession, account: Account, post_id: int, target_account_id: int
) -> None:
    _check_self(account, target_account_id, "delete")

    post = await get_post_or_raise(db, post_id)
    likes = PostLikeRepository(db)
    post_like = await likes.find_by_account_and_post(account, post)
    if post_like is None:
        raise NotFoundError("PostLike", message="You have not liked this post")

    await likes.delete(post_like)
    logger.info("Account %s unliked post %s", account.id, post.id)


async def check_like(
    db: AsyncSession, account: Account, post_id: int, target_account_id: int
) -> None:
    """Succeed silently if *account* likes the post, raise NotFoundError otherwise."""
    _check_self(account, target_account_id, "view")

    post = await get_post_or_raise(db, post_id)
    if await PostLikeRepository(db).find_by_account_and_post(account, post) is None:
        raise NotFoundError("PostLike", message="You have not liked this post")
