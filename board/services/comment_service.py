"""
Comment service — comments on a Post.

Each commenter gets one ordinal per post (``order_num``), assigned on
their first comment there and reused for every later one, so anonymous
comments render as a stable "Anonymous 1", "Anonymous 2", ... within a
thread.  The post row is locked while an ordinal is assigned, so two
new commenters cannot both read the same maximum.  Edits and deletes
follow the same load, check owner, then write order as posts.
"""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from board.exceptions import NotFoundError, PermissionDeniedError
from board.models import Account, PostComment
from board.repositories import PostCommentRepository
from board.schemas import CommentRequest
from board.services.post_service import get_post_or_raise

logger = logging.getLogger(__name__)

ANONYMOUS_LABEL = "Anonymous"


def _writer_label(comment: PostComment) -> str:
    if comment.is_anonymous or comment.account is None:
        return f"{ANONYMOUS_LABEL} {comment.order_num}"
    return comment.account.nickname


def _comment_to_dict(comment: PostComment) -> dict:
    return {
        "id": comment.id,
        "post_id": comment.post_id,
        "comment": comment.comment,
        "is_anonymous": comment.is_anonymous,
        "order_num": comment.order_num,
        "writer": _writer_label(comment),
        "created_at": comment.created_at.isoformat() if comment.created_at else None,
        "updated_at": comment.updated_at.isoformat() if comment.updated_at else None,
    }


async def _get_owned_comment(
    db: AsyncSession, account: Account, post_id: int, comment_id: int, action: str
) -> PostComment:
    comment = await PostCommentRepository(db).find_by_id(comment_id)
    # A comment addressed through the wrong post is treated as missing.
    if comment is None or comment.post_id != post_id:
        raise NotFoundError("Comment", comment_id)
    if comment.account_id != account.id:
        logger.warning(
            "Account %s denied %s on comment %s owned by %s",
            account.id, action, comment.id, comment.account_id,
        )
        raise PermissionDeniedError(f"You do not have permission to {action} this comment")
    return comment


async def get_comments(db: AsyncSession, post_id: int) -> list[dict]:
    """Return the comments of a post in posting order."""
    post = await get_post_or_raise(db, post_id)
    comments = await PostCommentRepository(db).find_all_by_post(post)
    return [_comment_to_dict(c) for c in comments]


async def create_comment(
    db: AsyncSession, account: Account, post_id: int, data: CommentRequest
) -> dict:
    # The post row lock serializes ordinal assignment between first-time
    # commenters on the same post.
    post = await get_post_or_raise(db, post_id, for_update=True)
    comments = PostCommentRepository(db)

    order_num = await comments.find_order_num(post, account)
    if order_num is None:
        order_num = await comments.next_order_num(post)

    comment = PostComment(
        comment=data.comment,
        is_anonymous=data.is_anonymous,
        order_num=order_num,
        post_id=post.id,
        account_id=account.id,
    )
    comment.account = account
    comment = await comments.save(comment)
    logger.info("Account %s commented on post %s (#%s)", account.id, post.id, order_num)
    return _comment_to_dict(comment)


async def update_comment(
    db: AsyncSession,
    account: Account,
    post_id: int,
    comment_id: int,
    data: CommentRequest,
) -> dict:
    comment = await _get_owned_comment(db, account, post_id, comment_id, "update")

    comment.update(data.comment, data.is_anonymous)
    comment = await PostCommentRepository(db).save(comment)
    logger.info("Account %s updated comment %s", account.id, comment.id)
    return _comment_to_dict(comment)


async def delete_comment(
    db: AsyncSession, account: Account, post_id: int, comment_id: int
) -> None:
    comment = await _get_owned_comment(db, account, post_id, comment_id, "delete")

    await PostCommentRepository(db).delete(comment)
    logger.info("Account %s deleted comment %s", account.id, comment_id)
