"""
Repositories — the data-access contract the services are written against.

Each repository wraps the request's ``AsyncSession``.  They flush but
never commit; the transaction boundary belongs to ``get_db``.  Every
query that feeds a projection eager-loads the owning account with
``joinedload`` because all relationships are mapped ``lazy="noload"``.
"""
from dataclasses import dataclass
from typing import Generic, List, Optional, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from board.models import Account, Post, PostComment, PostLike

T = TypeVar("T")


@dataclass(frozen=True)
class PageRequest:
    """0-based page request sorted on a single column."""

    page: int
    size: int
    sort_key: str
    descending: bool = True

    @property
    def offset(self) -> int:
        return self.page * self.size


@dataclass
class Slice(Generic[T]):
    """One page of rows plus a has-next flag; no total count is ever queried."""

    content: List[T]
    number: int
    size: int
    has_next: bool

    @property
    def number_of_elements(self) -> int:
        return len(self.content)


class AccountRepository:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def find_by_id(self, account_id: int) -> Optional[Account]:
        return await self.db.get(Account, account_id)

    async def find_by_email(self, email: str) -> Optional[Account]:
        result = await self.db.execute(select(Account).where(Account.email == email))
        return result.scalar_one_or_none()

    async def find_by_nickname(self, nickname: str) -> Optional[Account]:
        result = await self.db.execute(select(Account).where(Account.nickname == nickname))
        return result.scalar_one_or_none()

    async def save(self, account: Account) -> Account:
        self.db.add(account)
        await self.db.flush()
        await self.db.refresh(account, ["registered_at"])
        return account


class PostRepository:
    # Attribute names that find_slice may sort on.
    _SORTABLE = {
        "like_count": Post.like_count,
        "created_at": Post.created_at,
    }

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    @staticmethod
    def _select_posts():
        # populate_existing: like_count must be re-read even for posts
        # already in the identity map.
        return (
            select(Post)
            .options(joinedload(Post.account))
            .execution_options(populate_existing=True)
        )

    @classmethod
    def _select_post_by_id(cls, post_id: int, for_update: bool = False):
        q = cls._select_posts().where(Post.id == post_id)
        if for_update:
            # Lock only the posts row; the joined account sits on the
            # nullable side of an outer join.
            q = q.with_for_update(of=Post)
        return q

    async def find_by_id(self, post_id: int, for_update: bool = False) -> Optional[Post]:
        """
        Load one post with its owner.  *for_update* row-locks the post
        until the transaction ends, serializing writers that derive
        state from its children.
        """
        result = await self.db.execute(self._select_post_by_id(post_id, for_update))
        return result.unique().scalar_one_or_none()

    async def find_all_by_account_order_by_created_at_desc(self, account: Account) -> List[Post]:
        q = (
            self._select_posts()
            .where(Post.account_id == account.id)
            # created_at has second resolution on some backends; id breaks ties
            .order_by(Post.created_at.desc(), Post.id.desc())
        )
        result = await self.db.execute(q)
        return list(result.unique().scalars().all())

    async def find_all(self) -> List[Post]:
        result = await self.db.execute(self._select_posts())
        return list(result.unique().scalars().all())

    async def find_slice(self, page_request: PageRequest) -> Slice[Post]:
        """
        Return the requested page as a ``Slice``.

        One extra row is fetched past the page boundary; its presence is
        the has-next flag, which avoids a COUNT over the whole table.
        """
        if page_request.sort_key not in self._SORTABLE:
            raise ValueError(f"unsortable column: {page_request.sort_key!r}")
        sort_col = self._SORTABLE[page_request.sort_key]
        if page_request.descending:
            order_by = (sort_col.desc(), Post.id.desc())
        else:
            order_by = (sort_col.asc(), Post.id.asc())

        q = (
            self._select_posts()
            .order_by(*order_by)
            .offset(page_request.offset)
            .limit(page_request.size + 1)
        )
        result = await self.db.execute(q)
        rows = list(result.unique().scalars().all())
        return Slice(
            content=rows[: page_request.size],
            number=page_request.page,
            size=page_request.size,
            has_next=len(rows) > page_request.size,
        )

    async def save(self, post: Post) -> Post:
        self.db.add(post)
        await self.db.flush()
        # Server-generated and derived columns are not populated by the flush.
        await self.db.refresh(post, ["created_at", "updated_at", "like_count"])
        return post

    async def delete(self, post: Post) -> None:
        await self.db.delete(post)
        await self.db.flush()


class PostLikeRepository:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def find_by_account_and_post(self, account: Account, post: Post) -> Optional[PostLike]:
        q = select(PostLike).where(
            PostLike.account_id == account.id,
            PostLike.post_id == post.id,
        )
        result = await self.db.execute(q)
        return result.scalar_one_or_none()

    async def save(self, post_like: PostLike) -> PostLike:
        # Raises IntegrityError when the (account, post) pair already exists.
        self.db.add(post_like)
        await self.db.flush()
        return post_like

    async def delete(self, post_like: PostLike) -> None:
        await self.db.delete(post_like)
        await self.db.flush()


class PostCommentRepository:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def find_by_id(self, comment_id: int) -> Optional[PostComment]:
        q = (
            select(PostComment)
            .where(PostComment.id == comment_id)
            .options(joinedload(PostComment.account))
        )
        result = await self.db.execute(q)
        return result.unique().scalar_one_or_none()

    async def find_all_by_post(self, post: Post) -> List[PostComment]:
        q = (
            select(PostComment)
            .where(PostComment.post_id == post.id)
            .options(joinedload(PostComment.account))
            .order_by(PostComment.id.asc())
        )
        result = await self.db.execute(q)
        return list(result.unique().scalars().all())

    async def find_order_num(self, post: Post, account: Account) -> Optional[int]:
        """Ordinal the account already holds on this post, if it has commented."""
        q = (
            select(PostComment.order_num)
            .where(PostComment.post_id == post.id, PostComment.account_id == account.id)
            .limit(1)
        )
        return (await self.db.execute(q)).scalar_one_or_none()

    async def next_order_num(self, post: Post) -> int:
        q = select(func.coalesce(func.max(PostComment.order_num), 0)).where(
            PostComment.post_id == post.id
        )
        return (await self.db.execute(q)).scalar_one() + 1

    async def save(self, comment: PostComment) -> PostComment:
        self.db.add(comment)
        await self.db.flush()
        await self.db.refresh(comment, ["created_at", "updated_at"])
        return comment

    async def delete(self, comment: PostComment) -> None:
        await self.db.delete(comment)
        await self.db.flush()
