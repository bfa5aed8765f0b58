from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
    select,
)
from sqlalchemy.orm import Mapped, column_property, mapped_column, relationship

from board.database import Base


# ---------------------------------------------------------------------------
# Account
# ---------------------------------------------------------------------------
class Account(Base):
    __tablename__ = "accounts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    nickname: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)
    # PBKDF2 "salt$hash" string, see board.security
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    registered_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # Back-references only; posts and comments are owned by their own rows.
    posts: Mapped[List["Post"]] = relationship(
        "Post", back_populates="account", lazy="noload"
    )
    comments: Mapped[List["PostComment"]] = relationship(
        "PostComment", back_populates="account", lazy="noload"
    )


# ---------------------------------------------------------------------------
# Post
# ---------------------------------------------------------------------------
class Post(Base):
    __tablename__ = "posts"

    __table_args__ = (
        # "My posts" listing, newest first
        Index("ix_posts_account_id_created_at", "account_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    is_anonymous: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False, index=True
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), onupdate=func.now(), nullable=True
    )

    account_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Relationships — lazy="noload"; services eager-load what they project.
    account: Mapped["Account"] = relationship(
        "Account", back_populates="posts", lazy="noload"
    )
    images: Mapped[List["PostImage"]] = relationship(
        "PostImage", back_populates="post", lazy="noload", passive_deletes=True
    )
    comments: Mapped[List["PostComment"]] = relationship(
        "PostComment", back_populates="post", lazy="noload", passive_deletes=True
    )
    likes: Mapped[List["PostLike"]] = relationship(
        "PostLike", back_populates="post", lazy="noload", passive_deletes=True
    )

    def assign_account(self, account: Account) -> None:
        """
        Make *account* the owner of this post.

        ``back_populates`` moves the post out of the previous owner's
        ``posts`` collection and into the new one as part of this single
        assignment, so the two sides never disagree.
        """
        if account is None:
            raise ValueError("a post must always have an owning account")
        self.account = account

    def add_image(self, image: PostImage) -> None:
        # Appending sets image.post through back_populates.
        if image not in self.images:
            self.images.append(image)

    def update(self, title: str, content: str, is_anonymous: bool) -> None:
        self.title = title
        self.content = content
        self.is_anonymous = is_anonymous


# ---------------------------------------------------------------------------
# PostImage
# ---------------------------------------------------------------------------
class PostImage(Base):
    __tablename__ = "post_images"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    url: Mapped[str] = mapped_column(String(500), nullable=False)

    post_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True
    )

    post: Mapped["Post"] = relationship("Post", back_populates="images", lazy="noload")


# ---------------------------------------------------------------------------
# PostComment
# ---------------------------------------------------------------------------
class PostComment(Base):
    __tablename__ = "post_comments"

    __table_args__ = (
        Index("ix_post_comments_post_id_account_id", "post_id", "account_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    comment: Mapped[str] = mapped_column(Text, nullable=False)
    is_anonymous: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    # Per-post ordinal of the commenter: "Anonymous 1", "Anonymous 2", ...
    order_num: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), onupdate=func.now(), nullable=True
    )

    post_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    account_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True
    )

    post: Mapped["Post"] = relationship("Post", back_populates="comments", lazy="noload")
    account: Mapped["Account"] = relationship(
        "Account", back_populates="comments", lazy="noload"
    )

    def update(self, comment: str, is_anonymous: bool) -> None:
        self.comment = comment
        self.is_anonymous = is_anonymous


# ---------------------------------------------------------------------------
# PostLike
# ---------------------------------------------------------------------------
class PostLike(Base):
    __tablename__ = "post_likes"

    __table_args__ = (
        # One like per (account, post); closes the check-then-insert race.
        UniqueConstraint("account_id", "post_id", name="uq_post_likes_account_id_post_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    account_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    post_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True
    )

    account: Mapped["Account"] = relationship("Account", lazy="noload")
    post: Mapped["Post"] = relationship("Post", back_populates="likes", lazy="noload")


# ---------------------------------------------------------------------------
# Derived columns
# ---------------------------------------------------------------------------

# Never stored: counted from post_likes in the same SELECT that loads the
# post, so it cannot drift from the join table and can be used in ORDER BY.
Post.like_count = column_property(
    select(func.count(PostLike.id))
    .where(PostLike.post_id == Post.id)
    .correlate_except(PostLike)
    .scalar_subquery()
)
