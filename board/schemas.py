from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime


# --- Account ---

class AccountBase(BaseModel):
    email: str = Field(max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    nickname: str = Field(min_length=1, max_length=50)


class AccountCreate(AccountBase):
    password: str = Field(min_length=8, max_length=128)


class AccountResponse(AccountBase):
    id: int
    registered_at: datetime
    model_config = ConfigDict(from_attributes=True)


# --- Auth ---

class LoginRequest(BaseModel):
    email: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class AvailabilityResponse(BaseModel):
    available: bool


# --- Post ---

class PostRequest(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    content: str = Field(min_length=1)
    is_anonymous: bool = True


class PostResponse(BaseModel):
    id: int
    title: str
    content: str
    is_anonymous: bool
    account_id: int
    nickname: str | None  # None when the post is anonymous
    like_count: int
    created_at: datetime | None
    updated_at: datetime | None


class PagedPostResponse(BaseModel):
    current_page: int
    current_size: int
    has_next_page: bool
    posts: list[PostResponse]


# --- Comment ---

class CommentRequest(BaseModel):
    comment: str = Field(min_length=1)
    is_anonymous: bool = True


class CommentResponse(BaseModel):
    id: int
    post_id: int
    comment: str
    is_anonymous: bool
    order_num: int
    writer: str  # "Anonymous N" or the account nickname
    created_at: datetime | None
    updated_at: datetime | None


# --- Errors ---

class ErrorResponse(BaseModel):
    timestamp: str
    message: str
    details: str


# Documented on every router so the OpenAPI schema shows the error body.
ERROR_RESPONSES = {
    status: {"model": ErrorResponse}
    for status in (400, 401, 403, 404, 409)
}
