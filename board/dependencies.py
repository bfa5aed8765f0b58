import logging

from fastapi import Depends, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from board.config import settings
from board.database import get_db
from board.exceptions import AuthenticationError
from board.models import Account
from board.repositories import AccountRepository
from board.security import decode_access_token

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_account(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> Account:
    """
    Resolve the bearer token to a persistent ``Account``.

    The account is loaded through the request's own session (FastAPI
    caches ``get_db`` per request), so services can attach it to new
    rows directly.
    """
    if credentials is None:
        raise AuthenticationError("Not authenticated")

    payload = decode_access_token(credentials.credentials)
    if not payload:
        raise AuthenticationError("Invalid or expired token")

    try:
        account_id = int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise AuthenticationError("Invalid or expired token") from None

    account = await AccountRepository(db).find_by_id(account_id)
    if account is None:
        logger.warning("Token presented for missing account %s", account_id)
        raise AuthenticationError("Account no longer exists")
    return account


class PaginationParams:
    """
    Reusable FastAPI dependency that parses the post listing query
    parameters.

    Attributes
    ----------
    page:
        0-based page number.
    size:
        Number of posts per page, between 1 and ``settings.MAX_PAGE_SIZE``;
        larger values are rejected with 422.
    order:
        Public sort key.  The post service validates it and rejects
        anything other than ``likeCount`` or ``createdAt``.
    """

    def __init__(
        self,
        page: int = Query(
            0,
            ge=0,
            description="Page number (0-based).",
        ),
        size: int = Query(
            settings.DEFAULT_PAGE_SIZE,
            ge=1,
            le=settings.MAX_PAGE_SIZE,
            description="Number of posts returned per page.",
        ),
        order: str = Query(
            "createdAt",
            description="Sort key: 'likeCount' or 'createdAt' (both descending).",
        ),
    ) -> None:
        self.page = page
        self.size = size
        self.order = order
