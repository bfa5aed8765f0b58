"""
Account service — registration, login and availability checks.

Email and nickname uniqueness is checked up front for a readable error
and enforced again by the unique constraints on ``accounts``; a
constraint violation at flush time is reported the same way.
"""
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from board.exceptions import AuthenticationError, ConflictError
from board.models import Account
from board.repositories import AccountRepository
from board.schemas import AccountCreate
from board.security import create_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)


def _account_to_dict(account: Account) -> dict:
    """Serialise an Account ORM instance; the password hash is never included."""
    return {
        "id": account.id,
        "email": account.email,
        "nickname": account.nickname,
        "registered_at": account.registered_at.isoformat() if account.registered_at else None,
    }


async def check_email(db: AsyncSession, email: str) -> None:
    if await AccountRepository(db).find_by_email(email) is not None:
        raise ConflictError("This email is already registered")


async def check_nickname(db: AsyncSession, nickname: str) -> None:
    if await AccountRepository(db).find_by_nickname(nickname) is not None:
        raise ConflictError("This nickname is already taken")


async def create_account(db: AsyncSession, data: AccountCreate) -> dict:
    await check_email(db, data.email)
    await check_nickname(db, data.nickname)

    account = Account(
        email=data.email,
        nickname=data.nickname,
        password=hash_password(data.password),
    )
    try:
        account = await AccountRepository(db).save(account)
    except IntegrityError:
        raise ConflictError("An account with this email or nickname already exists") from None

    logger.info("Registered account %s", account.id)
    return _account_to_dict(account)


async def authenticate(db: AsyncSession, email: str, password: str) -> str:
    """Return a fresh access token for valid credentials."""
    account = await AccountRepository(db).find_by_email(email)
    if account is None or not verify_password(password, account.password):
        logger.warning("Failed login attempt for %s", email)
        raise AuthenticationError("Invalid email or password")
    return create_access_token(account.id)
