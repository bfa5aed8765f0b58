from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from board.database import get_db
from board.schemas import ERROR_RESPONSES, AccountCreate, AccountResponse, AvailabilityResponse, LoginRequest, TokenResponse
from board.services import account_service

router = APIRouter(prefix="/api/v1/auth", tags=["auth"], responses=ERROR_RESPONSES)

@router.post("/signup", status_code=201, response_model=AccountResponse)
async def signup(data: AccountCreate, db: AsyncSession = Depends(get_db)):
    return await account_service.create_account(db, data)

@router.post("/login", response_model=TokenResponse)
async def login(data: LoginRequest, db: AsyncSession = Depends(get_db)):
    token = await account_service.authenticate(db, data.email, data.password)
    return TokenResponse(access_token=token)

@router.get("/check-email", response_model=AvailabilityResponse)
async def check_email(email: str = Query(...), db: AsyncSession = Depends(get_db)):
    await account_service.check_email(db, email)
    return AvailabilityResponse(available=True)

@router.get("/check-nickname", response_model=AvailabilityResponse)
async def check_nickname(nickname: str = Query(...), db: AsyncSession = Depends(get_db)):
    await account_service.check_nickname(db, nickname)
    return AvailabilityResponse(available=True)
