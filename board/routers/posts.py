from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from board.database import get_db
from board.dependencies import PaginationParams, get_current_account
from board.models import Account
from board.schemas import ERROR_RESPONSES, PagedPostResponse, PostRequest, PostResponse
from board.services import post_service

router = APIRouter(prefix="/api/v1/posts", tags=["posts"], responses=ERROR_RESPONSES)

@router.get("", response_model=PagedPostResponse)
async def list_posts(
    pagination: PaginationParams = Depends(),
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    return await post_service.get_posts_page(db, pagination.page, pagination.size, pagination.order)

@router.get("/all", response_model=list[PostResponse])
async def list_all_posts(
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    return await post_service.get_posts(db)

@router.get("/mine", response_model=list[PostResponse])
async def list_my_posts(
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    return await post_service.get_posts_by_account(db, account)

@router.get("/{post_id}", response_model=PostResponse)
async def get_post(
    post_id: int,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    return await post_service.get_post(db, post_id)

@router.post("", status_code=201, response_model=PostResponse)
async def create_post(
    data: PostRequest,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    return await post_service.create_post(db, account, data)

@router.put("/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: int,
    data: PostRequest,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    return await post_service.update_post(db, account, post_id, data)

@router.delete("/{post_id}", status_code=204)
async def delete_post(
    post_id: int,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    await post_service.delete_post(db, account, post_id)

# --- Likes ---

@router.post("/{post_id}/likes", status_code=201)
async def like_post(
    post_id: int,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    await post_service.like_post(db, account, post_id)

@router.get("/{post_id}/likes/{account_id}", status_code=204)
async def check_like(
    post_id: int,
    account_id: int,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    await post_service.check_like(db, account, post_id, account_id)

@router.delete("/{post_id}/likes/{account_id}", status_code=204)
async def unlike_post(
    post_id: int,
    account_id: int,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    await post_service.unlike_post(db, account, post_id, account_id)
