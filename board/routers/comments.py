from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from board.database import get_db
from board.dependencies import get_current_account
from board.models import Account
from board.schemas import ERROR_RESPONSES, CommentRequest, CommentResponse
from board.services import comment_service

router = APIRouter(prefix="/api/v1/posts/{post_id}/comments", tags=["comments"], responses=ERROR_RESPONSES)

@router.get("", response_model=list[CommentResponse])
async def list_comments(
    post_id: int,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    return await comment_service.get_comments(db, post_id)

@router.post("", status_code=201, response_model=CommentResponse)
async def create_comment(
    post_id: int,
    data: CommentRequest,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    return await comment_service.create_comment(db, account, post_id, data)

@router.put("/{comment_id}", response_model=CommentResponse)
async def update_comment(
    post_id: int,
    comment_id: int,
    data: CommentRequest,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    return await comment_service.update_comment(db, account, post_id, comment_id, data)

@router.delete("/{comment_id}", status_code=204)
async def delete_comment(
    post_id: int,
    comment_id: int,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    await comment_service.delete_comment(db, account, post_id, comment_id)
