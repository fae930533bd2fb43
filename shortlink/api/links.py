from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..schemas import LinkCreate, LinkResponse, ErrorResponse, MessageResponse
from ..services import directory

router = APIRouter()

NOT_FOUND = {404: {"model": ErrorResponse}}

@router.post(
    "/links",
    response_model=LinkResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def create_link(
    link_in: LinkCreate,
    db: AsyncSession = Depends(get_db)
):
    return await directory.create_link(db, link_in.target_url, link_in.code)

@router.get("/links", response_model=List[LinkResponse])
async def list_links(
    q: Optional[str] = Query(None, description="Case-insensitive match on code or target URL"),
    db: AsyncSession = Depends(get_db)
):
    return await directory.list_links(db, search=q)

@router.get("/links/{code}", response_model=LinkResponse, responses=NOT_FOUND)
async def get_link(
    code: str,
    db: AsyncSession = Depends(get_db)
):
    return await directory.get_link(db, code)

@router.delete("/links/{code}", response_model=MessageResponse, responses=NOT_FOUND)
async def delete_link(
    code: str,
    db: AsyncSession = Depends(get_db)
):
    await directory.delete_link(db, code)
    return MessageResponse(message="Link deleted successfully")
