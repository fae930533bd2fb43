import logging
from contextlib import asynccontextmanager
from typing import Optional, List

from sqlalchemy import select, update, delete, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from .exceptions import LinkError, CodeConflict, NotFound, StoreUnavailable
from .models import Link, utcnow

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _store_errors(db: AsyncSession, operation: str):
    """Translate database failures into StoreUnavailable."""
    try:
        yield
    except LinkError:
        raise
    except (SQLAlchemyError, OSError) as e:
        # Driver connection errors such as ConnectionRefusedError arrive unwrapped
        logger.error(f"Store failure during {operation}: {e}", exc_info=True)
        try:
            await db.rollback()
        except (SQLAlchemyError, OSError):
            logger.warning(f"Rollback after failed {operation} also failed")
        raise StoreUnavailable() from e


# Link registry
async def create_link(db: AsyncSession, code: str, target_url: str) -> Link:
    now = utcnow()
    link = Link(
        code=code,
        target_url=target_url,
        total_clicks=0,
        last_clicked=None,
        created_at=now,
        updated_at=now,
    )
    async with _store_errors(db, "create"):
        db.add(link)
        try:
            await db.commit()
        except IntegrityError:
            # Unique constraint on code; the database arbitrates concurrent creates
            await db.rollback()
            raise CodeConflict(code)
    return link

async def get_link(db: AsyncSession, code: str) -> Link:
    async with _store_errors(db, "get"):
        result = await db.execute(select(Link).where(Link.code == code))
        link = result.scalar_one_or_none()
    if link is None:
        raise NotFound(code)
    return link

async def list_links(db: AsyncSession, search: Optional[str] = None) -> List[Link]:
    stmt = select(Link).order_by(Link.created_at.desc(), Link.id.desc())
    if search:
        stmt = stmt.where(
            or_(
                Link.code.icontains(search, autoescape=True),
                Link.target_url.icontains(search, autoescape=True),
            )
        )
    async with _store_errors(db, "list"):
        result = await db.execute(stmt)
        return list(result.scalars().all())

async def record_visit(db: AsyncSession, code: str) -> Link:
    """Count one visit in a single UPDATE ... RETURNING statement."""
    now = utcnow()
    stmt = (
        update(Link)
        .where(Link.code == code)
        .values(
            total_clicks=Link.total_clicks + 1,
            last_clicked=now,
            updated_at=now,
        )
        .returning(Link)
        .execution_options(populate_existing=True)
    )
    async with _store_errors(db, "record_visit"):
        result = await db.execute(stmt)
        link = result.scalar_one_or_none()
        await db.commit()
    if link is None:
        raise NotFound(code)
    return link

async def delete_link(db: AsyncSession, code: str) -> None:
    async with _store_errors(db, "delete"):
        result = await db.execute(delete(Link).where(Link.code == code))
        await db.commit()
    if result.rowcount == 0:
        raise NotFound(code)
