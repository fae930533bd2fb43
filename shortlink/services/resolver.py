import logging

from sqlalchemy.ext.asyncio import AsyncSession

from ..crud import record_visit
from ..exceptions import NotFound
from ..observability import REDIRECT_TOTAL, REDIRECT_404_TOTAL

logger = logging.getLogger(__name__)


async def resolve(db: AsyncSession, short_code: str) -> str:
    """Count a visit to ``short_code`` and return where to send the visitor.

    Lookup and increment are one registry call, so a link deleted
    concurrently is either counted and followed or reported missing,
    never half of each.
    """
    try:
        link = await record_visit(db, short_code)
    except NotFound:
        REDIRECT_404_TOTAL.inc()
        raise
    REDIRECT_TOTAL.inc()
    logger.debug(f"Resolved -> {link.target_url} ({link.total_clicks} clicks)", extra={"code": short_code})
    return link.target_url
