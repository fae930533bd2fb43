import logging
import re
from typing import Optional, List

from pydantic import AnyUrl, TypeAdapter, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from .. import crud
from ..config import settings
from ..exceptions import InvalidInput, CodeConflict, CodeGenerationExhausted
from ..models import Link
from ..observability import CODE_COLLISIONS_TOTAL, LINKS_CREATED_TOTAL
from ..utils import generate_random_code

logger = logging.getLogger(__name__)

CODE_PATTERN = re.compile(r"[A-Za-z0-9]{6,8}")

_url_adapter = TypeAdapter(AnyUrl)


def validate_target_url(target_url: str) -> str:
    """Check the URL is absolute and well formed; the caller's string is kept as is."""
    try:
        _url_adapter.validate_python(target_url)
    except ValidationError:
        raise InvalidInput("Invalid URL format")
    return target_url


def validate_code(code: str) -> str:
    if not CODE_PATTERN.fullmatch(code):
        raise InvalidInput("Code must be 6-8 alphanumeric characters")
    return code


async def create_link(db: AsyncSession, target_url: str, code: Optional[str] = None) -> Link:
    target_url = validate_target_url(target_url)
    if code is not None:
        link = await _create_with_alias(db, target_url, validate_code(code))
    else:
        link = await _create_with_generated_code(db, target_url)
    LINKS_CREATED_TOTAL.inc()
    logger.info(f"Created link -> {link.target_url}", extra={"code": link.code})
    return link


async def _create_with_alias(db: AsyncSession, target_url: str, code: str) -> Link:
    # Custom aliases are never replaced; the conflict goes back to the caller
    return await crud.create_link(db, code, target_url)


async def _create_with_generated_code(db: AsyncSession, target_url: str) -> Link:
    attempts = settings.CODE_GENERATION_ATTEMPTS
    for attempt in range(1, attempts + 1):
        code = generate_random_code()
        try:
            return await crud.create_link(db, code, target_url)
        except CodeConflict:
            CODE_COLLISIONS_TOTAL.inc()
            logger.warning(f"Generated code collided (attempt {attempt}/{attempts})", extra={"code": code})
    logger.error(f"Could not generate a unique code after {attempts} attempts")
    raise CodeGenerationExhausted(attempts)


async def get_link(db: AsyncSession, code: str) -> Link:
    return await crud.get_link(db, code)


async def list_links(db: AsyncSession, search: Optional[str] = None) -> List[Link]:
    return await crud.list_links(db, search=search)


async def delete_link(db: AsyncSession, code: str) -> None:
    await crud.delete_link(db, code)
    logger.info("Deleted link", extra={"code": code})
