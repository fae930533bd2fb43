import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from .api import links
from .config import settings
from .database import engine, get_db, init_models
from .exceptions import (
    LinkError,
    InvalidInput,
    CodeConflict,
    NotFound,
)
from .logging_config import setup_logging
from .middleware import RequestLoggingMiddleware
from .observability import PrometheusMiddleware, metrics_endpoint
from .services.resolver import resolve

setup_logging(settings.LOG_LEVEL)

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup logic
    await init_models()
    yield
    # Shutdown logic
    await engine.dispose()

app = FastAPI(
    title="Short Links",
    description="Short codes that redirect to target URLs and count visits",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(PrometheusMiddleware)
app.add_middleware(RequestLoggingMiddleware)

app.add_route("/metrics", metrics_endpoint)

app.include_router(links.router, prefix="/api")

ERROR_STATUS = {
    InvalidInput: status.HTTP_400_BAD_REQUEST,
    CodeConflict: status.HTTP_409_CONFLICT,
    NotFound: status.HTTP_404_NOT_FOUND,
}

@app.exception_handler(LinkError)
async def link_error_handler(request: Request, exc: LinkError):
    status_code = ERROR_STATUS.get(type(exc))
    if status_code is None:
        # Store failures and exhausted generation: no internal detail leaves the service
        logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"},
        )
    return JSONResponse(status_code=status_code, content={"error": exc.message})

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # Report the first problem only, as a plain message
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        error = errors[0]
        # Integer parts are list indexes or JSON offsets, not field names
        field = ".".join(
            str(part) for part in error.get("loc", ()) if part != "body" and not isinstance(part, int)
        )
        if error.get("type") == "json_invalid":
            message = "Request body is not valid JSON"
        elif field:
            message = f"{field}: {error.get('msg')}"
        else:
            message = error.get("msg", message)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})

@app.get("/health")
async def health():
    return {"status": "ok"}

@app.get("/{short_code}", response_class=RedirectResponse, status_code=status.HTTP_302_FOUND)
async def redirect_to_url(
    short_code: str,
    db: AsyncSession = Depends(get_db)
):
    target_url = await resolve(db, short_code)
    return RedirectResponse(url=target_url, status_code=status.HTTP_302_FOUND)
