"""FastAPI application."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .. import __version__
from ..config.settings import get_settings
from ..exceptions import MailMindError
from ..storage.database import get_db
from .dependencies import close_llm
from .routers import attachments, chat, emails, events, imports, search, settings, system

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the database on startup and close the LLM client on shutdown."""
    config = get_settings()
    get_db()
    if config.save_attachments:
        config.attachments_dir.mkdir(parents=True, exist_ok=True)
    logger.info(f"MailMind {__version__} ready ({config.storage_label})")
    yield
    close_llm()
    logger.info("MailMind shutting down")


def _validation_message(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = error.get("msg", "Invalid value")
        messages.append(f"{location}: {message}" if location else message)
    return ", ".join(messages) or "Invalid request."


async def mailmind_error_handler(request: Request, exc: MailMindError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message} {exc.details}")
    else:
        logger.warning(f"{request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"error": _validation_message(exc)})


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"error": str(exc) or "Internal server error."})


def create_app() -> FastAPI:
    """Build the application with all routers and error handlers."""
    app = FastAPI(
        title="MailMind Archive",
        description="Import, classify and search email archives with a local LLM",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_exception_handler(MailMindError, mailmind_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(system.router)
    app.include_router(imports.router)
    app.include_router(search.router)
    app.include_router(chat.router)
    app.include_router(emails.router)
    app.include_router(events.router)
    app.include_router(settings.router)
    app.include_router(attachments.router)

    return app


app = create_app()
