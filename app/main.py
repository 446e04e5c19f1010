"""
Ideaji — FastAPI application entry-point.

Run with:
    uvicorn app.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.middleware.sessions import SessionMiddleware
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from app import models  # noqa: F401
from app.config import settings
from app.database import create_all
from app.errors import InvalidInput, ServiceError
from app.logging_config import init_logging

# ── Import routers ──
from app.routers import auth, chat, feedback, ideas, notifications, register, rewards, users

init_logging()
logger = logging.getLogger(__name__)


# ── Lifespan: create tables on startup ──
@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_all()
    logger.info("%s started (%s)", settings.APP_NAME, settings.ENVIRONMENT)
    yield


app = FastAPI(
    title=settings.APP_NAME,
    description="Idea validation platform — share ideas, collect feedback, earn points.",
    version="0.1.0",
    lifespan=lifespan,
)

# ── Session middleware (required for OAuth state) ──
app.add_middleware(SessionMiddleware, secret_key=settings.SECRET_KEY, https_only=not settings.DEBUG)
app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=("*",))

# ── Register API routers ──
app.include_router(auth.router)
app.include_router(register.router)
app.include_router(users.router)
app.include_router(ideas.router)
app.include_router(feedback.router)
app.include_router(rewards.router)
app.include_router(notifications.router)
app.include_router(chat.router)


# ── Error rendering ──
@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    if exc.status_code >= 500:
        logger.error("%s %s -> %d %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))


@app.exception_handler(RequestValidationError)
@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc):
    error = InvalidInput(details=exc.errors())
    return JSONResponse(status_code=error.status_code, content=jsonable_encoder(error.to_dict()))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "An unexpected error occurred"})


@app.get("/health")
async def health():
    return {"status": "ok", "app": settings.APP_NAME}
