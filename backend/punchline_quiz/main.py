"""FastAPI application entrypoint."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from punchline_quiz.api import admin_punchlines, analytics, game, ops, quiz, track, users
from punchline_quiz.api.errors import install_error_handlers
from punchline_quiz.infra import postgres
from punchline_quiz.infra.redis import redis_client
from punchline_quiz.obs import init as obs_init
from punchline_quiz.settings import settings

logger = logging.getLogger(__name__)

_DEV_ORIGINS = [
	"http://localhost:3000",
	"http://127.0.0.1:3000",
]


@asynccontextmanager
async def lifespan(app: FastAPI):
	await postgres.init_pool()
	logger.info("startup_complete", extra={"environment": settings.environment})
	try:
		yield
	finally:
		await postgres.close_pool()
		await redis_client.aclose()


app = FastAPI(title="Punchline Quiz API", lifespan=lifespan)
install_error_handlers(app)

allow_origins = list(settings.cors_allow_origins)
if not allow_origins and settings.is_dev():
	allow_origins = list(_DEV_ORIGINS)
# Starlette disallows wildcard '*' with allow_credentials=True
if "*" in allow_origins:
	allow_origins = list(_DEV_ORIGINS) if settings.is_dev() else [o for o in allow_origins if o != "*"]

app.add_middleware(
	CORSMiddleware,
	allow_origins=allow_origins,
	allow_credentials=True,
	allow_methods=["*"],
	allow_headers=["*"],
)
obs_init(app)

app.include_router(game.router)
app.include_router(quiz.router)
app.include_router(track.router)
app.include_router(users.router)
app.include_router(admin_punchlines.router)
app.include_router(analytics.router)
app.include_router(ops.router)
