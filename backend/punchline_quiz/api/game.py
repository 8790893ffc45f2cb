"""FastAPI routes for the finishing-lines game."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Request

from punchline_quiz.api.deps import enforce_limit
from punchline_quiz.api.errors import as_http_error
from punchline_quiz.domain.game import schemas
from punchline_quiz.domain.game.service import GameService
from punchline_quiz.infra.auth import AuthenticatedUser, get_current_user, get_optional_user
from punchline_quiz.settings import settings

router = APIRouter(prefix="/game", tags=["game"])

_service = GameService()


@router.post("/start", response_model=schemas.RandomPunchlineResponse)
async def start_game_endpoint(
	payload: schemas.StartGameRequest,
	viewer: Optional[AuthenticatedUser] = Depends(get_optional_user),
) -> schemas.RandomPunchlineResponse:
	try:
		return await _service.start_game(viewer, payload.fingerprint)
	except Exception as exc:
		raise as_http_error(exc, "get_random_punchline") from exc


@router.post("/guess", response_model=schemas.GuessResult)
async def guess_endpoint(
	payload: schemas.GuessRequest,
	request: Request,
	viewer: Optional[AuthenticatedUser] = Depends(get_optional_user),
) -> schemas.GuessResult:
	try:
		await enforce_limit("guess", request, payload.fingerprint, limit=settings.guess_rate_limit_per_minute)
		return await _service.validate_guess(viewer, payload.punchline_id, payload.guess, payload.fingerprint)
	except Exception as exc:
		raise as_http_error(exc, "validate_guess") from exc


@router.get("/punchlines/{punchline_id}", response_model=schemas.RevealedPunchlineOut)
async def solved_punchline_endpoint(
	punchline_id: int,
	viewer: AuthenticatedUser = Depends(get_current_user),
) -> schemas.RevealedPunchlineOut:
	try:
		return await _service.get_solved_punchline(viewer, punchline_id)
	except Exception as exc:
		raise as_http_error(exc, "get_punchline") from exc
