"""FastAPI routes for the guess-the-artist quiz."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Request

from punchline_quiz.api.deps import enforce_limit
from punchline_quiz.api.errors import as_http_error
from punchline_quiz.domain.quiz import schemas
from punchline_quiz.domain.quiz.service import QuizService
from punchline_quiz.infra.auth import AuthenticatedUser, get_optional_user
from punchline_quiz.settings import settings

router = APIRouter(prefix="/quiz", tags=["quiz"])

_service = QuizService()


@router.post("/start", response_model=schemas.QuizRoundOut)
async def start_quiz_endpoint(
	payload: schemas.StartQuizRequest,
	viewer: Optional[AuthenticatedUser] = Depends(get_optional_user),
) -> schemas.QuizRoundOut:
	try:
		return await _service.start_quiz(viewer, payload.fingerprint)
	except Exception as exc:
		raise as_http_error(exc, "get_quiz_punchline") from exc


@router.post("/guess", response_model=schemas.QuizGuessResult)
async def quiz_guess_endpoint(
	payload: schemas.QuizGuessRequest,
	request: Request,
	viewer: Optional[AuthenticatedUser] = Depends(get_optional_user),
) -> schemas.QuizGuessResult:
	try:
		await enforce_limit("guess", request, payload.fingerprint, limit=settings.guess_rate_limit_per_minute)
		return await _service.submit_guess(viewer, payload.quiz_punchline_id, payload.artist_id, payload.fingerprint)
	except Exception as exc:
		raise as_http_error(exc, "submit_quiz_guess") from exc
