"""Admin analytics dashboard routes."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Query

from punchline_quiz.api.errors import as_http_error
from punchline_quiz.domain.analytics import schemas
from punchline_quiz.domain.analytics.models import TimeSpan
from punchline_quiz.domain.analytics.service import AnalyticsService
from punchline_quiz.domain.punchlines.schemas import PunchlineOut
from punchline_quiz.infra.auth import AuthenticatedUser, get_admin_user

router = APIRouter(prefix="/admin/analytics", tags=["analytics"])

_service = AnalyticsService()


@router.get("/overview", response_model=schemas.OverallStats)
async def overview_endpoint(
	time_span: TimeSpan = Query(default=TimeSpan.DAY),
	_: AuthenticatedUser = Depends(get_admin_user),
) -> schemas.OverallStats:
	try:
		return await _service.get_overall_stats(time_span)
	except Exception as exc:
		raise as_http_error(exc, "fetch_overall_stats") from exc


@router.get("/anonymous", response_model=schemas.AnonymousStats)
async def anonymous_endpoint(
	time_span: TimeSpan = Query(default=TimeSpan.DAY),
	_: AuthenticatedUser = Depends(get_admin_user),
) -> schemas.AnonymousStats:
	try:
		return await _service.get_anonymous_stats(time_span)
	except Exception as exc:
		raise as_http_error(exc, "fetch_anonymous_stats") from exc


@router.get("/punchlines", response_model=List[schemas.PunchlineAnalyticsItem])
async def punchline_analytics_endpoint(
	_: AuthenticatedUser = Depends(get_admin_user),
) -> List[schemas.PunchlineAnalyticsItem]:
	try:
		return await _service.get_punchline_analytics()
	except Exception as exc:
		raise as_http_error(exc, "fetch_punchline_analytics") from exc


@router.delete("/punchlines/{punchline_id}/wrong-guesses", response_model=schemas.WrongGuessDeleteResult)
async def delete_wrong_guess_endpoint(
	punchline_id: int,
	guess: str = Query(..., min_length=1),
	_: AuthenticatedUser = Depends(get_admin_user),
) -> schemas.WrongGuessDeleteResult:
	try:
		return await _service.delete_wrong_guess(punchline_id, guess)
	except Exception as exc:
		raise as_http_error(exc, "delete_wrong_guess") from exc


@router.post("/punchlines/{punchline_id}/wrong-guesses/accept", response_model=PunchlineOut)
async def accept_wrong_guess_endpoint(
	punchline_id: int,
	payload: schemas.WrongGuessRequest,
	_: AuthenticatedUser = Depends(get_admin_user),
) -> PunchlineOut:
	try:
		return await _service.accept_wrong_guess(punchline_id, payload.guess)
	except Exception as exc:
		raise as_http_error(exc, "accept_wrong_guess") from exc
