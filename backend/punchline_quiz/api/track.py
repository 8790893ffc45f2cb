"""Anonymous activity tracking and session linking."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from punchline_quiz.api.deps import enforce_limit
from punchline_quiz.api.errors import as_http_error
from punchline_quiz.domain.sessions import schemas
from punchline_quiz.domain.sessions.service import SessionService
from punchline_quiz.infra.auth import AuthenticatedUser, get_current_user
from punchline_quiz.settings import settings

router = APIRouter(tags=["sessions"])

_service = SessionService()


@router.post("/track", response_model=schemas.TrackResponse)
async def track_endpoint(payload: schemas.TrackRequest, request: Request) -> schemas.TrackResponse:
	try:
		await enforce_limit("track", request, payload.fingerprint, limit=settings.track_rate_limit_per_minute)
		await _service.record_event(payload.fingerprint, schemas.to_event(payload.event))
	except Exception as exc:
		raise as_http_error(exc, "track_activity") from exc
	return schemas.TrackResponse(success=True)


@router.post("/sessions/link", response_model=schemas.AnonymousSessionOut)
async def link_session_endpoint(
	payload: schemas.LinkSessionRequest,
	viewer: AuthenticatedUser = Depends(get_current_user),
) -> schemas.AnonymousSessionOut:
	try:
		session = await _service.link_to_user(payload.fingerprint, viewer.id)
	except Exception as exc:
		raise as_http_error(exc, "link_session") from exc
	return schemas.AnonymousSessionOut.from_model(session)
