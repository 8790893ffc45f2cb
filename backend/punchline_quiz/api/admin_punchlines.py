"""Admin CRUD routes for finishing-lines and quiz punchlines."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Response, status

from punchline_quiz.api.errors import as_http_error
from punchline_quiz.domain.punchlines import schemas
from punchline_quiz.domain.punchlines.service import PunchlineService
from punchline_quiz.domain.quiz import schemas as quiz_schemas
from punchline_quiz.domain.quiz.service import QuizService
from punchline_quiz.infra.auth import AuthenticatedUser, get_admin_user

router = APIRouter(prefix="/admin", tags=["admin"])

_punchlines = PunchlineService()
_quiz = QuizService()


@router.get("/punchlines", response_model=List[schemas.PunchlineOut])
async def list_punchlines_endpoint(_: AuthenticatedUser = Depends(get_admin_user)) -> List[schemas.PunchlineOut]:
	try:
		return await _punchlines.list_punchlines()
	except Exception as exc:
		raise as_http_error(exc, "fetch_punchlines") from exc


@router.post("/punchlines", response_model=schemas.PunchlineOut, status_code=status.HTTP_201_CREATED)
async def create_punchline_endpoint(
	payload: schemas.PunchlineWriteRequest,
	admin: AuthenticatedUser = Depends(get_admin_user),
) -> schemas.PunchlineOut:
	try:
		return await _punchlines.create_punchline(admin, payload)
	except Exception as exc:
		raise as_http_error(exc, "create_punchline") from exc


@router.put("/punchlines/{punchline_id}", response_model=schemas.PunchlineOut)
async def update_punchline_endpoint(
	punchline_id: int,
	payload: schemas.PunchlineWriteRequest,
	_: AuthenticatedUser = Depends(get_admin_user),
) -> schemas.PunchlineOut:
	try:
		return await _punchlines.update_punchline(punchline_id, payload)
	except Exception as exc:
		raise as_http_error(exc, "update_punchline") from exc


@router.delete("/punchlines/{punchline_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_punchline_endpoint(
	punchline_id: int,
	_: AuthenticatedUser = Depends(get_admin_user),
) -> Response:
	try:
		await _punchlines.delete_punchline(punchline_id)
	except Exception as exc:
		raise as_http_error(exc, "delete_punchline") from exc
	return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/quiz-punchlines", response_model=List[quiz_schemas.QuizPunchlineOut])
async def list_quiz_punchlines_endpoint(
	_: AuthenticatedUser = Depends(get_admin_user),
) -> List[quiz_schemas.QuizPunchlineOut]:
	try:
		return await _quiz.list_quiz_punchlines()
	except Exception as exc:
		raise as_http_error(exc, "fetch_quiz_punchlines") from exc


@router.post("/quiz-punchlines", response_model=quiz_schemas.QuizPunchlineOut, status_code=status.HTTP_201_CREATED)
async def create_quiz_punchline_endpoint(
	payload: quiz_schemas.QuizPunchlineWriteRequest,
	admin: AuthenticatedUser = Depends(get_admin_user),
) -> quiz_schemas.QuizPunchlineOut:
	try:
		return await _quiz.create_quiz_punchline(admin, payload)
	except Exception as exc:
		raise as_http_error(exc, "create_quiz_punchline") from exc


@router.put("/quiz-punchlines/{quiz_punchline_id}", response_model=quiz_schemas.QuizPunchlineOut)
async def update_quiz_punchline_endpoint(
	quiz_punchline_id: int,
	payload: quiz_schemas.QuizPunchlineWriteRequest,
	_: AuthenticatedUser = Depends(get_admin_user),
) -> quiz_schemas.QuizPunchlineOut:
	try:
		return await _quiz.update_quiz_punchline(quiz_punchline_id, payload)
	except Exception as exc:
		raise as_http_error(exc, "update_quiz_punchline") from exc


@router.delete("/quiz-punchlines/{quiz_punchline_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_quiz_punchline_endpoint(
	quiz_punchline_id: int,
	_: AuthenticatedUser = Depends(get_admin_user),
) -> Response:
	try:
		await _quiz.delete_quiz_punchline(quiz_punchline_id)
	except Exception as exc:
		raise as_http_error(exc, "delete_quiz_punchline") from exc
	return Response(status_code=status.HTTP_204_NO_CONTENT)
