"""Profile and admin user routes."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends

from punchline_quiz.api.errors import as_http_error
from punchline_quiz.domain.users import schemas
from punchline_quiz.domain.users.service import UserService
from punchline_quiz.infra.auth import AuthenticatedUser, get_admin_user, get_current_user

router = APIRouter(tags=["users"])

_service = UserService()


@router.get("/users/me", response_model=schemas.OnboardingStatus)
async def my_status_endpoint(
	viewer: AuthenticatedUser = Depends(get_current_user),
) -> schemas.OnboardingStatus:
	try:
		return await _service.get_onboarding_status(viewer)
	except Exception as exc:
		raise as_http_error(exc, "get_user") from exc


@router.patch("/users/me")
async def update_profile_endpoint(
	payload: schemas.ProfileUpdateRequest,
	viewer: AuthenticatedUser = Depends(get_current_user),
) -> dict:
	try:
		await _service.update_profile(viewer, payload)
	except Exception as exc:
		raise as_http_error(exc, "update_user") from exc
	return {"success": True}


@router.get("/admin/users", response_model=List[schemas.UserOut])
async def list_users_endpoint(_: AuthenticatedUser = Depends(get_admin_user)) -> List[schemas.UserOut]:
	try:
		return await _service.list_users()
	except Exception as exc:
		raise as_http_error(exc, "fetch_users") from exc
