"""Profile updates for signed-in users and the admin user listing."""

from __future__ import annotations

import logging
import re
from typing import List

import asyncpg

from punchline_quiz.domain.common.errors import DomainError
from punchline_quiz.domain.users import schemas
from punchline_quiz.infra.auth import AuthenticatedUser
from punchline_quiz.infra.postgres import get_pool

logger = logging.getLogger(__name__)

USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9._]+$")
MAX_USERNAME_LENGTH = 16


class UserError(DomainError):
	pass


def validate_username(name: str | None) -> str:
	if not name:
		raise UserError("name_required", status_code=400)
	if len(name) > MAX_USERNAME_LENGTH:
		raise UserError("name_too_long", status_code=400)
	if not USERNAME_PATTERN.match(name):
		raise UserError("name_invalid_characters", status_code=400)
	return name


class UserService:
	async def _get_pool(self) -> asyncpg.Pool:
		return await get_pool()

	async def list_users(self) -> List[schemas.UserOut]:
		pool = await self._get_pool()
		async with pool.acquire() as conn:
			rows = await conn.fetch(
				"""
				SELECT u.id, u.name, u.email, u.image, u.is_admin, u.onboarding_completed, u.created_at,
				       (SELECT COUNT(*) FROM solved_punchlines sp WHERE sp.user_id = u.id) AS solved_count
				FROM users u
				ORDER BY solved_count DESC, u.id ASC
				"""
			)
		return [
			schemas.UserOut(
				id=str(r["id"]),
				name=r["name"],
				email=r["email"],
				image=r["image"],
				is_admin=bool(r["is_admin"]),
				onboarding_completed=bool(r["onboarding_completed"]),
				created_at=r["created_at"],
				solved_count=int(r["solved_count"] or 0),
			)
			for r in rows
		]

	async def get_onboarding_status(self, viewer: AuthenticatedUser) -> schemas.OnboardingStatus:
		pool = await self._get_pool()
		async with pool.acquire() as conn:
			completed = await conn.fetchval("SELECT onboarding_completed FROM users WHERE id = $1", viewer.id)
		if completed is None:
			raise UserError("user_not_found", status_code=404)
		return schemas.OnboardingStatus(onboarding_completed=bool(completed))

	async def update_profile(self, viewer: AuthenticatedUser, payload: schemas.ProfileUpdateRequest) -> None:
		"""Apply a profile update for ``viewer``.

		A request carrying ``onboarding_completed`` only flips that flag and
		ignores the other fields.
		"""
		pool = await self._get_pool()
		async with pool.acquire() as conn:
			if payload.onboarding_completed is not None:
				updated = await conn.fetchval(
					"UPDATE users SET onboarding_completed = $2 WHERE id = $1 RETURNING id",
					viewer.id,
					payload.onboarding_completed,
				)
			else:
				name = validate_username(payload.name)
				if payload.image:
					updated = await conn.fetchval(
						"UPDATE users SET name = $2, image = $3 WHERE id = $1 RETURNING id",
						viewer.id,
						name,
						payload.image,
					)
				else:
					updated = await conn.fetchval(
						"UPDATE users SET name = $2 WHERE id = $1 RETURNING id",
						viewer.id,
						name,
					)
		if updated is None:
			raise UserError("user_not_found", status_code=404)
		logger.info("user_profile_updated", extra={"user_id": viewer.id})
