"""Admin management of finishing-lines punchlines."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional

import asyncpg

from punchline_quiz.domain.common.errors import DomainError
from punchline_quiz.domain.punchlines import models, schemas
from punchline_quiz.domain.punchlines.solutions import serialize_solutions
from punchline_quiz.infra.auth import AuthenticatedUser
from punchline_quiz.infra.postgres import get_pool

logger = logging.getLogger(__name__)

PUNCHLINE_SELECT = """
	SELECT p.id, p.line, p.perfect_solution, p.acceptable_solutions,
	       p.created_by, p.created_at, p.updated_at,
	       s.id AS song_id, s.name AS song_name,
	       ar.id AS artist_id, ar.name AS artist_name,
	       al.id AS album_id, al.name AS album_name, al.image AS album_image
	FROM punchlines p
	JOIN songs s ON s.id = p.song_id
	JOIN artists ar ON ar.id = s.artist_id
	LEFT JOIN albums al ON al.id = s.album_id
"""


class PunchlineError(DomainError):
	pass


def _now() -> datetime:
	return datetime.now(timezone.utc)


async def fetch_punchline(conn: asyncpg.Connection, punchline_id: int) -> Optional[models.Punchline]:
	row = await conn.fetchrow(f"{PUNCHLINE_SELECT} WHERE p.id = $1", punchline_id)
	return models.Punchline.from_record(row) if row else None


class PunchlineService:
	async def _get_pool(self) -> asyncpg.Pool:
		return await get_pool()

	async def list_punchlines(self) -> List[schemas.PunchlineOut]:
		pool = await self._get_pool()
		async with pool.acquire() as conn:
			rows = await conn.fetch(f"{PUNCHLINE_SELECT} ORDER BY p.created_at DESC, p.id DESC")
		return [schemas.PunchlineOut.from_model(models.Punchline.from_record(r)) for r in rows]

	async def get_punchline(self, punchline_id: int) -> schemas.PunchlineOut:
		pool = await self._get_pool()
		async with pool.acquire() as conn:
			punchline = await fetch_punchline(conn, punchline_id)
		if punchline is None:
			raise PunchlineError("punchline_not_found", status_code=404)
		return schemas.PunchlineOut.from_model(punchline)

	async def _ensure_song(self, conn: asyncpg.Connection, song_id: str) -> None:
		exists = await conn.fetchval("SELECT 1 FROM songs WHERE id = $1", song_id)
		if not exists:
			raise PunchlineError("unknown_song", status_code=422)

	async def create_punchline(
		self, viewer: AuthenticatedUser, payload: schemas.PunchlineWriteRequest
	) -> schemas.PunchlineOut:
		pool = await self._get_pool()
		now = _now()
		async with pool.acquire() as conn:
			await self._ensure_song(conn, payload.song_id)
			punchline_id = await conn.fetchval(
				"""
				INSERT INTO punchlines (line, perfect_solution, acceptable_solutions, song_id, created_by, created_at, updated_at)
				VALUES ($1, $2, $3, $4, $5, $6, $6)
				RETURNING id
				""",
				payload.line.strip(),
				payload.perfect_solution.strip(),
				serialize_solutions(payload.acceptable_solutions, payload.perfect_solution),
				payload.song_id,
				viewer.id,
				now,
			)
			punchline = await fetch_punchline(conn, punchline_id)
		assert punchline is not None
		logger.info("punchline_created", extra={"punchline_id": punchline.id})
		return schemas.PunchlineOut.from_model(punchline)

	async def update_punchline(
		self, punchline_id: int, payload: schemas.PunchlineWriteRequest
	) -> schemas.PunchlineOut:
		pool = await self._get_pool()
		async with pool.acquire() as conn:
			await self._ensure_song(conn, payload.song_id)
			updated = await conn.fetchval(
				"""
				UPDATE punchlines
				SET line = $2, perfect_solution = $3, acceptable_solutions = $4, song_id = $5, updated_at = $6
				WHERE id = $1
				RETURNING id
				""",
				punchline_id,
				payload.line.strip(),
				payload.perfect_solution.strip(),
				serialize_solutions(payload.acceptable_solutions, payload.perfect_solution),
				payload.song_id,
				_now(),
			)
			if updated is None:
				raise PunchlineError("punchline_not_found", status_code=404)
			punchline = await fetch_punchline(conn, punchline_id)
		assert punchline is not None
		return schemas.PunchlineOut.from_model(punchline)

	async def add_acceptable_solution(self, conn: asyncpg.Connection, punchline_id: int, solution: str) -> models.Punchline:
		punchline = await fetch_punchline(conn, punchline_id)
		if punchline is None:
			raise PunchlineError("punchline_not_found", status_code=404)
		solutions = [*punchline.acceptable_solutions, solution]
		encoded = serialize_solutions(solutions, punchline.perfect_solution)
		await conn.execute(
			"UPDATE punchlines SET acceptable_solutions = $2, updated_at = $3 WHERE id = $1",
			punchline_id,
			encoded,
			_now(),
		)
		refreshed = await fetch_punchline(conn, punchline_id)
		assert refreshed is not None
		return refreshed

	async def delete_punchline(self, punchline_id: int) -> None:
		pool = await self._get_pool()
		async with pool.acquire() as conn:
			async with conn.transaction():
				await conn.execute("DELETE FROM solved_punchlines WHERE punchline_id = $1", punchline_id)
				await conn.execute("DELETE FROM anonymous_activity WHERE punchline_id = $1", punchline_id)
				deleted = await conn.fetchval("DELETE FROM punchlines WHERE id = $1 RETURNING id", punchline_id)
		if deleted is None:
			raise PunchlineError("punchline_not_found", status_code=404)
		logger.info("punchline_deleted", extra={"punchline_id": punchline_id})
