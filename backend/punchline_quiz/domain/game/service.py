"""Service orchestration for the finishing-lines game."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

import asyncpg

from punchline_quiz.domain.common.errors import DomainError
from punchline_quiz.domain.game import matching, schemas
from punchline_quiz.domain.punchlines import models as punchline_models
from punchline_quiz.domain.punchlines.service import PUNCHLINE_SELECT, fetch_punchline
from punchline_quiz.domain.sessions import models as session_models
from punchline_quiz.domain.sessions.service import SessionService
from punchline_quiz.infra.auth import AuthenticatedUser
from punchline_quiz.infra.postgres import get_pool
from punchline_quiz.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)


class GameError(DomainError):
	pass


def _now() -> datetime:
	return datetime.now(timezone.utc)


class GameService:
	def __init__(self, sessions: Optional[SessionService] = None) -> None:
		self._sessions = sessions or SessionService()

	async def _get_pool(self) -> asyncpg.Pool:
		return await get_pool()

	async def start_game(
		self, viewer: Optional[AuthenticatedUser], fingerprint: Optional[str]
	) -> schemas.RandomPunchlineResponse:
		pool = await self._get_pool()
		async with pool.acquire() as conn:
			if fingerprint:
				await self._sessions.record_event_conn(conn, fingerprint, session_models.PlayEvent())
			return await self._random_punchline(conn, viewer)

	async def get_random_punchline(self, viewer: Optional[AuthenticatedUser]) -> schemas.RandomPunchlineResponse:
		pool = await self._get_pool()
		async with pool.acquire() as conn:
			return await self._random_punchline(conn, viewer)

	async def _random_punchline(
		self, conn: asyncpg.Connection, viewer: Optional[AuthenticatedUser]
	) -> schemas.RandomPunchlineResponse:
		row = None
		if viewer is not None:
			row = await conn.fetchrow(
				f"""
				{PUNCHLINE_SELECT}
				WHERE p.id NOT IN (SELECT punchline_id FROM solved_punchlines WHERE user_id = $1)
				ORDER BY random()
				LIMIT 1
				""",
				viewer.id,
			)
			if row is None:
				total = await conn.fetchval("SELECT COUNT(*) FROM punchlines")
				solved = await conn.fetchval(
					"SELECT COUNT(*) FROM solved_punchlines WHERE user_id = $1",
					viewer.id,
				)
				if total and total == solved:
					return schemas.RandomPunchlineResponse(all_solved=True)
		if row is None:
			row = await conn.fetchrow(f"{PUNCHLINE_SELECT} ORDER BY random() LIMIT 1")
		if row is None:
			raise GameError("no_punchlines", status_code=404)
		punchline = punchline_models.Punchline.from_record(row)
		return schemas.RandomPunchlineResponse(punchline=schemas.SafePunchlineOut.from_model(punchline))

	async def validate_guess(
		self,
		viewer: Optional[AuthenticatedUser],
		punchline_id: int,
		guess: str,
		fingerprint: Optional[str] = None,
	) -> schemas.GuessResult:
		pool = await self._get_pool()
		async with pool.acquire() as conn:
			punchline = await fetch_punchline(conn, punchline_id)
			if punchline is None:
				raise GameError("punchline_not_found", status_code=404)

			is_correct = matching.matches_any(guess, punchline.answers)
			obs_metrics.inc_guess("finishing_lines", is_correct)

			if fingerprint:
				event: session_models.ActivityEvent
				if is_correct:
					event = session_models.CorrectGuessEvent(punchline_id=punchline.id, guess=guess)
				else:
					event = session_models.IncorrectGuessEvent(punchline_id=punchline.id, guess=guess)
				await self._sessions.record_event_conn(conn, fingerprint, event)

			if not is_correct:
				return schemas.GuessResult(is_correct=False)

			if viewer is not None:
				await conn.execute(
					"""
					INSERT INTO solved_punchlines (user_id, punchline_id, solution, solved_at)
					VALUES ($1, $2, $3, $4)
					ON CONFLICT (user_id, punchline_id) DO NOTHING
					""",
					viewer.id,
					punchline.id,
					guess,
					_now(),
				)
		return schemas.GuessResult(
			is_correct=True,
			punchline=schemas.RevealedPunchlineOut.from_model(punchline),
		)

	async def get_solved_punchline(self, viewer: AuthenticatedUser, punchline_id: int) -> schemas.RevealedPunchlineOut:
		"""Return the full punchline, but only to a user who has solved it."""
		pool = await self._get_pool()
		async with pool.acquire() as conn:
			solved = await conn.fetchval(
				"SELECT 1 FROM solved_punchlines WHERE user_id = $1 AND punchline_id = $2",
				viewer.id,
				punchline_id,
			)
			if not solved and not viewer.is_admin:
				raise GameError("not_solved", status_code=403)
			punchline = await fetch_punchline(conn, punchline_id)
		if punchline is None:
			raise GameError("punchline_not_found", status_code=404)
		return schemas.RevealedPunchlineOut.from_model(punchline)
