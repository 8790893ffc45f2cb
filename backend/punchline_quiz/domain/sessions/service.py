"""Anonymous session tracking keyed by device fingerprint."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

import asyncpg

from punchline_quiz.domain.common.errors import DomainError
from punchline_quiz.domain.sessions import models
from punchline_quiz.infra.postgres import get_pool
from punchline_quiz.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)

_SESSION_COLUMNS = (
	"id, fingerprint, first_seen_at, last_seen_at, total_plays, correct_guesses, converted_to_user"
)


def _now() -> datetime:
	return datetime.now(timezone.utc)


def _affected_rows(status: str) -> int:
	# asyncpg returns command tags such as "UPDATE 1" or "DELETE 3"
	try:
		return int(str(status).rsplit(" ", 1)[-1])
	except (TypeError, ValueError):
		return 0


class SessionError(DomainError):
	pass


class SessionService:
	async def _get_pool(self) -> asyncpg.Pool:
		return await get_pool()

	async def get_or_create(self, fingerprint: str) -> models.AnonymousSession:
		pool = await self._get_pool()
		async with pool.acquire() as conn:
			return await self.get_or_create_conn(conn, fingerprint)

	async def _find_conn(self, conn: asyncpg.Connection, fingerprint: str) -> Optional[models.AnonymousSession]:
		# oldest row wins when concurrent first requests inserted twice
		row = await conn.fetchrow(
			f"""
			SELECT {_SESSION_COLUMNS}
			FROM anonymous_sessions
			WHERE fingerprint = $1
			ORDER BY first_seen_at ASC
			LIMIT 1
			""",
			fingerprint,
		)
		return models.AnonymousSession.from_record(row) if row is not None else None

	async def get_or_create_conn(
		self, conn: asyncpg.Connection, fingerprint: str, *, now: Optional[datetime] = None
	) -> models.AnonymousSession:
		"""Return the session for ``fingerprint``, creating it on first sight.

		Two concurrent first requests for one fingerprint can both insert;
		lookups always pick the oldest row.
		"""
		now = now or _now()
		session = await self._find_conn(conn, fingerprint)
		if session is not None:
			await conn.execute(
				"UPDATE anonymous_sessions SET last_seen_at = $2 WHERE id = $1",
				session.id,
				now,
			)
			session.last_seen_at = now
			return session

		row = await conn.fetchrow(
			f"""
			INSERT INTO anonymous_sessions (fingerprint, first_seen_at, last_seen_at, total_plays, correct_guesses)
			VALUES ($1, $2, $2, 0, 0)
			RETURNING {_SESSION_COLUMNS}
			""",
			fingerprint,
			now,
		)
		if row is None:
			raise RuntimeError("failed_to_create_anonymous_session")
		obs_metrics.inc_session_created()
		logger.info("anonymous_session_created", extra={"session_id": str(row["id"])})
		return models.AnonymousSession.from_record(row)

	async def record_event(self, fingerprint: str, event: models.ActivityEvent) -> models.AnonymousSession:
		pool = await self._get_pool()
		async with pool.acquire() as conn:
			return await self.record_event_conn(conn, fingerprint, event)

	async def record_event_conn(
		self,
		conn: asyncpg.Connection,
		fingerprint: str,
		event: models.ActivityEvent,
		*,
		now: Optional[datetime] = None,
	) -> models.AnonymousSession:
		now = now or _now()
		session = await self.get_or_create_conn(conn, fingerprint, now=now)
		kind, punchline_id, guess = event.to_row()
		await conn.execute(
			"""
			INSERT INTO anonymous_activity (session_id, type, punchline_id, guess, timestamp)
			VALUES ($1, $2, $3, $4, $5)
			""",
			session.id,
			kind,
			punchline_id,
			guess,
			now,
		)
		plays, correct = event.counters
		if plays or correct:
			await conn.execute(
				"""
				UPDATE anonymous_sessions
				SET total_plays = total_plays + $2, correct_guesses = correct_guesses + $3
				WHERE id = $1
				""",
				session.id,
				plays,
				correct,
			)
			session.total_plays += plays
			session.correct_guesses += correct
		obs_metrics.inc_activity_event(kind)
		return session

	async def link_to_user(self, fingerprint: str, user_id: str) -> models.AnonymousSession:
		"""Mark the fingerprint's session as converted to ``user_id``.

		The link is written at most once; a session already converted keeps
		its original user. A fingerprint that never played has nothing to link.
		"""
		pool = await self._get_pool()
		async with pool.acquire() as conn:
			session = await self._find_conn(conn, fingerprint)
			if session is None:
				raise SessionError("session_not_found", status_code=404)
			if session.is_converted:
				if session.converted_to_user != user_id:
					logger.warning(
						"anonymous_session_already_linked",
						extra={"session_id": session.id, "requested_user_id": user_id},
					)
				return session
			status = await conn.execute(
				"""
				UPDATE anonymous_sessions
				SET converted_to_user = $2
				WHERE id = $1 AND converted_to_user IS NULL
				""",
				session.id,
				user_id,
			)
			if _affected_rows(status):
				session.converted_to_user = user_id
				obs_metrics.inc_session_linked()
				logger.info("anonymous_session_linked", extra={"session_id": session.id, "user_id": user_id})
			return session
