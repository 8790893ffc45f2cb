from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

import asyncpg

from punchline_quiz.domain.analytics import rollups, schemas
from punchline_quiz.domain.analytics.models import TimeSpan, Window, WindowCounts
from punchline_quiz.domain.punchlines import models as punchline_models
from punchline_quiz.domain.punchlines.schemas import PunchlineOut
from punchline_quiz.domain.punchlines.service import PUNCHLINE_SELECT, PunchlineService
from punchline_quiz.domain.sessions import models as session_models
from punchline_quiz.domain.sessions.service import _affected_rows
from punchline_quiz.infra.postgres import get_pool
from punchline_quiz.settings import settings

logger = logging.getLogger(__name__)

# (table, timestamp column) pairs compared across windows; never user input
_USERS = ("users", "created_at")
_PUNCHLINES = ("punchlines", "created_at")
_SOLVES = ("solved_punchlines", "solved_at")


def _now() -> datetime:
	return datetime.now(timezone.utc)


class AnalyticsService:
	def __init__(self, punchlines: Optional[PunchlineService] = None) -> None:
		self._punchlines = punchlines or PunchlineService()

	async def _get_pool(self) -> asyncpg.Pool:
		return await get_pool()

	async def _window_counts(self, conn, source: tuple[str, str], window: Window) -> WindowCounts:
		table, column = source
		row = await conn.fetchrow(
			f"""
			SELECT COUNT(*) FILTER (WHERE {column} >= $2 AND {column} <= $3) AS current,
				   COUNT(*) FILTER (WHERE {column} >= $1 AND {column} < $2) AS previous,
				   COUNT(*) FILTER (WHERE {column} < $2) AS before
			FROM {table}
			""",
			window.previous_start,
			window.current_start,
			window.end,
		)
		return WindowCounts.from_record(row)

	async def get_overall_stats(self, time_span: TimeSpan, *, now: Optional[datetime] = None) -> schemas.OverallStats:
		window = time_span.window(now or _now())
		pool = await self._get_pool()
		async with pool.acquire() as conn:
			total_users = await conn.fetchval("SELECT COUNT(*) FROM users") or 0
			total_punchlines = await conn.fetchval("SELECT COUNT(*) FROM punchlines") or 0
			total_solves = await conn.fetchval("SELECT COUNT(*) FROM solved_punchlines") or 0

			users = await self._window_counts(conn, _USERS, window)
			punchlines = await self._window_counts(conn, _PUNCHLINES, window)
			solves = await self._window_counts(conn, _SOLVES, window)

		average_now = rollups.safe_average(total_solves, total_users)
		# Average as it stood when the current window opened
		average_then = rollups.safe_average(solves.before, users.before)

		return schemas.OverallStats(
			time_span=time_span,
			total_users=total_users,
			total_punchlines=total_punchlines,
			total_solves=total_solves,
			average_solves_per_user=average_now,
			average_solves_per_punchline=rollups.safe_average(total_solves, total_punchlines),
			changes=schemas.StatChanges(
				users=rollups.percent_change(users.current, users.previous),
				punchlines=rollups.percent_change(punchlines.current, punchlines.previous),
				solves=rollups.percent_change(solves.current, solves.previous),
				average=rollups.percent_change(average_now, average_then),
			),
		)

	async def get_anonymous_stats(self, time_span: TimeSpan, *, now: Optional[datetime] = None) -> schemas.AnonymousStats:
		window = time_span.window(now or _now())
		pool = await self._get_pool()
		async with pool.acquire() as conn:
			totals = await conn.fetchrow(
				"""
				SELECT COUNT(*) AS total_sessions,
					   COUNT(*) FILTER (WHERE converted_to_user IS NOT NULL) AS converted_sessions,
					   COALESCE(SUM(total_plays), 0) AS total_plays,
					   COALESCE(SUM(correct_guesses), 0) AS correct_guesses
				FROM anonymous_sessions
				"""
			)
			# A session is active in a window when it logged at least one event in it
			active = await conn.fetchrow(
				"""
				SELECT COUNT(DISTINCT session_id) FILTER (WHERE timestamp >= $2 AND timestamp <= $3) AS current,
					   COUNT(DISTINCT session_id) FILTER (WHERE timestamp >= $1 AND timestamp < $2) AS previous
				FROM anonymous_activity
				WHERE timestamp >= $1
				""",
				window.previous_start,
				window.current_start,
				window.end,
			)
			recent = await self._recent_activity(conn, window)

		total_sessions = int(totals["total_sessions"] or 0) if totals else 0
		converted_sessions = int(totals["converted_sessions"] or 0) if totals else 0
		total_plays = int(totals["total_plays"] or 0) if totals else 0
		correct_guesses = int(totals["correct_guesses"] or 0) if totals else 0
		active_current = int(active["current"] or 0) if active else 0
		active_previous = int(active["previous"] or 0) if active else 0

		return schemas.AnonymousStats(
			time_span=time_span,
			total_sessions=total_sessions,
			active_sessions=active_current,
			previous_active_sessions=active_previous,
			active_sessions_change=rollups.percent_change(active_current, active_previous),
			converted_sessions=converted_sessions,
			conversion_rate=rollups.conversion_rate(converted_sessions, total_sessions),
			correct_guess_rate=rollups.correct_guess_rate(correct_guesses, total_plays),
			recent_activity=recent,
		)

	async def _recent_activity(self, conn, window: Window) -> List[schemas.SessionActivityOut]:
		# same activity rule as the active-session counts
		session_rows = await conn.fetch(
			"""
			SELECT s.id, s.fingerprint, s.first_seen_at, s.last_seen_at, s.total_plays,
				   s.correct_guesses, s.converted_to_user, MAX(a.timestamp) AS last_event_at
			FROM anonymous_sessions s
			JOIN anonymous_activity a ON a.session_id = s.id
			WHERE a.timestamp >= $1 AND a.timestamp <= $2
			GROUP BY s.id
			ORDER BY last_event_at DESC
			LIMIT $3
			""",
			window.current_start,
			window.end,
			settings.analytics_recent_sessions,
		)
		if not session_rows:
			return []
		sessions = [session_models.AnonymousSession.from_record(r) for r in session_rows]
		event_rows = await conn.fetch(
			"""
			SELECT a.id, a.session_id, a.type, a.punchline_id, a.guess, a.timestamp, p.line AS punchline_line
			FROM anonymous_activity a
			LEFT JOIN punchlines p ON p.id = a.punchline_id
			WHERE a.session_id = ANY($1::uuid[])
			ORDER BY a.timestamp DESC, a.id DESC
			""",
			[s.id for s in sessions],
		)
		per_session: Dict[str, List[schemas.ActivityOut]] = {s.id: [] for s in sessions}
		for row in event_rows:
			recorded = session_models.RecordedActivity.from_record(row)
			if recorded is None:
				continue
			bucket = per_session.get(recorded.session_id)
			if bucket is None or len(bucket) >= settings.analytics_recent_events:
				continue
			bucket.append(
				schemas.ActivityOut(
					type=recorded.kind,
					timestamp=recorded.timestamp,
					guess=getattr(recorded.event, "guess", None),
					punchline_id=getattr(recorded.event, "punchline_id", None),
					punchline_line=recorded.punchline_line,
				)
			)
		return [
			schemas.SessionActivityOut(
				id=s.id,
				first_seen_at=s.first_seen_at,
				last_seen_at=s.last_seen_at,
				total_plays=s.total_plays,
				correct_guesses=s.correct_guesses,
				correct_guess_rate=rollups.correct_guess_rate(s.correct_guesses, s.total_plays),
				converted_to_user=s.converted_to_user,
				activities=per_session[s.id],
			)
			for s in sessions
		]

	async def get_punchline_analytics(self) -> List[schemas.PunchlineAnalyticsItem]:
		pool = await self._get_pool()
		async with pool.acquire() as conn:
			total_users = await conn.fetchval("SELECT COUNT(*) FROM users") or 0
			punchline_rows = await conn.fetch(f"{PUNCHLINE_SELECT} ORDER BY p.id ASC")
			solve_rows = await conn.fetch(
				"""
				SELECT sp.punchline_id, sp.solution, sp.solved_at,
					   u.id AS user_id, u.name, u.email, u.image, u.is_admin
				FROM solved_punchlines sp
				JOIN users u ON u.id = sp.user_id
				ORDER BY sp.solved_at DESC
				"""
			)
			wrong_rows = await conn.fetch(
				"""
				SELECT punchline_id, guess, timestamp
				FROM anonymous_activity
				WHERE type = $1 AND punchline_id IS NOT NULL AND guess IS NOT NULL AND guess <> ''
				ORDER BY timestamp ASC, id ASC
				""",
				session_models.INCORRECT_GUESS,
			)

		solvers: Dict[int, List[schemas.SolverOut]] = {}
		for r in solve_rows:
			solvers.setdefault(int(r["punchline_id"]), []).append(
				schemas.SolverOut(
					id=str(r["user_id"]),
					name=r["name"],
					email=r["email"],
					image=r["image"],
					is_admin=bool(r["is_admin"]),
					solved_at=r["solved_at"],
					solution=r["solution"],
				)
			)
		wrong = rollups.rollup_wrong_guesses(
			(int(r["punchline_id"]), r["guess"], r["timestamp"]) for r in wrong_rows
		)

		items: List[schemas.PunchlineAnalyticsItem] = []
		for row in punchline_rows:
			punchline = punchline_models.Punchline.from_record(row)
			solved_by = solvers.get(punchline.id, [])
			distinct_solvers = len({s.id for s in solved_by})
			items.append(
				schemas.PunchlineAnalyticsItem(
					id=punchline.id,
					line=punchline.line,
					song=schemas.PunchlineSongRef(name=punchline.song.name, artist=punchline.song.artist_name),
					perfect_solution=punchline.perfect_solution,
					acceptable_solutions=punchline.acceptable_solutions,
					total_solves=len(solved_by),
					solve_percentage=rollups.solve_percentage(distinct_solvers, total_users),
					solved_by=solved_by,
					wrong_guesses=[
						schemas.WrongGuessOut(guess=g.guess, count=g.count, last_guessed_at=g.last_guessed_at)
						for g in wrong.get(punchline.id, [])
					],
				)
			)
		return items

	async def _delete_wrong_guess_conn(self, conn, punchline_id: int, guess: str) -> int:
		status = await conn.execute(
			"""
			DELETE FROM anonymous_activity
			WHERE type = $1 AND punchline_id = $2 AND guess = $3
			""",
			session_models.INCORRECT_GUESS,
			punchline_id,
			guess,
		)
		return _affected_rows(status)

	async def delete_wrong_guess(self, punchline_id: int, guess: str) -> schemas.WrongGuessDeleteResult:
		pool = await self._get_pool()
		async with pool.acquire() as conn:
			deleted = await self._delete_wrong_guess_conn(conn, punchline_id, guess)
		logger.info("wrong_guess_deleted", extra={"punchline_id": punchline_id, "deleted": deleted})
		return schemas.WrongGuessDeleteResult(punchline_id=punchline_id, guess=guess, deleted=deleted)

	async def accept_wrong_guess(self, punchline_id: int, guess: str) -> PunchlineOut:
		"""Promote a wrong guess to an acceptable solution and clear its log entries."""
		pool = await self._get_pool()
		async with pool.acquire() as conn:
			async with conn.transaction():
				punchline = await self._punchlines.add_acceptable_solution(conn, punchline_id, guess)
				deleted = await self._delete_wrong_guess_conn(conn, punchline_id, guess)
		logger.info("wrong_guess_accepted", extra={"punchline_id": punchline_id, "deleted": deleted})
		return PunchlineOut.from_model(punchline)
