"""Service orchestration for the guess-the-artist quiz."""

from __future__ import annotations

import logging
import random
from datetime import datetime, timezone
from typing import List, Optional

import asyncpg

from punchline_quiz.domain.common.errors import DomainError
from punchline_quiz.domain.punchlines.schemas import SongOut
from punchline_quiz.domain.quiz import models, schemas
from punchline_quiz.domain.sessions import models as session_models
from punchline_quiz.domain.sessions.service import SessionService
from punchline_quiz.infra.auth import AuthenticatedUser
from punchline_quiz.infra.postgres import get_pool
from punchline_quiz.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)

QUIZ_SELECT = """
	SELECT q.id, q.line, q.created_by, q.created_at, q.updated_at,
	       s.id AS song_id, s.name AS song_name,
	       sa.id AS artist_id, sa.name AS artist_name,
	       al.id AS album_id, al.name AS album_name, al.image AS album_image,
	       ca.id AS correct_artist_id, ca.name AS correct_artist_name, ca.image AS correct_artist_image,
	       w1.id AS wrong_artist_1_id, w1.name AS wrong_artist_1_name, w1.image AS wrong_artist_1_image,
	       w2.id AS wrong_artist_2_id, w2.name AS wrong_artist_2_name, w2.image AS wrong_artist_2_image
	FROM quiz_punchlines q
	JOIN songs s ON s.id = q.song_id
	JOIN artists sa ON sa.id = s.artist_id
	LEFT JOIN albums al ON al.id = s.album_id
	JOIN artists ca ON ca.id = q.correct_artist_id
	JOIN artists w1 ON w1.id = q.wrong_artist_1_id
	JOIN artists w2 ON w2.id = q.wrong_artist_2_id
"""


class QuizError(DomainError):
	pass


def _now() -> datetime:
	return datetime.now(timezone.utc)


class QuizService:
	def __init__(self, sessions: Optional[SessionService] = None, *, rng: Optional[random.Random] = None) -> None:
		self._sessions = sessions or SessionService()
		self._rng = rng or random.Random()

	async def _get_pool(self) -> asyncpg.Pool:
		return await get_pool()

	async def _fetch(self, conn: asyncpg.Connection, quiz_punchline_id: int) -> Optional[models.QuizPunchline]:
		row = await conn.fetchrow(f"{QUIZ_SELECT} WHERE q.id = $1", quiz_punchline_id)
		return models.QuizPunchline.from_record(row) if row else None

	async def start_quiz(self, viewer: Optional[AuthenticatedUser], fingerprint: Optional[str]) -> schemas.QuizRoundOut:
		pool = await self._get_pool()
		async with pool.acquire() as conn:
			if fingerprint:
				await self._sessions.record_event_conn(conn, fingerprint, session_models.QuizPlayEvent())
			row = await conn.fetchrow(f"{QUIZ_SELECT} ORDER BY random() LIMIT 1")
		if row is None:
			raise QuizError("no_quiz_punchlines", status_code=404)
		punchline = models.QuizPunchline.from_record(row)
		options = list(punchline.options)
		self._rng.shuffle(options)
		return schemas.QuizRoundOut(
			id=punchline.id,
			line=punchline.line,
			options=[schemas.ArtistOut.from_model(a) for a in options],
		)

	async def submit_guess(
		self,
		viewer: Optional[AuthenticatedUser],
		quiz_punchline_id: int,
		artist_id: str,
		fingerprint: Optional[str] = None,
	) -> schemas.QuizGuessResult:
		pool = await self._get_pool()
		async with pool.acquire() as conn:
			punchline = await self._fetch(conn, quiz_punchline_id)
			if punchline is None:
				raise QuizError("quiz_punchline_not_found", status_code=404)
			if artist_id not in {a.id for a in punchline.options}:
				raise QuizError("invalid_artist", status_code=422)
			is_correct = punchline.is_correct(artist_id)
			obs_metrics.inc_guess("quiz", is_correct)

			if fingerprint:
				event: session_models.ActivityEvent = (
					session_models.QuizCorrectGuessEvent() if is_correct else session_models.QuizIncorrectGuessEvent()
				)
				session = await self._sessions.record_event_conn(conn, fingerprint, event)
				await conn.execute(
					"""
					INSERT INTO quiz_guesses (session_id, quiz_punchline_id, artist_id, is_correct, user_id, created_at)
					VALUES ($1, $2, $3, $4, $5, $6)
					""",
					session.id,
					punchline.id,
					artist_id,
					is_correct,
					viewer.id if viewer else None,
					_now(),
				)
		return schemas.QuizGuessResult(
			is_correct=is_correct,
			correct_artist=schemas.ArtistOut.from_model(punchline.correct_artist),
			song=SongOut.from_model(punchline.song),
		)

	# Admin management

	async def list_quiz_punchlines(self) -> List[schemas.QuizPunchlineOut]:
		pool = await self._get_pool()
		async with pool.acquire() as conn:
			rows = await conn.fetch(f"{QUIZ_SELECT} ORDER BY q.created_at DESC, q.id DESC")
		return [schemas.QuizPunchlineOut.from_model(models.QuizPunchline.from_record(r)) for r in rows]

	async def _validate_refs(self, conn: asyncpg.Connection, payload: schemas.QuizPunchlineWriteRequest) -> None:
		artist_ids = payload.artist_ids()
		if len(set(artist_ids)) != len(artist_ids):
			raise QuizError("duplicate_artists", status_code=422)
		if not await conn.fetchval("SELECT 1 FROM songs WHERE id = $1", payload.song_id):
			raise QuizError("unknown_song", status_code=422)
		rows = await conn.fetch("SELECT id FROM artists WHERE id = ANY($1::text[])", artist_ids)
		if {r["id"] for r in rows} != set(artist_ids):
			raise QuizError("unknown_artist", status_code=422)

	async def create_quiz_punchline(
		self, viewer: AuthenticatedUser, payload: schemas.QuizPunchlineWriteRequest
	) -> schemas.QuizPunchlineOut:
		pool = await self._get_pool()
		async with pool.acquire() as conn:
			await self._validate_refs(conn, payload)
			quiz_id = await conn.fetchval(
				"""
				INSERT INTO quiz_punchlines
					(line, song_id, correct_artist_id, wrong_artist_1_id, wrong_artist_2_id, created_by, created_at, updated_at)
				VALUES ($1, $2, $3, $4, $5, $6, $7, $7)
				RETURNING id
				""",
				payload.line.strip(),
				payload.song_id,
				payload.correct_artist_id,
				payload.wrong_artist_1_id,
				payload.wrong_artist_2_id,
				viewer.id,
				_now(),
			)
			punchline = await self._fetch(conn, quiz_id)
		assert punchline is not None
		logger.info("quiz_punchline_created", extra={"quiz_punchline_id": punchline.id})
		return schemas.QuizPunchlineOut.from_model(punchline)

	async def update_quiz_punchline(
		self, quiz_punchline_id: int, payload: schemas.QuizPunchlineWriteRequest
	) -> schemas.QuizPunchlineOut:
		pool = await self._get_pool()
		async with pool.acquire() as conn:
			await self._validate_refs(conn, payload)
			updated = await conn.fetchval(
				"""
				UPDATE quiz_punchlines
				SET line = $2, song_id = $3, correct_artist_id = $4, wrong_artist_1_id = $5,
				    wrong_artist_2_id = $6, updated_at = $7
				WHERE id = $1
				RETURNING id
				""",
				quiz_punchline_id,
				payload.line.strip(),
				payload.song_id,
				payload.correct_artist_id,
				payload.wrong_artist_1_id,
				payload.wrong_artist_2_id,
				_now(),
			)
			if updated is None:
				raise QuizError("quiz_punchline_not_found", status_code=404)
			punchline = await self._fetch(conn, quiz_punchline_id)
		assert punchline is not None
		return schemas.QuizPunchlineOut.from_model(punchline)

	async def delete_quiz_punchline(self, quiz_punchline_id: int) -> None:
		pool = await self._get_pool()
		async with pool.acquire() as conn:
			async with conn.transaction():
				await conn.execute("DELETE FROM quiz_guesses WHERE quiz_punchline_id = $1", quiz_punchline_id)
				deleted = await conn.fetchval(
					"DELETE FROM quiz_punchlines WHERE id = $1 RETURNING id",
					quiz_punchline_id,
				)
		if deleted is None:
			raise QuizError("quiz_punchline_not_found", status_code=404)
