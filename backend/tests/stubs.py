"""Scripted asyncpg stand-ins shared by the service tests."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class StubTransaction:
	async def __aenter__(self):
		return self

	async def __aexit__(self, exc_type, exc, tb):
		return False


class StubAcquire:
	def __init__(self, conn):
		self._conn = conn

	async def __aenter__(self):
		return self._conn

	async def __aexit__(self, exc_type, exc, tb):
		return False


class StubConnection:
	"""Returns queued results per method, in call order."""

	def __init__(
		self,
		*,
		fetch: Optional[List[Any]] = None,
		fetchrow: Optional[List[Any]] = None,
		fetchval: Optional[List[Any]] = None,
		execute: Optional[List[str]] = None,
	) -> None:
		self.fetch_rets = list(fetch or [])
		self.fetchrow_rets = list(fetchrow or [])
		self.fetchval_rets = list(fetchval or [])
		self.execute_rets = list(execute or [])
		self.calls: List[Tuple[str, str, tuple]] = []

	async def fetch(self, query: str, *args):
		self.calls.append(("fetch", query, args))
		return self.fetch_rets.pop(0) if self.fetch_rets else []

	async def fetchrow(self, query: str, *args):
		self.calls.append(("fetchrow", query, args))
		return self.fetchrow_rets.pop(0) if self.fetchrow_rets else None

	async def fetchval(self, query: str, *args):
		self.calls.append(("fetchval", query, args))
		return self.fetchval_rets.pop(0) if self.fetchval_rets else None

	async def execute(self, query: str, *args):
		self.calls.append(("execute", query, args))
		return self.execute_rets.pop(0) if self.execute_rets else "UPDATE 1"

	def transaction(self):
		return StubTransaction()

	def calls_of(self, method: str) -> List[Tuple[str, tuple]]:
		return [(query, args) for name, query, args in self.calls if name == method]


class StubPool:
	def __init__(self, conn: StubConnection):
		self._conn = conn

	def acquire(self):
		return StubAcquire(self._conn)


def use_pool(monkeypatch, service_cls, conn: StubConnection) -> StubPool:
	pool = StubPool(conn)

	async def _get_pool(self):
		return pool

	monkeypatch.setattr(service_cls, "_get_pool", _get_pool)
	return pool


def punchline_row(
	punchline_id: int = 1,
	*,
	line: str = "Ich trink nur {Wasser}",
	perfect_solution: str = "Wasser",
	acceptable_solutions: Any = "[]",
	created_at: datetime = NOW,
) -> Dict[str, Any]:
	return {
		"id": punchline_id,
		"line": line,
		"perfect_solution": perfect_solution,
		"acceptable_solutions": acceptable_solutions,
		"created_by": "admin-1",
		"created_at": created_at,
		"updated_at": created_at,
		"song_id": "song-1",
		"song_name": "Durst",
		"artist_id": "artist-1",
		"artist_name": "Kollege",
		"album_id": "album-1",
		"album_name": "Quelle",
		"album_image": None,
	}


def session_row(
	session_id: str = "5f0c3f6e-0000-4000-8000-000000000001",
	*,
	fingerprint: str = "fp-1",
	total_plays: int = 0,
	correct_guesses: int = 0,
	converted_to_user: Optional[str] = None,
) -> Dict[str, Any]:
	return {
		"id": session_id,
		"fingerprint": fingerprint,
		"first_seen_at": NOW,
		"last_seen_at": NOW,
		"total_plays": total_plays,
		"correct_guesses": correct_guesses,
		"converted_to_user": converted_to_user,
	}


def quiz_row(quiz_id: int = 7) -> Dict[str, Any]:
	row = punchline_row(quiz_id)
	row.pop("perfect_solution")
	row.pop("acceptable_solutions")
	row.update(
		{
			"line": "Wer hat das gerappt?",
			"correct_artist_id": "artist-1",
			"correct_artist_name": "Kollege",
			"correct_artist_image": None,
			"wrong_artist_1_id": "artist-2",
			"wrong_artist_1_name": "Andere",
			"wrong_artist_1_image": None,
			"wrong_artist_2_id": "artist-3",
			"wrong_artist_2_name": "Dritte",
			"wrong_artist_2_image": None,
		}
	)
	return row


class RecordingSessions:
	"""Stands in for SessionService and remembers logged events."""

	def __init__(self) -> None:
		self.events: List[Tuple[str, Any]] = []

	async def record_event_conn(self, conn, fingerprint, event, *, now=None):
		from punchline_quiz.domain.sessions.models import AnonymousSession

		self.events.append((fingerprint, event))
		return AnonymousSession.from_record(session_row(fingerprint=fingerprint))
