import json

import pytest

from punchline_quiz.domain.punchlines import schemas
from punchline_quiz.domain.punchlines.service import PunchlineError, PunchlineService
from punchline_quiz.infra.auth import AuthenticatedUser
from stubs import StubConnection, punchline_row, use_pool

ADMIN = AuthenticatedUser(id="admin-1", roles=("admin",))


def _write_request(**overrides) -> schemas.PunchlineWriteRequest:
	data = {
		"line": "Ich trink nur {Wasser}",
		"perfect_solution": "Wasser",
		"acceptable_solutions": [" H2O ", "", "Wasser", "H2O"],
		"song_id": "song-1",
	}
	data.update(overrides)
	return schemas.PunchlineWriteRequest(**data)


@pytest.mark.asyncio
async def test_create_punchline_serializes_clean_solutions(monkeypatch):
	conn = StubConnection(fetchval=[1, 5], fetchrow=[punchline_row(5, acceptable_solutions='["H2O"]')])
	use_pool(monkeypatch, PunchlineService, conn)

	created = await PunchlineService().create_punchline(ADMIN, _write_request())

	assert created.id == 5
	assert created.acceptable_solutions == ["H2O"]
	insert_args = conn.calls_of("fetchval")[1][1]
	assert insert_args[2] == '["H2O"]'
	assert insert_args[4] == "admin-1"


@pytest.mark.asyncio
async def test_create_punchline_unknown_song(monkeypatch):
	use_pool(monkeypatch, PunchlineService, StubConnection(fetchval=[None]))

	with pytest.raises(PunchlineError) as exc:
		await PunchlineService().create_punchline(ADMIN, _write_request())

	assert exc.value.code == "unknown_song"
	assert exc.value.status_code == 422


@pytest.mark.asyncio
async def test_update_missing_punchline(monkeypatch):
	use_pool(monkeypatch, PunchlineService, StubConnection(fetchval=[1, None]))

	with pytest.raises(PunchlineError) as exc:
		await PunchlineService().update_punchline(42, _write_request())

	assert exc.value.status_code == 404


@pytest.mark.asyncio
async def test_list_punchlines_decodes_solutions(monkeypatch):
	rows = [punchline_row(2, acceptable_solutions="broken"), punchline_row(1, acceptable_solutions='["a"]')]
	use_pool(monkeypatch, PunchlineService, StubConnection(fetch=[rows]))

	items = await PunchlineService().list_punchlines()

	assert [p.id for p in items] == [2, 1]
	assert items[0].acceptable_solutions == []
	assert items[1].acceptable_solutions == ["a"]
	assert items[1].song.artist.name == "Kollege"


@pytest.mark.asyncio
async def test_add_acceptable_solution_appends_once():
	conn = StubConnection(
		fetchrow=[
			punchline_row(acceptable_solutions='["a"]'),
			punchline_row(acceptable_solutions='["a", "b"]'),
		]
	)

	punchline = await PunchlineService().add_acceptable_solution(conn, 1, " b ")

	assert punchline.acceptable_solutions == ["a", "b"]
	stored = conn.calls_of("execute")[0][1][1]
	assert json.loads(stored) == ["a", "b"]


@pytest.mark.asyncio
async def test_delete_punchline_clears_dependents(monkeypatch):
	conn = StubConnection(fetchval=[1])
	use_pool(monkeypatch, PunchlineService, conn)

	await PunchlineService().delete_punchline(1)

	deletes = [q for q, _ in conn.calls_of("execute")]
	assert "solved_punchlines" in deletes[0]
	assert "anonymous_activity" in deletes[1]


@pytest.mark.asyncio
async def test_delete_missing_punchline(monkeypatch):
	use_pool(monkeypatch, PunchlineService, StubConnection())

	with pytest.raises(PunchlineError):
		await PunchlineService().delete_punchline(1)
