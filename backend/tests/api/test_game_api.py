import pytest
from httpx import AsyncClient
from unittest.mock import MagicMock

from punchline_quiz.api import game as game_api
from punchline_quiz.domain.game import schemas
from punchline_quiz.domain.game.service import GameError, GameService
from punchline_quiz.domain.punchlines.schemas import SongOut
from punchline_quiz.settings import settings

SONG = SongOut(
	id="song-1",
	name="Durst",
	artist={"id": "artist-1", "name": "Kollege"},
	album={"id": None, "name": None, "image": None},
)


@pytest.fixture
def mock_game_service(monkeypatch):
	mock = MagicMock(spec=GameService)

	async def _start_game(viewer, fingerprint):
		return schemas.RandomPunchlineResponse(
			punchline=schemas.SafePunchlineOut(id=1, line="Ich trink nur ...", song=SONG)
		)

	async def _validate_guess(viewer, punchline_id, guess, fingerprint=None):
		if punchline_id == 404:
			raise GameError("punchline_not_found", status_code=404)
		if punchline_id == 500:
			raise RuntimeError("db down")
		return schemas.GuessResult(is_correct=guess == "Wasser")

	mock.start_game.side_effect = _start_game
	mock.validate_guess.side_effect = _validate_guess
	monkeypatch.setattr(game_api, "_service", mock)
	return mock


@pytest.mark.asyncio
async def test_start_game_is_anonymous_friendly(api_client: AsyncClient, mock_game_service):
	response = await api_client.post("/game/start", json={"fingerprint": "fp-1"})
	assert response.status_code == 200
	assert response.json()["punchline"]["line"] == "Ich trink nur ..."
	viewer, fingerprint = mock_game_service.start_game.call_args.args
	assert viewer is None
	assert fingerprint == "fp-1"


@pytest.mark.asyncio
async def test_guess_passes_signed_in_viewer(api_client: AsyncClient, mock_game_service):
	response = await api_client.post(
		"/game/guess",
		json={"punchline_id": 1, "guess": "Wasser", "fingerprint": "fp-1"},
		headers={"X-User-Id": "user-1"},
	)
	assert response.status_code == 200
	assert response.json()["is_correct"] is True
	viewer = mock_game_service.validate_guess.call_args.args[0]
	assert viewer.id == "user-1"


@pytest.mark.asyncio
async def test_guess_domain_error_maps_to_status(api_client: AsyncClient, mock_game_service):
	response = await api_client.post("/game/guess", json={"punchline_id": 404, "guess": "x"})
	assert response.status_code == 404
	body = response.json()
	assert body["detail"] == "punchline_not_found"
	assert body["request_id"]


@pytest.mark.asyncio
async def test_guess_unexpected_error_is_generic(api_client: AsyncClient, mock_game_service):
	response = await api_client.post("/game/guess", json={"punchline_id": 500, "guess": "x"})
	assert response.status_code == 500
	assert response.json()["detail"] == "failed_to_validate_guess"


@pytest.mark.asyncio
async def test_empty_guess_rejected(api_client: AsyncClient, mock_game_service):
	response = await api_client.post("/game/guess", json={"punchline_id": 1, "guess": ""})
	assert response.status_code == 422
	assert response.json()["detail"] == "validation_error"


@pytest.mark.asyncio
async def test_guess_rate_limited(api_client: AsyncClient, mock_game_service, monkeypatch):
	monkeypatch.setattr(settings, "guess_rate_limit_per_minute", 1)
	payload = {"punchline_id": 1, "guess": "Milch", "fingerprint": "fp-busy"}
	first = await api_client.post("/game/guess", json=payload)
	second = await api_client.post("/game/guess", json=payload)
	assert first.status_code == 200
	assert second.status_code == 429
	assert second.json()["detail"] == "rate_limited"


@pytest.mark.asyncio
async def test_solved_punchline_requires_sign_in(api_client: AsyncClient, mock_game_service):
	response = await api_client.get("/game/punchlines/1")
	assert response.status_code == 401
