import pytest
from pydantic import TypeAdapter, ValidationError

from punchline_quiz.domain.sessions import models, schemas
from stubs import NOW


def test_every_kind_builds_a_variant():
	for kind in models.ACTIVITY_KINDS:
		event = models.build_event(kind, punchline_id=1, guess="x")
		assert event is not None
		assert event.kind == kind


def test_unknown_kind_yields_none():
	assert models.build_event("page_view") is None


def test_only_guess_variants_carry_details():
	assert models.build_event("incorrect_guess", punchline_id=4, guess="nope").to_row() == (
		"incorrect_guess",
		4,
		"nope",
	)
	assert models.build_event("play", punchline_id=4, guess="nope").to_row() == ("play", None, None)


def test_counter_increments_per_kind():
	assert models.PlayEvent.counters == (1, 0)
	assert models.QuizPlayEvent.counters == (1, 0)
	assert models.CorrectGuessEvent.counters == (0, 1)
	assert models.QuizCorrectGuessEvent.counters == (0, 1)
	assert models.IncorrectGuessEvent.counters == (0, 0)
	assert models.OAuthClickEvent.counters == (0, 0)


def test_recorded_activity_skips_unknown_rows():
	row = {"id": 1, "session_id": "s", "type": "legacy", "punchline_id": None, "guess": None, "timestamp": NOW}
	assert models.RecordedActivity.from_record(row) is None


def test_track_payload_discriminates_on_type():
	request = schemas.TrackRequest.model_validate(
		{"fingerprint": "fp-1", "event": {"type": "incorrect_guess", "punchline_id": 3, "guess": "Milch"}}
	)
	event = schemas.to_event(request.event)
	assert isinstance(event, models.IncorrectGuessEvent)
	assert (event.punchline_id, event.guess) == (3, "Milch")


def test_track_payload_rejects_unknown_type():
	adapter = TypeAdapter(schemas.EventPayload)
	with pytest.raises(ValidationError):
		adapter.validate_python({"type": "page_view"})


def test_track_payload_requires_fingerprint():
	with pytest.raises(ValidationError):
		schemas.TrackRequest.model_validate({"fingerprint": "", "event": {"type": "play"}})
