"""Pydantic schemas for anonymous activity tracking."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field

from punchline_quiz.domain.sessions import models

Fingerprint = Annotated[str, Field(min_length=1, max_length=128)]


class _GuessPayload(BaseModel):
	punchline_id: Optional[int] = None
	guess: Optional[str] = Field(default=None, min_length=1, max_length=500)


class PlayPayload(BaseModel):
	type: Literal["play"]


class CorrectGuessPayload(_GuessPayload):
	type: Literal["correct_guess"]


class IncorrectGuessPayload(_GuessPayload):
	type: Literal["incorrect_guess"]


class QuizPlayPayload(BaseModel):
	type: Literal["quiz_play"]


class QuizCorrectGuessPayload(BaseModel):
	type: Literal["quiz_correct_guess"]


class QuizIncorrectGuessPayload(BaseModel):
	type: Literal["quiz_incorrect_guess"]


class OAuthClickPayload(BaseModel):
	type: Literal["oauth_click"]


EventPayload = Annotated[
	Union[
		PlayPayload,
		CorrectGuessPayload,
		IncorrectGuessPayload,
		QuizPlayPayload,
		QuizCorrectGuessPayload,
		QuizIncorrectGuessPayload,
		OAuthClickPayload,
	],
	Field(discriminator="type"),
]


def to_event(payload: EventPayload) -> models.ActivityEvent:
	event = models.build_event(
		payload.type,
		punchline_id=getattr(payload, "punchline_id", None),
		guess=getattr(payload, "guess", None),
	)
	assert event is not None
	return event


class TrackRequest(BaseModel):
	fingerprint: Fingerprint
	event: EventPayload


class TrackResponse(BaseModel):
	success: bool = True


class LinkSessionRequest(BaseModel):
	fingerprint: Fingerprint


class AnonymousSessionOut(BaseModel):
	id: str
	first_seen_at: datetime
	last_seen_at: datetime
	total_plays: int
	correct_guesses: int
	converted_to_user: Optional[str] = None

	@classmethod
	def from_model(cls, session: models.AnonymousSession) -> "AnonymousSessionOut":
		return cls(
			id=session.id,
			first_seen_at=session.first_seen_at,
			last_seen_at=session.last_seen_at,
			total_plays=session.total_plays,
			correct_guesses=session.correct_guesses,
			converted_to_user=session.converted_to_user,
		)
