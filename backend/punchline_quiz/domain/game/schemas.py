"""Pydantic schemas for the finishing-lines game."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from punchline_quiz.domain.game.matching import hide_solution
from punchline_quiz.domain.punchlines import models
from punchline_quiz.domain.punchlines.schemas import SongOut


class StartGameRequest(BaseModel):
	fingerprint: Optional[str] = Field(default=None, max_length=128)


class SafePunchlineOut(BaseModel):
	"""A punchline as shown while guessing: blank hidden, no solutions."""

	id: int
	line: str
	song: SongOut
	created_at: Optional[datetime] = None

	@classmethod
	def from_model(cls, punchline: models.Punchline) -> "SafePunchlineOut":
		return cls(
			id=punchline.id,
			line=hide_solution(punchline.line),
			song=SongOut.from_model(punchline.song),
			created_at=punchline.created_at,
		)


class RevealedPunchlineOut(BaseModel):
	id: int
	line: str
	perfect_solution: str
	song: SongOut

	@classmethod
	def from_model(cls, punchline: models.Punchline) -> "RevealedPunchlineOut":
		return cls(
			id=punchline.id,
			line=punchline.line,
			perfect_solution=punchline.perfect_solution,
			song=SongOut.from_model(punchline.song),
		)


class RandomPunchlineResponse(BaseModel):
	all_solved: bool = False
	punchline: Optional[SafePunchlineOut] = None


class GuessRequest(BaseModel):
	punchline_id: int
	guess: str = Field(..., min_length=1, max_length=500)
	fingerprint: Optional[str] = Field(default=None, max_length=128)


class GuessResult(BaseModel):
	is_correct: bool
	punchline: Optional[RevealedPunchlineOut] = None
