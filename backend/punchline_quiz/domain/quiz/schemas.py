"""Pydantic schemas for the guess-the-artist quiz."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from punchline_quiz.domain.punchlines.schemas import SongOut
from punchline_quiz.domain.quiz import models


class ArtistOut(BaseModel):
	id: str
	name: str
	image: Optional[str] = None

	@classmethod
	def from_model(cls, artist: models.Artist) -> "ArtistOut":
		return cls(id=artist.id, name=artist.name, image=artist.image)


class QuizRoundOut(BaseModel):
	id: int
	line: str
	options: List[ArtistOut]


class StartQuizRequest(BaseModel):
	fingerprint: Optional[str] = Field(default=None, max_length=128)


class QuizGuessRequest(BaseModel):
	quiz_punchline_id: int
	artist_id: str = Field(..., min_length=1)
	fingerprint: Optional[str] = Field(default=None, max_length=128)


class QuizGuessResult(BaseModel):
	is_correct: bool
	correct_artist: ArtistOut
	song: SongOut


class QuizPunchlineOut(BaseModel):
	id: int
	line: str
	song: SongOut
	correct_artist: ArtistOut
	wrong_artists: List[ArtistOut]
	created_at: Optional[datetime] = None
	updated_at: Optional[datetime] = None

	@classmethod
	def from_model(cls, punchline: models.QuizPunchline) -> "QuizPunchlineOut":
		return cls(
			id=punchline.id,
			line=punchline.line,
			song=SongOut.from_model(punchline.song),
			correct_artist=ArtistOut.from_model(punchline.correct_artist),
			wrong_artists=[ArtistOut.from_model(a) for a in punchline.wrong_artists],
			created_at=punchline.created_at,
			updated_at=punchline.updated_at,
		)


class QuizPunchlineWriteRequest(BaseModel):
	line: str = Field(..., min_length=1, max_length=1000)
	song_id: str = Field(..., min_length=1)
	correct_artist_id: str = Field(..., min_length=1)
	wrong_artist_1_id: str = Field(..., min_length=1)
	wrong_artist_2_id: str = Field(..., min_length=1)

	def artist_ids(self) -> List[str]:
		return [self.correct_artist_id, self.wrong_artist_1_id, self.wrong_artist_2_id]
