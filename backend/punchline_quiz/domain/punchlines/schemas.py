"""Pydantic schemas for punchlines."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from punchline_quiz.domain.punchlines import models


class ArtistRef(BaseModel):
	id: str
	name: str


class AlbumRef(BaseModel):
	id: Optional[str] = None
	name: Optional[str] = None
	image: Optional[str] = None


class SongOut(BaseModel):
	id: str
	name: str
	artist: ArtistRef
	album: AlbumRef

	@classmethod
	def from_model(cls, song: models.Song) -> "SongOut":
		return cls(**song.to_payload())


class PunchlineOut(BaseModel):
	id: int
	line: str
	perfect_solution: str
	acceptable_solutions: List[str] = Field(default_factory=list)
	song: SongOut
	created_by: Optional[str] = None
	created_at: Optional[datetime] = None
	updated_at: Optional[datetime] = None

	@classmethod
	def from_model(cls, punchline: models.Punchline) -> "PunchlineOut":
		return cls(
			id=punchline.id,
			line=punchline.line,
			perfect_solution=punchline.perfect_solution,
			acceptable_solutions=list(punchline.acceptable_solutions),
			song=SongOut.from_model(punchline.song),
			created_by=punchline.created_by,
			created_at=punchline.created_at,
			updated_at=punchline.updated_at,
		)


class PunchlineWriteRequest(BaseModel):
	line: str = Field(..., min_length=1, max_length=1000)
	perfect_solution: str = Field(..., min_length=1, max_length=200)
	acceptable_solutions: List[str] = Field(default_factory=list, max_length=100)
	song_id: str = Field(..., min_length=1)
