"""Domain models for the guess-the-artist quiz."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, List, Mapping, Optional

from punchline_quiz.domain.punchlines.models import Song


@dataclass(slots=True)
class Artist:
	id: str
	name: str
	image: Optional[str] = None

	@classmethod
	def from_prefixed(cls, row: Mapping[str, Any], prefix: str) -> "Artist":
		return cls(id=row[f"{prefix}_id"], name=row[f"{prefix}_name"], image=row.get(f"{prefix}_image"))


@dataclass(slots=True)
class QuizPunchline:
	id: int
	line: str
	song: Song
	correct_artist: Artist
	wrong_artists: List[Artist]
	created_by: Optional[str] = None
	created_at: Optional[datetime] = None
	updated_at: Optional[datetime] = None

	@property
	def options(self) -> List[Artist]:
		return [self.correct_artist, *self.wrong_artists]

	def is_correct(self, artist_id: str) -> bool:
		return artist_id == self.correct_artist.id

	@classmethod
	def from_record(cls, row: Mapping[str, Any]) -> "QuizPunchline":
		return cls(
			id=int(row["id"]),
			line=row["line"],
			song=Song.from_record(row),
			correct_artist=Artist.from_prefixed(row, "correct_artist"),
			wrong_artists=[
				Artist.from_prefixed(row, "wrong_artist_1"),
				Artist.from_prefixed(row, "wrong_artist_2"),
			],
			created_by=str(row["created_by"]) if row.get("created_by") is not None else None,
			created_at=row.get("created_at"),
			updated_at=row.get("updated_at"),
		)
