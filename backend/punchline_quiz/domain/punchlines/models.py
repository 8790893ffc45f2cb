"""Domain models for punchlines and the songs they come from."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Mapping, Optional

from punchline_quiz.domain.game.matching import accepted_answers
from punchline_quiz.domain.punchlines.solutions import parse_solutions


@dataclass(slots=True)
class Song:
	id: str
	name: str
	artist_id: str
	artist_name: str
	album_id: Optional[str] = None
	album_name: Optional[str] = None
	album_image: Optional[str] = None

	@classmethod
	def from_record(cls, row: Mapping[str, Any]) -> "Song":
		return cls(
			id=row["song_id"],
			name=row["song_name"],
			artist_id=row["artist_id"],
			artist_name=row["artist_name"],
			album_id=row.get("album_id"),
			album_name=row.get("album_name"),
			album_image=row.get("album_image"),
		)

	def to_payload(self) -> dict[str, Any]:
		return {
			"id": self.id,
			"name": self.name,
			"artist": {"id": self.artist_id, "name": self.artist_name},
			"album": {"id": self.album_id, "name": self.album_name, "image": self.album_image},
		}


@dataclass(slots=True)
class Punchline:
	"""A lyric line whose blank is marked with ``{...}`` or ``[...]``."""

	id: int
	line: str
	perfect_solution: str
	song: Song
	acceptable_solutions: List[str] = field(default_factory=list)
	created_by: Optional[str] = None
	created_at: Optional[datetime] = None
	updated_at: Optional[datetime] = None

	@property
	def answers(self) -> List[str]:
		return accepted_answers(self.perfect_solution, self.acceptable_solutions)

	@classmethod
	def from_record(cls, row: Mapping[str, Any]) -> "Punchline":
		return cls(
			id=int(row["id"]),
			line=row["line"],
			perfect_solution=row["perfect_solution"],
			song=Song.from_record(row),
			acceptable_solutions=parse_solutions(row["acceptable_solutions"]),
			created_by=str(row["created_by"]) if row.get("created_by") is not None else None,
			created_at=row.get("created_at"),
			updated_at=row.get("updated_at"),
		)
