"""Anonymous session records and the activity event variants they log."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, ClassVar, Mapping, Optional, Tuple, Union


ActivityKind = str

PLAY = "play"
CORRECT_GUESS = "correct_guess"
INCORRECT_GUESS = "incorrect_guess"
QUIZ_PLAY = "quiz_play"
QUIZ_CORRECT_GUESS = "quiz_correct_guess"
QUIZ_INCORRECT_GUESS = "quiz_incorrect_guess"
OAUTH_CLICK = "oauth_click"

ACTIVITY_KINDS: tuple[ActivityKind, ...] = (
	PLAY,
	CORRECT_GUESS,
	INCORRECT_GUESS,
	QUIZ_PLAY,
	QUIZ_CORRECT_GUESS,
	QUIZ_INCORRECT_GUESS,
	OAUTH_CLICK,
)


@dataclass(slots=True)
class AnonymousSession:
	"""Fingerprint-identified play session, optionally converted to a user."""

	id: str
	fingerprint: str
	first_seen_at: datetime
	last_seen_at: datetime
	total_plays: int = 0
	correct_guesses: int = 0
	converted_to_user: Optional[str] = None

	@property
	def is_converted(self) -> bool:
		return self.converted_to_user is not None

	@classmethod
	def from_record(cls, row: Mapping[str, Any]) -> "AnonymousSession":
		return cls(
			id=str(row["id"]),
			fingerprint=row["fingerprint"],
			first_seen_at=row["first_seen_at"],
			last_seen_at=row["last_seen_at"],
			total_plays=int(row["total_plays"] or 0),
			correct_guesses=int(row["correct_guesses"] or 0),
			converted_to_user=str(row["converted_to_user"]) if row["converted_to_user"] is not None else None,
		)


class _Event:
	kind: ClassVar[ActivityKind]
	# Counter increments applied to the owning session (plays, correct guesses)
	counters: ClassVar[Tuple[int, int]] = (0, 0)

	def to_row(self) -> Tuple[ActivityKind, Optional[int], Optional[str]]:
		return (self.kind, getattr(self, "punchline_id", None), getattr(self, "guess", None))


@dataclass(frozen=True, slots=True)
class PlayEvent(_Event):
	kind: ClassVar[ActivityKind] = PLAY
	counters: ClassVar[Tuple[int, int]] = (1, 0)


@dataclass(frozen=True, slots=True)
class CorrectGuessEvent(_Event):
	kind: ClassVar[ActivityKind] = CORRECT_GUESS
	counters: ClassVar[Tuple[int, int]] = (0, 1)

	punchline_id: Optional[int] = None
	guess: Optional[str] = None


@dataclass(frozen=True, slots=True)
class IncorrectGuessEvent(_Event):
	kind: ClassVar[ActivityKind] = INCORRECT_GUESS

	punchline_id: Optional[int] = None
	guess: Optional[str] = None


@dataclass(frozen=True, slots=True)
class QuizPlayEvent(_Event):
	kind: ClassVar[ActivityKind] = QUIZ_PLAY
	counters: ClassVar[Tuple[int, int]] = (1, 0)


@dataclass(frozen=True, slots=True)
class QuizCorrectGuessEvent(_Event):
	kind: ClassVar[ActivityKind] = QUIZ_CORRECT_GUESS
	counters: ClassVar[Tuple[int, int]] = (0, 1)


@dataclass(frozen=True, slots=True)
class QuizIncorrectGuessEvent(_Event):
	kind: ClassVar[ActivityKind] = QUIZ_INCORRECT_GUESS


@dataclass(frozen=True, slots=True)
class OAuthClickEvent(_Event):
	kind: ClassVar[ActivityKind] = OAUTH_CLICK


ActivityEvent = Union[
	PlayEvent,
	CorrectGuessEvent,
	IncorrectGuessEvent,
	QuizPlayEvent,
	QuizCorrectGuessEvent,
	QuizIncorrectGuessEvent,
	OAuthClickEvent,
]

_EVENT_TYPES = {
	cls.kind: cls
	for cls in (
		PlayEvent,
		CorrectGuessEvent,
		IncorrectGuessEvent,
		QuizPlayEvent,
		QuizCorrectGuessEvent,
		QuizIncorrectGuessEvent,
		OAuthClickEvent,
	)
}


def build_event(kind: str, *, punchline_id: Optional[int] = None, guess: Optional[str] = None) -> Optional[ActivityEvent]:
	"""Return the variant for ``kind``, or None for kinds this service does not log.

	Fields a variant does not carry are dropped.
	"""
	cls = _EVENT_TYPES.get(kind)
	if cls is None:
		return None
	if cls in (CorrectGuessEvent, IncorrectGuessEvent):
		return cls(punchline_id=punchline_id, guess=guess)
	return cls()


@dataclass(slots=True)
class RecordedActivity:
	"""An event as read back from the activity log."""

	id: int
	session_id: str
	event: ActivityEvent
	timestamp: datetime
	punchline_line: Optional[str] = None

	@property
	def kind(self) -> ActivityKind:
		return self.event.kind

	@classmethod
	def from_record(cls, row: Mapping[str, Any]) -> Optional["RecordedActivity"]:
		event = build_event(row["type"], punchline_id=row["punchline_id"], guess=row["guess"])
		if event is None:
			return None
		return cls(
			id=int(row["id"]),
			session_id=str(row["session_id"]),
			event=event,
			timestamp=row["timestamp"],
			punchline_line=row.get("punchline_line"),
		)
