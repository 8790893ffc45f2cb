from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from punchline_quiz.domain.analytics.models import TimeSpan


class StatChanges(BaseModel):
	users: float
	punchlines: float
	solves: float
	average: float


class OverallStats(BaseModel):
	time_span: TimeSpan
	total_users: int
	total_punchlines: int
	total_solves: int
	average_solves_per_user: float
	average_solves_per_punchline: float
	changes: StatChanges


class ActivityOut(BaseModel):
	type: str
	timestamp: datetime
	guess: Optional[str] = None
	punchline_id: Optional[int] = None
	punchline_line: Optional[str] = None


class SessionActivityOut(BaseModel):
	id: str
	first_seen_at: datetime
	last_seen_at: datetime
	total_plays: int
	correct_guesses: int
	correct_guess_rate: float
	converted_to_user: Optional[str] = None
	activities: List[ActivityOut] = Field(default_factory=list)


class AnonymousStats(BaseModel):
	time_span: TimeSpan
	total_sessions: int
	active_sessions: int
	previous_active_sessions: int
	active_sessions_change: float
	converted_sessions: int
	conversion_rate: float
	correct_guess_rate: float
	recent_activity: List[SessionActivityOut] = Field(default_factory=list)


class SolverOut(BaseModel):
	id: str
	name: Optional[str] = None
	email: Optional[str] = None
	image: Optional[str] = None
	is_admin: bool = False
	solved_at: datetime
	solution: str


class WrongGuessOut(BaseModel):
	guess: str
	count: int
	last_guessed_at: datetime


class PunchlineSongRef(BaseModel):
	name: str
	artist: str


class PunchlineAnalyticsItem(BaseModel):
	id: int
	line: str
	song: PunchlineSongRef
	perfect_solution: str
	acceptable_solutions: List[str] = Field(default_factory=list)
	total_solves: int
	solve_percentage: float
	solved_by: List[SolverOut] = Field(default_factory=list)
	wrong_guesses: List[WrongGuessOut] = Field(default_factory=list)


class WrongGuessRequest(BaseModel):
	guess: str = Field(..., min_length=1, max_length=500)


class WrongGuessDeleteResult(BaseModel):
	punchline_id: int
	guess: str
	deleted: int
