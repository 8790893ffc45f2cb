"""Pure aggregation helpers behind the admin analytics dashboard."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Tuple


def percent_change(current: float, previous: float) -> float:
	"""Relative change from ``previous`` to ``current`` in percent.

	With no baseline the change is reported as 100 when anything happened
	and 0 otherwise.
	"""
	if previous == 0:
		return 100.0 if current > 0 else 0.0
	return (current - previous) / previous * 100


def _ratio_percent(part: float, whole: float) -> float:
	if whole == 0:
		return 0.0
	return part / whole * 100


def conversion_rate(converted_sessions: int, total_sessions: int) -> float:
	return _ratio_percent(converted_sessions, total_sessions)


def correct_guess_rate(correct_guesses: int, total_plays: int) -> float:
	return _ratio_percent(correct_guesses, total_plays)


def solve_percentage(distinct_solvers: int, total_users: int) -> float:
	return _ratio_percent(distinct_solvers, total_users)


def safe_average(total: float, count: float) -> float:
	return total / count if count else 0.0


@dataclass(slots=True)
class WrongGuessSummary:
	guess: str
	count: int
	last_guessed_at: datetime


def rollup_wrong_guesses(
	events: Iterable[Tuple[int, str, datetime]],
) -> Dict[int, List[WrongGuessSummary]]:
	"""Group incorrect guesses per punchline by their raw text.

	``events`` yields ``(punchline_id, guess, timestamp)``. Guesses differing
	only in case or punctuation stay separate groups. Each punchline's list
	is ordered by count descending; ties keep first-seen order.
	"""
	grouped: Dict[int, Dict[str, WrongGuessSummary]] = {}
	for punchline_id, guess, timestamp in events:
		per_punchline = grouped.setdefault(punchline_id, {})
		summary = per_punchline.get(guess)
		if summary is None:
			per_punchline[guess] = WrongGuessSummary(guess=guess, count=1, last_guessed_at=timestamp)
			continue
		summary.count += 1
		if timestamp > summary.last_guessed_at:
			summary.last_guessed_at = timestamp
	return {
		punchline_id: sorted(summaries.values(), key=lambda s: s.count, reverse=True)
		for punchline_id, summaries in grouped.items()
	}
