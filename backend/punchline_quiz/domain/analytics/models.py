"""Domain models for analytics time windows."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Mapping


class TimeSpan(str, Enum):
	"""Supported dashboard comparison windows."""

	HOUR = "1h"
	DAY = "24h"
	WEEK = "7d"

	@property
	def hours(self) -> int:
		return _HOURS[self]

	@property
	def delta(self) -> timedelta:
		return timedelta(hours=self.hours)

	def window(self, now: datetime) -> "Window":
		current_start = now - self.delta
		return Window(previous_start=current_start - self.delta, current_start=current_start, end=now)


_HOURS = {TimeSpan.HOUR: 1, TimeSpan.DAY: 24, TimeSpan.WEEK: 168}


@dataclass(frozen=True, slots=True)
class Window:
	"""Current window is [current_start, end]; previous is [previous_start, current_start)."""

	previous_start: datetime
	current_start: datetime
	end: datetime


@dataclass(slots=True)
class WindowCounts:
	current: int = 0
	previous: int = 0
	# rows created before the current window started
	before: int = 0

	@classmethod
	def from_record(cls, row: Mapping[str, Any] | None) -> "WindowCounts":
		if row is None:
			return cls()
		return cls(
			current=int(row["current"] or 0),
			previous=int(row["previous"] or 0),
			before=int(row["before"] or 0),
		)
