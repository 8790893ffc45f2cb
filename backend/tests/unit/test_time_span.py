from datetime import datetime, timedelta, timezone

import pytest

from punchline_quiz.domain.analytics.models import TimeSpan, WindowCounts

NOW = datetime(2024, 5, 8, 12, tzinfo=timezone.utc)


@pytest.mark.parametrize("value, hours", [("1h", 1), ("24h", 24), ("7d", 168)])
def test_time_span_hours(value, hours):
	assert TimeSpan(value).hours == hours


def test_window_bounds():
	window = TimeSpan.WEEK.window(NOW)
	assert window.end == NOW
	assert window.current_start == NOW - timedelta(days=7)
	assert window.previous_start == NOW - timedelta(days=14)


def test_unknown_time_span_rejected():
	with pytest.raises(ValueError):
		TimeSpan("30d")


def test_window_counts_from_record():
	counts = WindowCounts.from_record({"current": 3, "previous": None, "before": 9})
	assert (counts.current, counts.previous, counts.before) == (3, 0, 9)
	assert WindowCounts.from_record(None) == WindowCounts()
