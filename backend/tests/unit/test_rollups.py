from datetime import datetime, timedelta, timezone

import pytest

from punchline_quiz.domain.analytics import rollups

T0 = datetime(2024, 5, 1, tzinfo=timezone.utc)


def test_percent_change_without_baseline():
	assert rollups.percent_change(5, 0) == 100
	assert rollups.percent_change(0, 0) == 0


def test_percent_change_relative():
	assert rollups.percent_change(15, 10) == pytest.approx(50.0)
	assert rollups.percent_change(5, 10) == pytest.approx(-50.0)


def test_rates_guard_against_zero():
	assert rollups.conversion_rate(0, 0) == 0
	assert rollups.conversion_rate(3, 10) == 30.0
	assert rollups.correct_guess_rate(0, 0) == 0
	assert rollups.correct_guess_rate(1, 4) == 25.0
	assert rollups.solve_percentage(2, 8) == 25.0
	assert rollups.safe_average(10, 0) == 0.0


def test_wrong_guesses_group_on_raw_text():
	events = [(1, "x", T0), (1, "X", T0), (1, "y", T0)]
	grouped = rollups.rollup_wrong_guesses(events)
	assert [(g.guess, g.count) for g in grouped[1]] == [("x", 1), ("X", 1), ("y", 1)]


def test_wrong_guesses_sorted_by_count_with_latest_timestamp():
	events = [
		(1, "a", T0),
		(1, "b", T0),
		(1, "b", T0 + timedelta(hours=2)),
		(1, "b", T0 + timedelta(hours=1)),
		(2, "a", T0),
	]
	grouped = rollups.rollup_wrong_guesses(events)
	first = grouped[1][0]
	assert (first.guess, first.count) == ("b", 3)
	assert first.last_guessed_at == T0 + timedelta(hours=2)
	assert grouped[1][1].guess == "a"
	assert [g.count for g in grouped[2]] == [1]


def test_wrong_guesses_empty():
	assert rollups.rollup_wrong_guesses([]) == {}
