from datetime import timedelta

import pytest

from punchline_quiz.domain.analytics.models import TimeSpan
from punchline_quiz.domain.analytics.service import AnalyticsService
from punchline_quiz.domain.punchlines.service import PunchlineService
from stubs import NOW, StubConnection, punchline_row, session_row, use_pool


def _counts(current, previous, before):
	return {"current": current, "previous": previous, "before": before}


@pytest.mark.asyncio
async def test_overall_stats_compare_windows(monkeypatch):
	conn = StubConnection(
		fetchval=[10, 4, 20],
		fetchrow=[_counts(2, 0, 8), _counts(1, 2, 3), _counts(5, 5, 15)],
	)
	use_pool(monkeypatch, AnalyticsService, conn)

	stats = await AnalyticsService().get_overall_stats(TimeSpan.DAY, now=NOW)

	assert stats.total_users == 10
	assert stats.average_solves_per_user == 2.0
	assert stats.average_solves_per_punchline == 5.0
	assert stats.changes.users == 100
	assert stats.changes.punchlines == pytest.approx(-50.0)
	assert stats.changes.solves == 0
	# 2.0 now against 15 / 8 when the window opened
	assert stats.changes.average == pytest.approx((2.0 - 1.875) / 1.875 * 100)
	window_args = conn.calls_of("fetchrow")[0][1]
	assert window_args == (NOW - timedelta(hours=48), NOW - timedelta(hours=24), NOW)


@pytest.mark.asyncio
async def test_overall_stats_on_empty_database(monkeypatch):
	use_pool(monkeypatch, AnalyticsService, StubConnection())

	stats = await AnalyticsService().get_overall_stats(TimeSpan.HOUR, now=NOW)

	assert stats.total_users == 0
	assert stats.average_solves_per_user == 0.0
	assert stats.changes.users == 0
	assert stats.changes.average == 0


@pytest.mark.asyncio
async def test_anonymous_stats_rates_and_recent_activity(monkeypatch):
	session = session_row(total_plays=4, correct_guesses=1)
	events = [
		{
			"id": 3,
			"session_id": session["id"],
			"type": "incorrect_guess",
			"punchline_id": 1,
			"guess": "Milch",
			"timestamp": NOW,
			"punchline_line": "Ich trink nur {Wasser}",
		},
		{
			"id": 2,
			"session_id": session["id"],
			"type": "legacy_event",
			"punchline_id": None,
			"guess": None,
			"timestamp": NOW,
			"punchline_line": None,
		},
		{
			"id": 1,
			"session_id": session["id"],
			"type": "play",
			"punchline_id": None,
			"guess": None,
			"timestamp": NOW,
			"punchline_line": None,
		},
	]
	conn = StubConnection(
		fetchrow=[
			{"total_sessions": 10, "converted_sessions": 3, "total_plays": 40, "correct_guesses": 10},
			{"current": 4, "previous": 0},
		],
		fetch=[[session], events],
	)
	use_pool(monkeypatch, AnalyticsService, conn)

	stats = await AnalyticsService().get_anonymous_stats(TimeSpan.WEEK, now=NOW)

	assert stats.conversion_rate == 30.0
	assert stats.correct_guess_rate == 25.0
	assert stats.active_sessions == 4
	assert stats.active_sessions_change == 100
	recent = stats.recent_activity[0]
	assert recent.correct_guess_rate == 25.0
	assert [a.type for a in recent.activities] == ["incorrect_guess", "play"]
	assert recent.activities[0].guess == "Milch"
	assert recent.activities[0].punchline_line == "Ich trink nur {Wasser}"
	sessions_query, sessions_args = conn.calls_of("fetch")[0]
	assert "JOIN anonymous_activity a ON a.session_id = s.id" in sessions_query
	assert sessions_args[:2] == (NOW - timedelta(days=7), NOW)


@pytest.mark.asyncio
async def test_anonymous_stats_without_sessions(monkeypatch):
	conn = StubConnection()
	use_pool(monkeypatch, AnalyticsService, conn)

	stats = await AnalyticsService().get_anonymous_stats(TimeSpan.DAY, now=NOW)

	assert stats.total_sessions == 0
	assert stats.conversion_rate == 0
	assert stats.recent_activity == []
	assert len(conn.calls_of("fetch")) == 1


@pytest.mark.asyncio
async def test_punchline_analytics_rolls_up_solves_and_wrong_guesses(monkeypatch):
	solver = {
		"punchline_id": 1,
		"solution": "wasser",
		"solved_at": NOW,
		"name": "ana",
		"email": "ana@example.com",
		"image": None,
		"is_admin": False,
	}
	solves = [dict(solver, user_id="u1"), dict(solver, user_id="u2")]
	wrong = [
		{"punchline_id": 1, "guess": "x", "timestamp": NOW},
		{"punchline_id": 1, "guess": "X", "timestamp": NOW},
		{"punchline_id": 1, "guess": "y", "timestamp": NOW},
		{"punchline_id": 1, "guess": "x", "timestamp": NOW + timedelta(minutes=5)},
	]
	conn = StubConnection(fetchval=[4], fetch=[[punchline_row(1), punchline_row(2)], solves, wrong])
	use_pool(monkeypatch, AnalyticsService, conn)

	items = await AnalyticsService().get_punchline_analytics()

	first, second = items
	assert first.total_solves == 2
	assert first.solve_percentage == 50.0
	assert first.song.artist == "Kollege"
	assert [(g.guess, g.count) for g in first.wrong_guesses] == [("x", 2), ("X", 1), ("y", 1)]
	assert first.wrong_guesses[0].last_guessed_at == NOW + timedelta(minutes=5)
	assert second.total_solves == 0
	assert second.wrong_guesses == []
	wrong_query, wrong_args = conn.calls_of("fetch")[2]
	assert "guess <> ''" in wrong_query
	assert wrong_args == ("incorrect_guess",)


@pytest.mark.asyncio
async def test_delete_wrong_guess_reports_count(monkeypatch):
	conn = StubConnection(execute=["DELETE 3"])
	use_pool(monkeypatch, AnalyticsService, conn)

	result = await AnalyticsService().delete_wrong_guess(1, "Milch")

	assert result.deleted == 3
	assert conn.calls_of("execute")[0][1] == ("incorrect_guess", 1, "Milch")


@pytest.mark.asyncio
async def test_accept_wrong_guess_promotes_and_clears(monkeypatch):
	conn = StubConnection(
		fetchrow=[punchline_row(), punchline_row(acceptable_solutions='["Milch"]')],
		execute=["UPDATE 1", "DELETE 2"],
	)
	use_pool(monkeypatch, AnalyticsService, conn)

	updated = await AnalyticsService(punchlines=PunchlineService()).accept_wrong_guess(1, "Milch")

	assert updated.acceptable_solutions == ["Milch"]
	update, delete = conn.calls_of("execute")
	assert "UPDATE punchlines" in update[0]
	assert "DELETE FROM anonymous_activity" in delete[0]
