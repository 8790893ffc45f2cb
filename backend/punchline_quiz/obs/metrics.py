"""Central registry for Prometheus metrics used across the backend."""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram


REQUEST_COUNTER = Counter(
	"punchlinequiz_http_requests_total",
	"Total HTTP requests processed",
	["route", "method", "status"],
)

REQUEST_LATENCY = Histogram(
	"punchlinequiz_http_request_duration_seconds",
	"HTTP request latency in seconds",
	["route", "method"],
	buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0),
)

GUESSES = Counter(
	"punchlinequiz_guesses_total",
	"Guesses evaluated per game mode and outcome",
	["mode", "outcome"],
)

ACTIVITY_EVENTS = Counter(
	"punchlinequiz_activity_events_total",
	"Anonymous activity events recorded",
	["kind"],
)

SESSIONS_CREATED = Counter(
	"punchlinequiz_anonymous_sessions_created_total",
	"Anonymous sessions created for new fingerprints",
)

SESSIONS_LINKED = Counter(
	"punchlinequiz_anonymous_sessions_linked_total",
	"Anonymous sessions linked to a registered user",
)

RATE_LIMITED = Counter(
	"punchlinequiz_rate_limited_total",
	"Requests rejected by rate limiting",
	["kind"],
)

REDIS_UP = Gauge("punchlinequiz_redis_up", "Redis availability (1=up, 0=down)")
REDIS_LATENCY = Histogram(
	"punchlinequiz_redis_ping_seconds",
	"Redis ping latency",
	buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.25),
)
POSTGRES_UP = Gauge("punchlinequiz_postgres_up", "Postgres availability (1=up, 0=down)")
POSTGRES_LATENCY = Histogram(
	"punchlinequiz_postgres_ping_seconds",
	"Postgres readiness query latency",
	buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.25),
)


def observe_request(route: str, method: str, status: int, elapsed_seconds: float) -> None:
	REQUEST_COUNTER.labels(route=route, method=method, status=str(status)).inc()
	REQUEST_LATENCY.labels(route=route, method=method).observe(elapsed_seconds)


def inc_guess(mode: str, correct: bool) -> None:
	GUESSES.labels(mode=mode, outcome="correct" if correct else "incorrect").inc()


def inc_activity_event(kind: str) -> None:
	ACTIVITY_EVENTS.labels(kind=kind).inc()


def inc_session_created() -> None:
	SESSIONS_CREATED.inc()


def inc_session_linked() -> None:
	SESSIONS_LINKED.inc()


def inc_rate_limited(kind: str) -> None:
	RATE_LIMITED.labels(kind=kind).inc()


def mark_redis(ok: bool, *, latency_seconds: float | None = None) -> None:
	REDIS_UP.set(1 if ok else 0)
	if latency_seconds is not None:
		REDIS_LATENCY.observe(latency_seconds)


def mark_postgres(ok: bool, *, latency_seconds: float | None = None) -> None:
	POSTGRES_UP.set(1 if ok else 0)
	if latency_seconds is not None:
		POSTGRES_LATENCY.observe(latency_seconds)
