import pytest

from punchline_quiz.infra.rate_limit import RateLimitExceeded, allow, enforce


@pytest.mark.asyncio
async def test_rate_limit_allows_within_budget():
	assert await allow("track", "fp:a", limit=2, window_seconds=60)
	assert await allow("track", "fp:a", limit=2, window_seconds=60)


@pytest.mark.asyncio
async def test_rate_limit_blocks_when_budget_exhausted():
	await allow("guess", "fp:b", limit=1, window_seconds=60)
	assert not await allow("guess", "fp:b", limit=1, window_seconds=60)


@pytest.mark.asyncio
async def test_rate_limit_is_per_actor():
	await allow("guess", "fp:c", limit=1, window_seconds=60)
	assert await allow("guess", "fp:d", limit=1, window_seconds=60)


@pytest.mark.asyncio
async def test_enforce_raises():
	await enforce("track", "ip:1.2.3.4", limit=1)
	with pytest.raises(RateLimitExceeded) as exc:
		await enforce("track", "ip:1.2.3.4", limit=1)
	assert exc.value.kind == "track"
