"""Shared request helpers for route modules."""

from __future__ import annotations

from typing import Optional

from fastapi import Request

from punchline_quiz.infra import rate_limit


def client_ip(request: Request) -> str:
	forwarded = request.headers.get("X-Forwarded-For")
	if forwarded:
		return forwarded.split(",")[0].strip()
	client = request.client
	return client.host if client else "unknown"


def actor_key(request: Request, fingerprint: Optional[str]) -> str:
	"""Rate-limit identity: the device fingerprint, else the client address."""
	if fingerprint:
		return f"fp:{fingerprint}"
	return f"ip:{client_ip(request)}"


async def enforce_limit(kind: str, request: Request, fingerprint: Optional[str], *, limit: int) -> None:
	await rate_limit.enforce(kind, actor_key(request, fingerprint), limit=limit)
