"""Base error type for domain guard failures surfaced over HTTP."""

from __future__ import annotations


class DomainError(RuntimeError):
	def __init__(self, code: str, *, status_code: int = 400, message: str | None = None) -> None:
		super().__init__(message or code)
		self.code = code
		self.status_code = status_code
		self.detail = message or code
