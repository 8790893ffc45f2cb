"""Guess normalization and answer matching for the finishing-lines game."""

from __future__ import annotations

import re
from typing import Iterable

_WHITESPACE_RE = re.compile(r"\s+")
_PUNCTUATION_RE = re.compile(r"[.,?!:;]")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")


def normalize(text: str) -> str:
	"""Canonicalize a guess or solution for comparison.

	Steps run in a fixed order: lowercase, collapse and trim whitespace,
	``ß`` to ``ss``, strip ``.,?!:;``, then drop anything that is not an
	ASCII letter or digit. The last step also removes the spaces the second
	step kept, so ``"wasser kocht"`` and ``"wasserkocht"`` compare equal.
	"""
	normalized = text.lower()
	normalized = _WHITESPACE_RE.sub(" ", normalized)
	normalized = normalized.strip()
	normalized = normalized.replace("ß", "ss")
	normalized = _PUNCTUATION_RE.sub("", normalized)
	normalized = _NON_ALNUM_RE.sub("", normalized)
	return normalized


def check_solution(guess: str, solution: str) -> bool:
	return normalize(guess) == normalize(solution)


def matches_any(guess: str, solutions: Iterable[str]) -> bool:
	"""Return True when the guess equals any solution after normalization.

	An empty guess matches a solution that normalizes to the empty string.
	"""
	target = normalize(guess)
	return any(normalize(solution) == target for solution in solutions)


def accepted_answers(perfect_solution: str, acceptable_solutions: Iterable[str]) -> list[str]:
	return [perfect_solution, *acceptable_solutions]


_BRACES_RE = re.compile(r"\{([^}]+)\}")
_BRACKETS_RE = re.compile(r"\[([^\]]+)\]")


def hide_solution(line: str) -> str:
	"""Blank out the marked solution in a punchline.

	Only the first ``{...}`` and the first ``[...]`` are replaced.
	"""
	return _BRACKETS_RE.sub("...", _BRACES_RE.sub("...", line, count=1), count=1)
