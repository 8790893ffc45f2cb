"""Codec for the acceptable-solutions column (a JSON array of strings)."""

from __future__ import annotations

import json
import logging
from typing import Any, Iterable, List

logger = logging.getLogger(__name__)


def parse_solutions(raw: Any) -> List[str]:
	"""Decode the stored column into a list of strings.

	NULL, blank and malformed values decode to an empty list; non-string
	array items are dropped.
	"""
	if raw is None:
		return []
	if isinstance(raw, (list, tuple)):
		items: Any = list(raw)
	else:
		text = str(raw).strip()
		if not text:
			return []
		try:
			items = json.loads(text)
		except json.JSONDecodeError:
			logger.warning("acceptable_solutions_invalid_json", extra={"raw": text})
			return []
	if not isinstance(items, list):
		return []
	return [item for item in items if isinstance(item, str)]


def clean_solutions(items: Iterable[str], perfect_solution: str) -> List[str]:
	"""Trim entries, drop blanks, the perfect solution and repeats (first one wins)."""
	perfect = perfect_solution.strip()
	seen: set[str] = set()
	cleaned: List[str] = []
	for item in items:
		value = item.strip()
		if not value or value == perfect or value in seen:
			continue
		seen.add(value)
		cleaned.append(value)
	return cleaned


def serialize_solutions(items: Iterable[str], perfect_solution: str) -> str:
	return json.dumps(clean_solutions(items, perfect_solution), ensure_ascii=False)
