from __future__ import annotations

import os
from typing import Any, Iterable, List, Mapping

from survey_assist import constants


def details_visible() -> bool:
	env = os.getenv("SURVEY_ASSIST_ENV", "production").strip().lower()
	return env in constants.DEBUG_ENVIRONMENTS


def collect_issues(errors: Iterable[Mapping[str, Any]]) -> List[str]:
	issues: List[str] = []
	for issue in errors:
		loc = [str(part) for part in issue.get("loc", ())]
		if loc and loc[0] == "body":
			loc = loc[1:]
		path = ".".join(loc)
		msg = issue.get("msg", "Invalid request.")
		issues.append(f"{path}: {msg}" if path else msg)
	return issues


def validation_evidence(errors: Iterable[Mapping[str, Any]]) -> List[str]:
	"""Field-level issues for debug environments; nothing in production."""
	if not details_visible():
		return []
	return collect_issues(errors)
