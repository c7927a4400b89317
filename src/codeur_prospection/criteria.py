#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Search criteria normalization.

Turns whatever the search form sends (free text, numeric strings, comma
separated lists) into a canonical SearchCriteria. Malformed numbers are
dropped rather than reported.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

DEFAULT_POSTED_DAYS = 7

_PLAIN_INT = re.compile(r"^\d+$")
_GROUPED_INT = re.compile(r"^\d{1,3}([.,])\d{3}(\1\d{3})*$")
_DECIMAL = re.compile(r"^\d+[.,]\d+$")
# Unicode whitespace (including non-breaking spaces) and underscores
_DIGIT_SEPARATORS = re.compile(r"[\s_]")


@dataclass(frozen=True)
class SearchCriteria:
    """Canonical search filter."""
    keywords: Optional[str] = None
    budget_min: Optional[int] = None
    budget_max: Optional[int] = None
    skills: Tuple[str, ...] = ()
    posted_days: int = DEFAULT_POSTED_DAYS

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready form; absent fields are omitted."""
        data: Dict[str, Any] = {"posted_days": self.posted_days}
        if self.keywords is not None:
            data["keywords"] = self.keywords
        if self.budget_min is not None:
            data["budget_min"] = self.budget_min
        if self.budget_max is not None:
            data["budget_max"] = self.budget_max
        if self.skills:
            data["skills"] = list(self.skills)
        return data


def parse_int(value: Any) -> Optional[int]:
    """
    Parse a non-negative integer from user input.

    Accepts ints, floats (truncated) and strings such as ``"5000"``,
    ``"5 000"``, ``"5,000"`` or ``"1500.50"``.

    Returns:
        Optional[int]: Parsed value, or None when the input is not a number
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, int):
        number = value
    elif isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return None
        number = int(value)
    elif isinstance(value, str):
        text = _DIGIT_SEPARATORS.sub("", value)
        if _PLAIN_INT.match(text):
            number = int(text)
        elif _GROUPED_INT.match(text):
            number = int(re.sub(r"[.,]", "", text))
        elif _DECIMAL.match(text):
            number = int(float(text.replace(",", ".")))
        else:
            return None
    else:
        return None

    return number if number >= 0 else None


def normalize_keywords(value: Any) -> Optional[str]:
    """Trimmed keyword text, or None when blank or not a string."""
    if not isinstance(value, str):
        return None
    keywords = value.strip()
    return keywords or None


def normalize_skills(value: Any) -> Tuple[str, ...]:
    """Split, trim and deduplicate (case-insensitively) a skill list."""
    if value is None:
        return ()

    if isinstance(value, str):
        items: Iterable[Any] = value.split(",")
    elif isinstance(value, (list, tuple, set)):
        items = value
    else:
        return ()

    seen = set()
    skills = []
    for item in items:
        if not isinstance(item, str):
            continue
        skill = item.strip()
        if not skill or skill.lower() in seen:
            continue
        seen.add(skill.lower())
        skills.append(skill)

    return tuple(skills)


def normalize_posted_days(value: Any, default: int = DEFAULT_POSTED_DAYS) -> int:
    """Posting window in days; falls back to the default unless positive."""
    days = parse_int(value)
    if days is None or days <= 0:
        return default
    return days


def normalize_criteria(raw: Optional[Mapping[str, Any]], default_posted_days: int = DEFAULT_POSTED_DAYS) -> SearchCriteria:
    """
    Build canonical criteria from raw form values.

    Args:
        raw: Mapping with any of keywords, budget_min, budget_max, skills,
            posted_days (or posted_within, the dashboard's name for it)
        default_posted_days: Window used when posted_days is absent or invalid

    Returns:
        SearchCriteria: Normalized criteria; never raises on malformed input
    """
    if isinstance(raw, SearchCriteria):
        return raw
    if not isinstance(raw, Mapping):
        raw = {}

    posted = raw.get("posted_days")
    if posted is None:
        posted = raw.get("posted_within")

    return SearchCriteria(
        keywords=normalize_keywords(raw.get("keywords")),
        budget_min=parse_int(raw.get("budget_min")),
        budget_max=parse_int(raw.get("budget_max")),
        skills=normalize_skills(raw.get("skills")),
        posted_days=normalize_posted_days(posted, default_posted_days),
    )
