"""Fuzzy scoring used to suggest existing person records for a session person.

Each candidate carries per-feature scores in ``[0, 1]``; the composite score
weights them name 0.4, date 0.25, place 0.25, relationship 0.1. A missing
date is neutral (0.5), any other missing feature counts as zero.
"""

import calendar
import logging
import math
import re
import unicodedata
from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from typing import TYPE_CHECKING, Any

from rapidfuzz.distance import Levenshtein

if TYPE_CHECKING:
    from lineage.index.vault_indexer import VaultIndexer
    from lineage.session.model import Person

logger = logging.getLogger(__name__)

NAME_WEIGHT = 0.4
DATE_WEIGHT = 0.25
PLACE_WEIGHT = 0.25
RELATIONSHIP_WEIGHT = 0.1

NEUTRAL_DATE_SCORE = 0.5

DEFAULT_MIN_SCORE = 0.5
DEFAULT_LIMIT = 5

# Padding applied around "~" approximate dates, by precision
APPROXIMATE_PADDING_DAYS = {"day": 30, "month": 90, "year": 365}

FULL_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
MONTH_DATE_RE = re.compile(r"^(\d{4})-(\d{2})$")
YEAR_DATE_RE = re.compile(r"^(\d{4})$")

SOUNDEX_CODES = {
    **dict.fromkeys("bfpv", "1"),
    **dict.fromkeys("cgjkqsxz", "2"),
    **dict.fromkeys("dt", "3"),
    "l": "4",
    **dict.fromkeys("mn", "5"),
    "r": "6",
}


@dataclass
class MatchFeatures:
    name: float | None = None
    date: float | None = None
    place: float | None = None
    relationship: float | None = None


@dataclass
class MatchCandidate:
    id: str
    features: MatchFeatures = field(default_factory=MatchFeatures)
    data: Any = None
    score: float | None = None


# ------------------------------------------------------------------ #
#  Feature scores                                                     #
# ------------------------------------------------------------------ #


def normalize_name(value: str) -> str:
    """Fold case, accents and punctuation so spelling variants compare equal.

    ``Mc`` prefixes become ``Mac`` and a ``-sen`` word ending becomes ``-son``.
    """
    normalized = unicodedata.normalize("NFD", value.lower())
    normalized = re.sub(r"[\u0300-\u036f]", "", normalized)
    normalized = re.sub(r"['’]", "", normalized)
    normalized = re.sub(r"[^a-z\s]", " ", normalized)
    normalized = re.sub(r"\s+", " ", normalized).strip()
    normalized = re.sub(r"^mc", "mac", normalized)
    return re.sub(r"sen\b", "son", normalized)


def soundex(value: str) -> str:
    """Four-character Soundex code of the letters in ``value``.

    Vowels do not separate repeated codes. Returns ``""`` when ``value``
    has no letters.
    """
    letters = re.sub(r"[^a-z]", "", value)
    if not letters:
        return ""

    result = letters[0].upper()
    last_code = SOUNDEX_CODES.get(letters[0], "")
    for char in letters[1:]:
        code = SOUNDEX_CODES.get(char, "")
        if code and code != last_code:
            result += code
        if code:
            last_code = code
        if len(result) >= 4:
            break

    return result.ljust(4, "0")


def score_name(name_a: str | None, name_b: str | None) -> float:
    """Similarity of two personal names in ``[0, 1]``.

    Edit distance over normalized names, raised to at least 0.8 when both
    names share a Soundex code. Blank names score 0.
    """
    if not name_a or not name_a.strip() or not name_b or not name_b.strip():
        return 0.0

    normalized_a = normalize_name(name_a)
    normalized_b = normalize_name(name_b)
    if not normalized_a or not normalized_b:
        return 0.0
    if normalized_a == normalized_b:
        return 1.0

    distance = Levenshtein.distance(normalized_a, normalized_b)
    max_length = max(len(normalized_a), len(normalized_b))
    score = 1 - distance / max_length

    code_a = soundex(normalized_a)
    if code_a and code_a == soundex(normalized_b):
        score = max(score, 0.8)
    return _clamp(score)


def parse_date_range(value: str | None) -> tuple[date, date] | None:
    """Inclusive day range covered by ``YYYY-MM-DD``, ``YYYY-MM`` or ``YYYY``.

    A leading ``~`` widens the range by 30, 90 or 365 days on each side
    depending on precision. Returns ``None`` for anything unparseable.
    """
    if not value or not value.strip():
        return None

    trimmed = value.strip()
    approximate = trimmed.startswith("~")
    raw = trimmed[1:].strip() if approximate else trimmed

    try:
        if match := FULL_DATE_RE.match(raw):
            year, month, day = (int(part) for part in match.groups())
            start = end = date(year, month, day)
            precision = "day"
        elif match := MONTH_DATE_RE.match(raw):
            year, month = int(match.group(1)), int(match.group(2))
            start = date(year, month, 1)
            end = date(year, month, calendar.monthrange(year, month)[1])
            precision = "month"
        elif match := YEAR_DATE_RE.match(raw):
            year = int(match.group(1))
            start, end = date(year, 1, 1), date(year, 12, 31)
            precision = "year"
        else:
            return None
    except ValueError:
        logger.debug(f"Ignoring out-of-range date {value!r}")
        return None

    if approximate:
        padding = timedelta(days=APPROXIMATE_PADDING_DAYS[precision])
        try:
            start, end = start - padding, end + padding
        except OverflowError:
            return None
    return start, end


def score_date_overlap(date_a: str | None, date_b: str | None) -> float:
    """Overlap of two date ranges relative to their union, in days.

    Disjoint ranges score 0; a missing or unparseable side is neutral (0.5).
    """
    range_a = parse_date_range(date_a)
    range_b = parse_date_range(date_b)
    if range_a is None or range_b is None:
        return NEUTRAL_DATE_SCORE

    overlap_start = max(range_a[0], range_b[0])
    overlap_end = min(range_a[1], range_b[1])
    if overlap_end < overlap_start:
        return 0.0

    overlap = (overlap_end - overlap_start).days + 1
    union = (max(range_a[1], range_b[1]) - min(range_a[0], range_b[0])).days + 1
    return _clamp(overlap / union)


# ------------------------------------------------------------------ #
#  Composite score and ranking                                        #
# ------------------------------------------------------------------ #


def compute_composite_score(features: MatchFeatures) -> float:
    """Weighted sum of the match features, clamped to ``[0, 1]``.

    Missing or NaN features count as 0, except the date which falls back to
    the neutral 0.5.

    Args:
        features: Per-signal scores for one candidate.

    Returns:
        The composite score.
    """
    name = _normalize_score(features.name, 0.0)
    date_score = _normalize_score(features.date, NEUTRAL_DATE_SCORE)
    place = _normalize_score(features.place, 0.0)
    relationship = _normalize_score(features.relationship, 0.0)

    return _clamp(
        name * NAME_WEIGHT
        + date_score * DATE_WEIGHT
        + place * PLACE_WEIGHT
        + relationship * RELATIONSHIP_WEIGHT
    )


def rank_candidates(
    candidates: list[MatchCandidate],
    min_score: float = DEFAULT_MIN_SCORE,
    limit: int = DEFAULT_LIMIT,
) -> list[MatchCandidate]:
    """Score, filter and order candidates, best first.

    Candidates below ``min_score`` are dropped. Ties keep input order.
    The input candidates are not modified.
    """
    scored = [
        replace(candidate, score=compute_composite_score(candidate.features))
        for candidate in candidates
    ]
    kept = [candidate for candidate in scored if candidate.score >= min_score]
    kept.sort(key=lambda candidate: candidate.score, reverse=True)
    return kept[:limit]


def suggest_person_matches(
    person: "Person",
    indexer: "VaultIndexer",
    min_score: float = DEFAULT_MIN_SCORE,
    limit: int = DEFAULT_LIMIT,
) -> list[MatchCandidate]:
    """Rank indexed person records as possible duplicates of a session person.

    Each candidate's ``id`` is the record path and ``data`` its indexed name.
    """
    if not person.name or not person.name.strip():
        return []

    candidates = [
        MatchCandidate(
            id=entry.file.path,
            features=MatchFeatures(
                name=score_name(person.name, entry.name),
                date=NEUTRAL_DATE_SCORE,
            ),
            data=entry.name,
        )
        for entry in indexer.person_entries()
    ]
    ranked = rank_candidates(candidates, min_score=min_score, limit=limit)
    logger.debug(f"{len(ranked)} match suggestion(s) for {person.name!r}")
    return ranked


def _normalize_score(value: float | None, fallback: float) -> float:
    if value is None or math.isnan(value):
        return fallback
    return _clamp(value)


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return min(max(value, low), high)
