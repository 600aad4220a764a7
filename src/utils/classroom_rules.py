"""Rules shared by the memory and database classroom stores.

Both stores delegate code generation, deck swaps, practice counters, ranking
and progress figures to these functions so the two backends stay
interchangeable for the route layer.
"""

import secrets
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

import pytz

from config import (
    CLASSROOM_CODE_ALPHABET,
    CLASSROOM_CODE_LENGTH,
    MASTERY_ACCURACY_THRESHOLD,
)

Timestamp = Union[datetime, str, None]


def utc_now() -> datetime:
    return datetime.now(pytz.utc)


def to_iso(value: Timestamp) -> Optional[str]:
    """Normalize a datetime or ISO string to an ISO-8601 string."""
    if value is None or isinstance(value, str):
        return value
    return value.isoformat()


def from_iso(value: Timestamp) -> Optional[datetime]:
    """Parse an ISO-8601 string into an aware UTC datetime."""
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = pytz.utc.localize(parsed)
    return parsed


def generate_code() -> str:
    """Draw a random classroom code such as ``"K7QX"``."""
    return "".join(
        secrets.choice(CLASSROOM_CODE_ALPHABET) for _ in range(CLASSROOM_CODE_LENGTH)
    )


def elapsed_seconds(start: Timestamp, end: datetime) -> int:
    """Whole seconds between ``start`` and ``end``, never negative."""
    delta = end - from_iso(start)
    return max(0, int(delta.total_seconds()))


def check_swap(
    name_a: str,
    deck_a: Optional[List[str]],
    word_a: str,
    name_b: str,
    deck_b: Optional[List[str]],
    word_b: str,
) -> Optional[str]:
    """Return the error message for an invalid swap, or None if it may proceed."""
    if deck_a is None or deck_b is None:
        return "One or both students not found"
    if name_a == name_b:
        return "Cannot swap words with yourself"
    if word_a not in deck_a:
        return f"{name_a} does not own the word '{word_a}'"
    if word_b not in deck_b:
        return f"{name_b} does not own the word '{word_b}'"
    return None


def replace_word(deck: List[str], offered: str, received: str) -> List[str]:
    """Put ``received`` where ``offered`` sat in ``deck``.

    Any other copy of ``received`` is dropped so the deck never holds a word
    twice. The input list is not modified.
    """
    index = deck.index(offered)
    result = []
    for position, word in enumerate(deck):
        if position == index:
            result.append(received)
        elif word != received:
            result.append(word)
    return result


def swap_decks(
    deck_a: List[str], word_a: str, deck_b: List[str], word_b: str
) -> Tuple[List[str], List[str]]:
    """Compute both decks after A gives ``word_a`` and B gives ``word_b``."""
    return replace_word(deck_a, word_a, word_b), replace_word(deck_b, word_b, word_a)


def add_practice_result(
    word_stats: Dict[str, Dict[str, int]], word: str, correct: bool
) -> Dict[str, Dict[str, int]]:
    """Return a copy of ``word_stats`` with one more correct or wrong answer."""
    updated = {key: dict(value) for key, value in (word_stats or {}).items()}
    stats = updated.setdefault(word, {"correct": 0, "wrong": 0})
    stats["correct" if correct else "wrong"] += 1
    return updated


def build_leaderboard(students: Iterable[Any]) -> List[Dict[str, Any]]:
    """Rank students by accumulated time, most first.

    Ties keep the order of ``students``; ``sorted`` is stable, so callers pass
    students in join order.

    Args:
        students: Objects exposing ``name``, ``total_time``, ``session_start``
            and ``last_active``.

    Returns:
        Leaderboard entries with a 1-based ``rank``.
    """
    ranked = sorted(students, key=lambda s: -(s.total_time or 0))
    leaderboard = []
    for index, student in enumerate(ranked):
        total_time = student.total_time or 0
        leaderboard.append(
            {
                "rank": index + 1,
                "name": student.name,
                "total_time": total_time,
                "total_minutes": total_time // 60,
                "total_seconds": total_time % 60,
                "is_active": student.session_start is not None,
                "last_active": to_iso(student.last_active),
            }
        )
    return leaderboard


def find_rank(leaderboard: List[Dict[str, Any]], name: str) -> Optional[int]:
    for entry in leaderboard:
        if entry["name"] == name:
            return entry["rank"]
    return None


def compute_mastery(
    word_stats: Dict[str, Dict[str, int]],
    threshold: float = MASTERY_ACCURACY_THRESHOLD,
) -> int:
    """Percentage of attempted words answered correctly at least ``threshold`` of the time."""
    attempted = 0
    mastered = 0
    for stats in (word_stats or {}).values():
        total = stats.get("correct", 0) + stats.get("wrong", 0)
        if total == 0:
            continue
        attempted += 1
        if stats.get("correct", 0) / total >= threshold:
            mastered += 1
    if attempted == 0:
        return 0
    return round(mastered / attempted * 100)


def count_study_days(start_times: Iterable[Timestamp]) -> int:
    """Number of distinct UTC calendar dates on which a session started."""
    days = set()
    for start in start_times:
        parsed = from_iso(start)
        if parsed is not None:
            days.add(parsed.astimezone(pytz.utc).date())
    return len(days)
