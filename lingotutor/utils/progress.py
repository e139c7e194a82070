"""
Progress analytics helpers for dashboards and session memory.

Provides:
- Mastery summary statistics and histograms (scores on a 0-1 scale)
- Mastery grouped by concept type
- Daily learning streak
- Level progress (share of the level's concepts mastered)
- Rendering of session summaries used as conversation memory
"""

from __future__ import annotations

import math
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..curriculum import ConceptType, Level, all_concept_ids
from ..models.learner_profile import ConceptMastery
from ..models.session import ConversationSession


def mastery_histogram(mastery: Dict[str, float], bins: int = 10) -> List[Tuple[str, int]]:
    """
    Build histogram of mastery values grouped into equal-width bins.

    Args:
        mastery: Dict mapping concept keys to mastery scores (0-1)
        bins: Number of bins over [0, 1]

    Returns:
        List of (bin_label, count) tuples for non-empty bins, sorted by bin

    Example:
        >>> mastery_histogram({"vocab.greetings": 0.85, "grammar.etre": 0.42})
        [('0.4-0.5', 1), ('0.8-0.9', 1)]
    """
    if not mastery:
        return []

    counts: Dict[int, int] = {}
    for value in mastery.values():
        clamped = max(0.0, min(1.0, float(value)))
        # A score of exactly 1.0 goes in the top bin
        index = min(int(math.floor(clamped * bins)), bins - 1)
        counts[index] = counts.get(index, 0) + 1

    width = 1.0 / bins
    return [
        (f"{index * width:.1f}-{(index + 1) * width:.1f}", counts[index])
        for index in sorted(counts)
    ]


def mastery_summary(mastery: Dict[str, float]) -> Dict[str, float]:
    """
    Calculate summary statistics for mastery scores.

    Args:
        mastery: Dict mapping concept keys to mastery scores (0-1)

    Returns:
        Dict with mean, median, min, max, std_dev, count
    """
    if not mastery:
        return {
            "mean": 0.0,
            "median": 0.0,
            "min": 0.0,
            "max": 0.0,
            "std_dev": 0.0,
            "count": 0,
        }

    values = sorted(mastery.values())
    n = len(values)

    mean_val = sum(values) / n

    if n % 2 == 1:
        median_val = values[n // 2]
    else:
        median_val = (values[n // 2 - 1] + values[n // 2]) / 2.0

    variance = sum((v - mean_val) ** 2 for v in values) / n
    std_dev = math.sqrt(variance)

    return {
        "mean": round(mean_val, 3),
        "median": round(median_val, 3),
        "min": round(values[0], 3),
        "max": round(values[-1], 3),
        "std_dev": round(std_dev, 3),
        "count": n,
    }


def mastery_by_concept_type(masteries: Iterable[ConceptMastery]) -> Dict[str, List[str]]:
    """Group concept keys by concept type; every type is present, possibly empty."""
    grouped: Dict[str, List[str]] = {kind.value: [] for kind in ConceptType}
    for mastery in masteries:
        grouped[mastery.concept_type.value].append(mastery.concept_id)
    return grouped


def learning_streak(session_starts: Iterable[datetime], today: date, max_days: int = 365) -> int:
    """
    Consecutive days with at least one session, counting back from today.

    A day without sessions today does not break the streak; the count
    starts from yesterday instead.

    Example:
        Sessions today, yesterday and three days ago -> 2
    """
    days = {start.date() for start in session_starts}
    streak = 0
    for offset in range(max_days):
        day = today - timedelta(days=offset)
        if day in days:
            streak += 1
        elif offset > 0:
            break
    return streak


def level_progress(
    level: Level,
    masteries: Iterable[ConceptMastery],
    mastered_threshold: float = 0.7,
) -> Dict[str, int]:
    """
    Share of the level's concepts the learner has mastered.

    Returns:
        Dict with concepts_mastered, total_concepts_in_level, level_progress (0-100)
    """
    level_ids = set(all_concept_ids(level))
    mastered = sum(
        1
        for m in masteries
        if m.concept_id in level_ids and m.mastery_score >= mastered_threshold
    )
    total = len(level_ids)
    return {
        "concepts_mastered": mastered,
        "total_concepts_in_level": total,
        "level_progress": int(math.floor(mastered / total * 100 + 0.5)) if total else 0,
    }


def format_session_summary(session: ConversationSession) -> Optional[str]:
    """
    Render a summarised session as conversation memory.

    Returns:
        Multi-line text, or None when the session has no summary
    """
    summary = session.summary
    if summary is None:
        return None

    parts = [
        f"Session #{session.session_number} ({session.started_at.date().isoformat()})",
        f"Type: {session.session_type.value}",
        f"Topics: {summary.topics_covered}",
    ]
    if summary.vocabulary_introduced:
        parts.append(f"Vocabulary introduced: {summary.vocabulary_introduced}")
    if summary.grammar_practiced:
        parts.append(f"Grammar practiced: {summary.grammar_practiced}")
    if summary.errors_observed:
        parts.append(f"Errors observed: {summary.errors_observed}")
    if summary.overall_notes:
        parts.append(f"Notes: {summary.overall_notes}")
    return "\n".join(parts)


def recent_session_summaries(
    sessions: Sequence[ConversationSession], limit: int = 3
) -> List[str]:
    """
    Memory text for the `limit` most recent summarised sessions, oldest first.

    Args:
        sessions: Learner's sessions in any order
        limit: How many summaries to keep
    """
    summarised = sorted(
        (s for s in sessions if s.summary is not None),
        key=lambda s: (s.started_at, s.session_number),
        reverse=True,
    )[:limit]
    return [format_session_summary(s) for s in reversed(summarised)]
