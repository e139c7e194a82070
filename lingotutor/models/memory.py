"""
Memory Selector: picks the concepts a session should emphasize.

Mixes two sources, review first:
- Concepts due for review, from any level, ranked by a spaced-repetition priority
- Concepts of the current level never seen before, in curriculum order

PLACEMENT sessions never get focus concepts. An empty result means
"free conversation mode" and is not an error.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional, Sequence

from ..config import TutoringConfig, config
from .learner_profile import ConceptMastery

SECONDS_PER_DAY = 86400.0


@dataclass(frozen=True)
class ReviewCandidate:
    """A mastery record that is due, with its computed schedule."""

    concept_id: str
    mastery_score: float
    days_since_practice: float
    interval_days: float
    priority: float

    def to_dict(self) -> dict:
        return {
            "concept_id": self.concept_id,
            "mastery_score": self.mastery_score,
            "days_since_practice": self.days_since_practice,
            "interval_days": self.interval_days,
            "priority": self.priority,
        }


def review_interval_days(mastery_score: float, settings: Optional[TutoringConfig] = None) -> float:
    """
    Days between reviews for a given mastery: max(1, (m * 10) ^ 1.5).

    0.2 -> ~2.8 days, 0.5 -> ~11 days, 0.9 -> ~27 days.
    """
    settings = settings or config.tutoring
    return max(
        settings.min_review_interval_days,
        (mastery_score * 10) ** settings.review_interval_exponent,
    )


def days_since_practice(
    last_practiced: Optional[datetime], now: datetime, settings: Optional[TutoringConfig] = None
) -> float:
    """Fractional days since last practice; never practiced counts as maximally overdue."""
    settings = settings or config.tutoring
    if last_practiced is None:
        return settings.never_practiced_days
    return (now - last_practiced).total_seconds() / SECONDS_PER_DAY


def review_candidate(
    mastery: ConceptMastery, now: datetime, settings: Optional[TutoringConfig] = None
) -> Optional[ReviewCandidate]:
    """Schedule one record; returns None when it is not yet due."""
    settings = settings or config.tutoring
    interval = review_interval_days(mastery.mastery_score, settings)
    days = days_since_practice(mastery.last_practiced, now, settings)
    if days < interval:
        return None
    priority = (1 - mastery.mastery_score) * settings.low_mastery_weight + days / interval
    return ReviewCandidate(
        concept_id=mastery.concept_id,
        mastery_score=mastery.mastery_score,
        days_since_practice=days,
        interval_days=interval,
        priority=priority,
    )


def due_for_review(
    masteries: Iterable[ConceptMastery],
    now: datetime,
    limit: Optional[int] = None,
    settings: Optional[TutoringConfig] = None,
) -> list[str]:
    """
    Concept keys due for review, highest priority first.

    Args:
        masteries: All of the learner's mastery records (any level)
        now: Reference time
        limit: Max keys returned (defaults to the review focus limit)
        settings: Tutoring constants (defaults to the global config)

    Returns:
        Up to `limit` concept keys
    """
    settings = settings or config.tutoring
    limit = settings.review_focus_limit if limit is None else limit

    candidates = [
        candidate
        for candidate in (review_candidate(m, now, settings) for m in masteries)
        if candidate is not None
    ]
    # Ties: lower mastery, then key, so the order never depends on storage order
    candidates.sort(key=lambda c: (-c.priority, c.mastery_score, c.concept_id))
    return [c.concept_id for c in candidates[:limit]]


def new_concepts(
    level_concept_ids: Sequence[str],
    known_concept_ids: Iterable[str],
    limit: Optional[int] = None,
    settings: Optional[TutoringConfig] = None,
) -> list[str]:
    """Level concepts with no mastery record at all, in curriculum order."""
    settings = settings or config.tutoring
    limit = settings.new_focus_limit if limit is None else limit
    known = set(known_concept_ids)
    unseen = [concept_id for concept_id in level_concept_ids if concept_id not in known]
    return unseen[:limit]


def select_focus_concepts(
    masteries: Sequence[ConceptMastery],
    level_concept_ids: Sequence[str],
    now: datetime,
    settings: Optional[TutoringConfig] = None,
) -> list[str]:
    """Up to 3 review concepts followed by up to 2 new ones."""
    settings = settings or config.tutoring
    review = due_for_review(masteries, now, settings.review_focus_limit, settings)
    fresh = new_concepts(
        level_concept_ids,
        (m.concept_id for m in masteries),
        settings.new_focus_limit,
        settings,
    )
    return review + fresh
