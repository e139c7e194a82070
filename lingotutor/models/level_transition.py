"""
Level Transition Evaluator: promotion/demotion from aggregate mastery.

Statistics are computed over the current level's concept set only:
- coverage = practiced / total concepts in the level
- average mastery over practiced concepts (0 when none)
- mastered = practiced concepts with mastery >= 0.7

Promotion is checked first; demotion is only considered when no promotion
was decided. The top level never promotes and the bottom level never demotes.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Literal, Optional, Sequence

from ..config import TutoringConfig, config
from ..curriculum import Level
from .learner_profile import ConceptMastery

LevelChange = Literal["up", "down", "none"]


def _percent(fraction: float) -> int:
    """Half-up rounding to a whole percentage."""
    return int(math.floor(fraction * 100 + 0.5))


@dataclass(frozen=True)
class LevelStatistics:
    total_concepts: int
    concepts_practiced: int
    mastered_count: int
    coverage: float
    average_mastery: float

    @property
    def mastered_fraction(self) -> float:
        if self.total_concepts == 0:
            return 0.0
        return self.mastered_count / self.total_concepts

    def to_dict(self) -> dict:
        return {
            "total_concepts": self.total_concepts,
            "concepts_practiced": self.concepts_practiced,
            "mastered_count": self.mastered_count,
            "coverage": _percent(self.coverage),
            "average_mastery": _percent(self.average_mastery),
            "mastered_fraction": _percent(self.mastered_fraction),
        }


@dataclass(frozen=True)
class LevelDecision:
    """
    Evaluator output, returned whether or not the level changes.

    Attributes:
        current_level: Level evaluated
        new_level: Level after the decision (same as current when unchanged)
        level_change: "up", "down" or "none"
        reason: Human-readable reason embedding the percentages ("" when unchanged)
        stats: Statistics the decision was made from
    """

    current_level: Level
    new_level: Level
    level_change: LevelChange
    reason: str
    stats: LevelStatistics

    @property
    def changed(self) -> bool:
        return self.level_change != "none"

    def to_dict(self) -> dict:
        return {
            "current_level": self.current_level.value,
            "new_level": self.new_level.value,
            "level_change": self.level_change,
            "reason": self.reason,
            "stats": self.stats.to_dict(),
        }


def compute_level_statistics(
    level_concept_ids: Sequence[str],
    masteries: Iterable[ConceptMastery],
    settings: Optional[TutoringConfig] = None,
) -> LevelStatistics:
    """Aggregate mastery over the level's concepts; records outside the level are ignored."""
    settings = settings or config.tutoring
    level_ids = set(level_concept_ids)
    scoped = {m.concept_id: m for m in masteries if m.concept_id in level_ids}

    total = len(level_ids)
    practiced = len(scoped)
    scores = [m.mastery_score for m in scoped.values()]
    average = sum(scores) / practiced if practiced else 0.0
    mastered = sum(1 for score in scores if score >= settings.mastered_threshold)

    return LevelStatistics(
        total_concepts=total,
        concepts_practiced=practiced,
        mastered_count=mastered,
        coverage=practiced / total if total else 0.0,
        average_mastery=average,
    )


class LevelTransitionEvaluator:
    """Decides promote / demote / stay for one learner's current level."""

    def __init__(self, settings: Optional[TutoringConfig] = None):
        self.settings = settings or config.tutoring

    def should_promote(self, level: Level, stats: LevelStatistics) -> bool:
        s = self.settings
        return (
            level.next() is not None
            and stats.coverage >= s.promote_min_coverage
            and stats.average_mastery >= s.promote_min_average
            and stats.mastered_fraction >= s.promote_min_mastered_fraction
        )

    def should_demote(self, level: Level, stats: LevelStatistics) -> bool:
        s = self.settings
        return (
            level.previous() is not None
            and stats.coverage >= s.demote_min_coverage
            and stats.average_mastery < s.demote_max_average
            and stats.concepts_practiced >= s.demote_min_practiced
        )

    def decide(self, level: Level | str, stats: LevelStatistics) -> LevelDecision:
        """Apply the thresholds to precomputed statistics."""
        level = Level(level)

        if self.should_promote(level, stats):
            return LevelDecision(
                current_level=level,
                new_level=level.next(),
                level_change="up",
                reason=(
                    f"Achieved {_percent(stats.coverage)}% coverage with "
                    f"{_percent(stats.average_mastery)}% average mastery at {level}"
                ),
                stats=stats,
            )

        if self.should_demote(level, stats):
            return LevelDecision(
                current_level=level,
                new_level=level.previous(),
                level_change="down",
                reason=(
                    f"Struggling at {level} with {_percent(stats.average_mastery)}% "
                    f"average mastery after {stats.concepts_practiced} concepts practiced"
                ),
                stats=stats,
            )

        return LevelDecision(
            current_level=level,
            new_level=level,
            level_change="none",
            reason="",
            stats=stats,
        )

    def evaluate(
        self,
        level: Level | str,
        level_concept_ids: Sequence[str],
        masteries: Iterable[ConceptMastery],
    ) -> LevelDecision:
        """
        Compute statistics for the level and decide.

        Args:
            level: Learner's current level
            level_concept_ids: Full concept key list of that level
            masteries: Learner's mastery records (other levels are ignored)

        Returns:
            LevelDecision with the statistics that produced it
        """
        stats = compute_level_statistics(level_concept_ids, masteries, self.settings)
        return self.decide(level, stats)
