"""
Mastery Updater: folds session-analysis concept scores into persistent mastery.

- First observation: mastery = score * 0.7 (a single data point is dampened)
- Later observations: exponential moving average, 0.3 * score + 0.7 * existing
- Every processed pair increments practice_count by exactly one
- Invalid pairs are skipped one by one; siblings are still applied
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from numbers import Real
from typing import Any, Callable, Iterable, Mapping, Optional, Union

from ..config import TutoringConfig, config
from .learner_profile import ConceptMastery, clamp_unit
from .session import utc_now

logger = logging.getLogger(__name__)

ConceptScores = Union[Mapping[str, Any], Iterable[Mapping[str, Any]]]


def initial_mastery(score: float, settings: Optional[TutoringConfig] = None) -> float:
    settings = settings or config.tutoring
    return clamp_unit(score * settings.first_observation_discount)


def blend_mastery(existing: float, score: float, settings: Optional[TutoringConfig] = None) -> float:
    settings = settings or config.tutoring
    alpha = settings.ema_alpha
    return clamp_unit(alpha * score + (1 - alpha) * existing)


@dataclass(frozen=True)
class MasteryChange:
    """Outcome of one applied (concept, score) pair."""

    concept_id: str
    observed_score: float
    previous_score: Optional[float]
    new_score: float
    practice_count: int
    created: bool

    def to_dict(self) -> dict:
        return {
            "concept_id": self.concept_id,
            "observed_score": self.observed_score,
            "previous_score": self.previous_score,
            "new_score": self.new_score,
            "practice_count": self.practice_count,
            "created": self.created,
        }


@dataclass
class MasteryUpdateResult:
    """Applied changes plus the raw entries that were skipped."""

    changes: list[MasteryChange] = field(default_factory=list)
    skipped: list[Any] = field(default_factory=list)

    @property
    def updated_concepts(self) -> list[str]:
        return [c.concept_id for c in self.changes]

    def to_dict(self) -> dict:
        return {
            "changes": [c.to_dict() for c in self.changes],
            "skipped": [repr(entry) for entry in self.skipped],
        }


def normalize_concept_scores(concept_scores: ConceptScores) -> list[tuple[Any, Any, Any]]:
    """
    Turn either {"concept": score} or [{"conceptId"/"concept_id": ..., "score": ...}]
    into (raw_entry, concept_id, score) triples without validating them.
    """
    if isinstance(concept_scores, Mapping):
        return [((key, value), key, value) for key, value in concept_scores.items()]

    triples = []
    for entry in concept_scores:
        if isinstance(entry, Mapping):
            concept_id = entry.get("concept_id", entry.get("conceptId"))
            triples.append((entry, concept_id, entry.get("score")))
        else:
            triples.append((entry, None, None))
    return triples


def _valid_pair(concept_id: Any, score: Any) -> bool:
    if not isinstance(concept_id, str) or not concept_id.strip():
        return False
    if isinstance(score, bool) or not isinstance(score, Real):
        return False
    return math.isfinite(score)


class MasteryUpdater:
    """
    Applies concept scores through the store's atomic read-modify-write.

    Args:
        store: TutorStore (or anything with update_concept_mastery)
        settings: Tutoring constants (defaults to the global config)
        clock: Returns the current aware datetime
    """

    def __init__(
        self,
        store,
        settings: Optional[TutoringConfig] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.settings = settings or config.tutoring
        self.clock = clock

    def _updater(
        self, learner_id: str, concept_id: str, score: float, now: datetime, seen: dict
    ):
        def apply(existing: Optional[ConceptMastery]) -> ConceptMastery:
            seen["previous"] = existing.mastery_score if existing else None
            if existing is None:
                return ConceptMastery(
                    learner_id=learner_id,
                    concept_id=concept_id,
                    mastery_score=initial_mastery(score, self.settings),
                    practice_count=1,
                    last_practiced=now,
                )
            existing.mastery_score = blend_mastery(existing.mastery_score, score, self.settings)
            existing.practice_count += 1
            existing.last_practiced = now
            return existing

        return apply

    def apply(self, learner_id: str, concept_scores: ConceptScores) -> MasteryUpdateResult:
        """
        Update mastery for every valid (concept, score) pair.

        Args:
            learner_id: Owner of the mastery records
            concept_scores: Mapping of concept key -> score, or list of pair dicts

        Returns:
            MasteryUpdateResult with one change per applied pair
        """
        result = MasteryUpdateResult()
        now = self.clock()

        for raw, concept_id, score in normalize_concept_scores(concept_scores):
            if not _valid_pair(concept_id, score):
                logger.warning("Skipping invalid concept score for %s: %r", learner_id, raw)
                result.skipped.append(raw)
                continue

            score = float(score)
            seen: dict = {}
            updated = self.store.update_concept_mastery(
                learner_id, concept_id, self._updater(learner_id, concept_id, score, now, seen)
            )
            previous = seen.get("previous")
            result.changes.append(
                MasteryChange(
                    concept_id=concept_id,
                    observed_score=score,
                    previous_score=previous,
                    new_score=updated.mastery_score,
                    practice_count=updated.practice_count,
                    created=previous is None,
                )
            )
            logger.debug(
                "Mastery %s/%s: %s -> %.3f (count %d)",
                learner_id,
                concept_id,
                "new" if previous is None else f"{previous:.3f}",
                updated.mastery_score,
                updated.practice_count,
            )

        logger.info(
            "Applied %d concept scores for %s (%d skipped)",
            len(result.changes),
            learner_id,
            len(result.skipped),
        )
        return result
