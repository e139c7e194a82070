"""
Learner-scoped long-lived state.

This module provides the records the tutoring core reads and updates:
- Learner registry entry (display name used by the prompt composer)
- Skill profile: current level plus four sub-scores
- Per-concept mastery with practice count and last-practiced time
- Append-only level history
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from ..curriculum import ConceptType, Level, concept_type
from .session import _format_time, _parse_time, utc_now

SUB_SCORES = ("comprehension", "vocabulary", "grammar", "fluency")


def clamp_unit(value: float) -> float:
    """Clamp a score to [0, 1]."""
    return max(0.0, min(1.0, float(value)))


@dataclass
class Learner:
    name: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)
    learner_id: str = field(default_factory=lambda: f"learner-{uuid.uuid4()}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "learner_id": self.learner_id,
            "name": self.name,
            "created_at": _format_time(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Learner:
        return cls(
            name=data.get("name"),
            created_at=_parse_time(data.get("created_at")) or utc_now(),
            learner_id=data["learner_id"],
        )


@dataclass
class SkillProfile:
    """
    One per learner, created at placement completion or skip.

    Attributes:
        learner_id: Owner
        current_level: Level the learner is taught at
        comprehension_score, vocabulary_score, grammar_score, fluency_score: 0-1
        placement_completed_at: When placement finished (or was skipped)
    """

    learner_id: str
    current_level: Level = Level.A0
    comprehension_score: float = 0.0
    vocabulary_score: float = 0.0
    grammar_score: float = 0.0
    fluency_score: float = 0.0
    placement_completed_at: Optional[datetime] = None
    updated_at: datetime = field(default_factory=utc_now)

    def __post_init__(self):
        self.current_level = Level(self.current_level)
        for name in SUB_SCORES:
            attr = f"{name}_score"
            setattr(self, attr, clamp_unit(getattr(self, attr)))

    def sub_scores(self) -> dict[str, float]:
        return {name: getattr(self, f"{name}_score") for name in SUB_SCORES}

    def to_dict(self) -> dict[str, Any]:
        return {
            "learner_id": self.learner_id,
            "current_level": self.current_level.value,
            **{f"{name}_score": score for name, score in self.sub_scores().items()},
            "placement_completed_at": _format_time(self.placement_completed_at),
            "updated_at": _format_time(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SkillProfile:
        return cls(
            learner_id=data["learner_id"],
            current_level=Level(data["current_level"]),
            comprehension_score=data.get("comprehension_score", 0.0),
            vocabulary_score=data.get("vocabulary_score", 0.0),
            grammar_score=data.get("grammar_score", 0.0),
            fluency_score=data.get("fluency_score", 0.0),
            placement_completed_at=_parse_time(data.get("placement_completed_at")),
            updated_at=_parse_time(data.get("updated_at")) or utc_now(),
        )


@dataclass
class ConceptMastery:
    """
    Per (learner, concept) mastery record. Never deleted.

    `concept_type` is always derived from the key prefix, never supplied.
    """

    learner_id: str
    concept_id: str
    mastery_score: float = 0.0
    practice_count: int = 0
    last_practiced: Optional[datetime] = None
    concept_type: ConceptType = field(init=False)

    def __post_init__(self):
        self.mastery_score = clamp_unit(self.mastery_score)
        self.concept_type = concept_type(self.concept_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "learner_id": self.learner_id,
            "concept_id": self.concept_id,
            "concept_type": self.concept_type.value,
            "mastery_score": self.mastery_score,
            "practice_count": self.practice_count,
            "last_practiced": _format_time(self.last_practiced),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ConceptMastery:
        return cls(
            learner_id=data["learner_id"],
            concept_id=data["concept_id"],
            mastery_score=data.get("mastery_score", 0.0),
            practice_count=data.get("practice_count", 0),
            last_practiced=_parse_time(data.get("last_practiced")),
        )


@dataclass(frozen=True)
class LevelHistoryEntry:
    """One level transition. Append-only."""

    learner_id: str
    from_level: Level
    to_level: Level
    reason: str
    created_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "learner_id": self.learner_id,
            "from_level": Level(self.from_level).value,
            "to_level": Level(self.to_level).value,
            "reason": self.reason,
            "created_at": _format_time(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LevelHistoryEntry:
        return cls(
            learner_id=data["learner_id"],
            from_level=Level(data["from_level"]),
            to_level=Level(data["to_level"]),
            reason=data["reason"],
            created_at=_parse_time(data.get("created_at")) or utc_now(),
        )
