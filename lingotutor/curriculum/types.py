"""
Curriculum types: levels, concept categories, and per-level content.

All curriculum objects are frozen; the catalog is assembled once at import
and treated as read-only for the life of the process.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Level(str, Enum):
    """CEFR-style proficiency stages, declared lowest to highest."""

    A0 = "A0"
    A1 = "A1"
    A2 = "A2"
    B1 = "B1"
    B2 = "B2"
    C1 = "C1"
    C2 = "C2"

    @classmethod
    def ordered(cls) -> tuple[Level, ...]:
        return tuple(cls)

    @classmethod
    def lowest(cls) -> Level:
        return cls.A0

    @classmethod
    def highest(cls) -> Level:
        return cls.C2

    @property
    def rank(self) -> int:
        return Level.ordered().index(self)

    def next(self) -> Optional[Level]:
        """The level one stage up, or None at the top."""
        levels = Level.ordered()
        if self.rank + 1 < len(levels):
            return levels[self.rank + 1]
        return None

    def previous(self) -> Optional[Level]:
        """The level one stage down, or None at the bottom."""
        if self.rank == 0:
            return None
        return Level.ordered()[self.rank - 1]

    def __str__(self) -> str:
        return self.value


class ConceptType(str, Enum):
    """Category of a concept, derived from its key prefix."""

    GRAMMAR = "GRAMMAR"
    VOCABULARY = "VOCABULARY"
    PRONUNCIATION = "PRONUNCIATION"
    CULTURE = "CULTURE"
    PRAGMATICS = "PRAGMATICS"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class VocabularyCluster:
    """A themed word list taught as one concept."""

    concept_id: str
    name: str
    words: tuple[str, ...]


@dataclass(frozen=True)
class GrammarConcept:
    """A grammar point with description and example utterances."""

    concept_id: str
    name: str
    description: str
    examples: tuple[str, ...] = ()


@dataclass(frozen=True)
class LevelCurriculum:
    """
    Everything taught at one level.

    Attributes:
        level: The level this curriculum belongs to
        label: Short human label ("Beginner")
        description: Can-do description used in the level prompt
        language_balance: Target/native language mix guidance
        vocabulary_clusters: Ordered vocabulary concepts
        grammar_concepts: Ordered grammar concepts (may be empty)
        listening_tasks, reading_tasks, speaking_tasks, writing_tasks: Skill tasks
        mastery_evidence: Observable signs the level is mastered
        concept_ids: Flattened, de-duplicated concept keys in curriculum order
    """

    level: Level
    label: str
    description: str
    language_balance: str
    vocabulary_clusters: tuple[VocabularyCluster, ...]
    grammar_concepts: tuple[GrammarConcept, ...]
    listening_tasks: tuple[str, ...] = ()
    reading_tasks: tuple[str, ...] = ()
    speaking_tasks: tuple[str, ...] = ()
    writing_tasks: tuple[str, ...] = ()
    mastery_evidence: tuple[str, ...] = ()

    @property
    def concept_ids(self) -> tuple[str, ...]:
        """Grammar first, then vocabulary; no duplicates."""
        ordered = [g.concept_id for g in self.grammar_concepts]
        ordered += [c.concept_id for c in self.vocabulary_clusters]
        return tuple(dict.fromkeys(ordered))

    def find_cluster(self, concept_id: str) -> Optional[VocabularyCluster]:
        return next(
            (c for c in self.vocabulary_clusters if c.concept_id == concept_id), None
        )

    def find_grammar(self, concept_id: str) -> Optional[GrammarConcept]:
        return next(
            (g for g in self.grammar_concepts if g.concept_id == concept_id), None
        )
