"""
Curriculum Catalog: level -> curriculum lookup and concept classification.

Pure functions over immutable data. `concept_type` is the only place a
concept key is classified; the mastery updater and the catalog both go
through it so they can never disagree.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from .levels import ALL_LEVELS
from .types import ConceptType, Level, LevelCurriculum

# Checked in this order; anything unmatched is pragmatics
CONCEPT_PREFIXES: tuple[tuple[str, ConceptType], ...] = (
    ("grammar.", ConceptType.GRAMMAR),
    ("vocab.", ConceptType.VOCABULARY),
    ("pronunciation.", ConceptType.PRONUNCIATION),
    ("culture.", ConceptType.CULTURE),
)
FALLBACK_CONCEPT_TYPE = ConceptType.PRAGMATICS

_covered = {concept_type for _, concept_type in CONCEPT_PREFIXES} | {FALLBACK_CONCEPT_TYPE}
if _covered != set(ConceptType):
    raise RuntimeError(
        f"Concept classification does not cover: {set(ConceptType) - _covered}"
    )

CURRICULUM: Mapping[Level, LevelCurriculum] = MappingProxyType(
    {curriculum.level: curriculum for curriculum in ALL_LEVELS}
)

if set(CURRICULUM) != set(Level):
    raise RuntimeError(f"Curriculum missing levels: {set(Level) - set(CURRICULUM)}")


def curriculum_for(level: Level | str) -> LevelCurriculum:
    """
    Get the curriculum of a level.

    Args:
        level: Level member or its string value ("B1")

    Returns:
        LevelCurriculum for that level

    Raises:
        ValueError: If the level is not a known Level value
    """
    return CURRICULUM[Level(level)]


def all_concept_ids(level: Level | str) -> tuple[str, ...]:
    """Flattened concept keys of a level, in curriculum order."""
    return curriculum_for(level).concept_ids


def concept_type(concept_id: str) -> ConceptType:
    """Classify a concept key by prefix (grammar, vocab, pronunciation, culture, else pragmatics)."""
    for prefix, kind in CONCEPT_PREFIXES:
        if concept_id.startswith(prefix):
            return kind
    return FALLBACK_CONCEPT_TYPE


def level_of_concept(concept_id: str) -> Level | None:
    """The level whose curriculum declares this concept, if any."""
    for curriculum in ALL_LEVELS:
        if concept_id in curriculum.concept_ids:
            return curriculum.level
    return None
