"""
Curriculum catalog for the French tutor.

- types: Level, ConceptType and the frozen curriculum dataclasses
- levels: declarative per-level content
- catalog: lookup and prefix-based concept classification
"""

from .catalog import (
    CURRICULUM,
    all_concept_ids,
    concept_type,
    curriculum_for,
    level_of_concept,
)
from .types import (
    ConceptType,
    GrammarConcept,
    Level,
    LevelCurriculum,
    VocabularyCluster,
)

__all__ = [
    "CURRICULUM",
    "all_concept_ids",
    "concept_type",
    "curriculum_for",
    "level_of_concept",
    "ConceptType",
    "GrammarConcept",
    "Level",
    "LevelCurriculum",
    "VocabularyCluster",
]
