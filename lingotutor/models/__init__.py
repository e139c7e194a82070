"""
Data models for the tutoring core.

This module contains:
- Learner, SkillProfile, ConceptMastery, LevelHistoryEntry: learner-scoped state
- ConversationSession, ConversationMessage, SessionSummary: tutoring interactions
- memory: focus-concept selection (spaced review + new concepts)
- MasteryUpdater: folds analysis scores into mastery
- LevelTransitionEvaluator: promotion/demotion decisions
"""

from .learner_profile import ConceptMastery, Learner, LevelHistoryEntry, SkillProfile
from .level_transition import LevelDecision, LevelStatistics, LevelTransitionEvaluator
from .mastery import MasteryChange, MasteryUpdater, MasteryUpdateResult
from .memory import due_for_review, new_concepts, select_focus_concepts
from .session import (
    ConversationMessage,
    ConversationSession,
    MessageRole,
    SessionSummary,
    SessionType,
)

__all__ = [
    "ConceptMastery",
    "Learner",
    "LevelHistoryEntry",
    "SkillProfile",
    "LevelDecision",
    "LevelStatistics",
    "LevelTransitionEvaluator",
    "MasteryChange",
    "MasteryUpdater",
    "MasteryUpdateResult",
    "due_for_review",
    "new_concepts",
    "select_focus_concepts",
    "ConversationMessage",
    "ConversationSession",
    "MessageRole",
    "SessionSummary",
    "SessionType",
]
