"""
Language-model agents for the tutoring core.

This module contains LangChain-based agents (the oracle boundary):
- Tutor conversation (streamed replies)
- Session analysis (summary, concept scores, suggested focus)
- Placement assessment (starting level and skill sub-scores)

Note: focus selection, mastery updates and level decisions live in
lingotutor/models (pure logic, not agents)
"""

from .llm import build_chat_model, invoke_for_json
from .placement_assessor import PlacementAssessment, PlacementAssessor
from .session_analyzer import SessionAnalysis, SessionAnalyzer
from .tutor_agent import TutorAgent, to_chat_messages

__all__ = [
    "build_chat_model",
    "invoke_for_json",
    "PlacementAssessment",
    "PlacementAssessor",
    "SessionAnalysis",
    "SessionAnalyzer",
    "TutorAgent",
    "to_chat_messages",
]
