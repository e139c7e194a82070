"""
Session Analyzer - post-session assessment by the language model.

Produces the session summary text fields, per-concept scores and suggested
focus concepts from a finished conversation transcript.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from langchain_core.language_models import BaseChatModel
from langchain_core.prompts import PromptTemplate

from ..config import config
from ..models.session import SessionSummary
from ..utils.validation import SessionAnalysisValidator
from .llm import build_chat_model, invoke_for_json

PUBLIC_FAILURE_MESSAGE = "Failed to analyze session"
NO_FOCUS_TEXT = "No specific focus concepts - identify any concepts practiced"


def _as_text(value: Any) -> str:
    """Free-text field that the model may return as a list or null."""
    if value is None:
        return ""
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    return str(value)


@dataclass
class SessionAnalysis:
    """
    Parsed session analysis.

    Attributes:
        topics_covered, vocabulary_introduced, grammar_practiced,
        errors_observed, overall_notes: Summary text
        concept_scores: Raw concept score entries as returned (validated per entry later)
        suggested_focus: Concept keys to focus on next
    """

    topics_covered: str
    vocabulary_introduced: str = ""
    grammar_practiced: str = ""
    errors_observed: str = ""
    overall_notes: str = ""
    concept_scores: list[Any] = field(default_factory=list)
    suggested_focus: list[str] = field(default_factory=list)

    @classmethod
    def from_response(cls, data: dict) -> SessionAnalysis:
        return cls(
            topics_covered=_as_text(data.get("topicsCovered")),
            vocabulary_introduced=_as_text(data.get("vocabularyIntroduced")),
            grammar_practiced=_as_text(data.get("grammarPracticed")),
            errors_observed=_as_text(data.get("errorsObserved")),
            overall_notes=_as_text(data.get("overallNotes")),
            concept_scores=list(data.get("conceptScores") or []),
            suggested_focus=list(data.get("suggestedFocus") or []),
        )

    def to_summary(self, applied_scores: Optional[dict[str, float]] = None) -> SessionSummary:
        """Summary record; `applied_scores` are the scores that reached mastery."""
        return SessionSummary(
            topics_covered=self.topics_covered,
            vocabulary_introduced=self.vocabulary_introduced,
            grammar_practiced=self.grammar_practiced,
            errors_observed=self.errors_observed,
            overall_notes=self.overall_notes,
            concept_scores=dict(applied_scores or {}),
            suggested_focus=list(self.suggested_focus),
        )

    def to_dict(self) -> dict:
        return {
            "topics_covered": self.topics_covered,
            "vocabulary_introduced": self.vocabulary_introduced,
            "grammar_practiced": self.grammar_practiced,
            "errors_observed": self.errors_observed,
            "overall_notes": self.overall_notes,
            "concept_scores": list(self.concept_scores),
            "suggested_focus": list(self.suggested_focus),
        }


class SessionAnalyzer:
    """
    Asks the analysis model for a structured review of one session.

    The response must contain one JSON object matching
    session_analysis.schema.json; surrounding prose is tolerated.
    """

    def __init__(
        self,
        llm: Optional[BaseChatModel] = None,
        validator: Optional[SessionAnalysisValidator] = None,
    ):
        """
        Initialize session analyzer.

        Args:
            llm: Chat model (built from config with the analysis model if None)
            validator: Schema validator for responses
        """
        self.llm = llm or build_chat_model(
            config.model.analysis_model, config.model.analysis_temperature
        )
        self.validator = validator or SessionAnalysisValidator()

        self.analysis_prompt = PromptTemplate(
            input_variables=["focus_concepts", "conversation"],
            template="""You are an expert French language tutor analyzing a lesson session. Review the conversation and provide a structured analysis.

Respond in EXACTLY this JSON format:
{{
  "topicsCovered": "Brief description of what was discussed",
  "vocabularyIntroduced": "Comma-separated list of new French words/phrases used",
  "grammarPracticed": "Comma-separated list of grammar structures practiced",
  "errorsObserved": "Description of notable errors the learner made",
  "overallNotes": "Brief assessment of the learner's performance in this session",
  "conceptScores": [
    {{
      "conceptId": "string matching one of the focus concepts",
      "score": 0.0-1.0,
      "notes": "Brief note on performance for this concept"
    }}
  ],
  "suggestedFocus": ["conceptId1", "conceptId2"]
}}

Focus concepts for this session (score each one that was practiced):
{focus_concepts}

Be specific and constructive. Score 0.0 means no evidence of understanding, 0.5 means partial, 1.0 means demonstrated mastery.

--- CONVERSATION ---
{conversation}
--- END CONVERSATION ---""",
        )

    def build_prompt(self, transcript: str, focus_concepts: Sequence[str]) -> str:
        focus_text = ", ".join(focus_concepts) if focus_concepts else NO_FOCUS_TEXT
        return self.analysis_prompt.format(focus_concepts=focus_text, conversation=transcript)

    def analyze(self, transcript: str, focus_concepts: Sequence[str] = ()) -> SessionAnalysis:
        """
        Analyze a finished session.

        Args:
            transcript: Flattened "Learner:"/"Tutor:" conversation
            focus_concepts: The session's frozen focus concepts

        Returns:
            SessionAnalysis

        Raises:
            OracleError: The model call failed
            AnalysisParseError: The response had no valid analysis JSON
        """
        data = invoke_for_json(
            self.llm,
            self.build_prompt(transcript, focus_concepts),
            self.validator,
            PUBLIC_FAILURE_MESSAGE,
            "session analysis",
        )
        return SessionAnalysis.from_response(data)
