"""
Placement Assessor - decides a learner's starting level from a placement conversation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from langchain_core.language_models import BaseChatModel
from langchain_core.prompts import PromptTemplate

from ..config import config
from ..curriculum import Level
from ..utils.validation import PlacementAnalysisValidator
from .llm import build_chat_model, invoke_for_json

PUBLIC_FAILURE_MESSAGE = "Failed to analyze placement"


@dataclass
class PlacementAssessment:
    """
    Result of a placement analysis.

    Attributes:
        level: Placed level
        confidence: Assessor confidence (0-1)
        comprehension, vocabulary, grammar, fluency: Skill sub-scores (0-1)
        cultural_awareness: Reported but not stored on the skill profile
        reasoning: Why this level was chosen
        strengths: Observed strengths
        areas_to_improve: Observed weaknesses
    """

    level: Level
    comprehension: float
    vocabulary: float
    grammar: float
    fluency: float
    confidence: Optional[float] = None
    cultural_awareness: Optional[float] = None
    reasoning: str = ""
    strengths: list[str] = field(default_factory=list)
    areas_to_improve: list[str] = field(default_factory=list)

    @classmethod
    def from_response(cls, data: dict) -> PlacementAssessment:
        return cls(
            level=Level(data["level"]),
            comprehension=float(data["comprehension"]),
            vocabulary=float(data["vocabulary"]),
            grammar=float(data["grammar"]),
            fluency=float(data["fluency"]),
            confidence=data.get("confidence"),
            cultural_awareness=data.get("culturalAwareness"),
            reasoning=data.get("reasoning", ""),
            strengths=list(data.get("strengths") or []),
            areas_to_improve=list(data.get("areasToImprove") or []),
        )

    def to_dict(self) -> dict:
        return {
            "level": self.level.value,
            "confidence": self.confidence,
            "comprehension": self.comprehension,
            "vocabulary": self.vocabulary,
            "grammar": self.grammar,
            "fluency": self.fluency,
            "cultural_awareness": self.cultural_awareness,
            "reasoning": self.reasoning,
            "strengths": list(self.strengths),
            "areas_to_improve": list(self.areas_to_improve),
        }


class PlacementAssessor:
    """Asks the assessment model to place a learner on the level scale."""

    def __init__(
        self,
        llm: Optional[BaseChatModel] = None,
        validator: Optional[PlacementAnalysisValidator] = None,
    ):
        self.llm = llm or build_chat_model(
            config.model.analysis_model, config.model.analysis_temperature
        )
        self.validator = validator or PlacementAnalysisValidator()

        self.placement_prompt = PromptTemplate(
            input_variables=["conversation"],
            template="""You are an expert French language assessor. Analyze the following conversation between a language tutor and a learner to determine the learner's CEFR French level.

Evaluate these dimensions:
1. COMPREHENSION: Could they understand French at various complexity levels?
2. VOCABULARY RANGE: How varied and precise was their word choice?
3. GRAMMAR ACCURACY: Verb conjugations, agreements, sentence structure correctness.
4. FLUENCY: Could they form sentences smoothly?
5. CULTURAL AWARENESS: Did they understand idioms or cultural references?

CEFR Level Descriptions:
- A0: No French knowledge at all. Only responded in English.
- A1: Can use very basic French phrases (greetings, simple present tense, basic vocabulary).
- A2: Can handle simple daily situations. Uses past tense, basic descriptions, simple questions.
- B1: Can discuss familiar topics. Uses some complex structures (subjunctive, conditional). Can express opinions.
- B2: Can engage in detailed discussion. Good accuracy, varied vocabulary, handles nuance.
- C1: Near-native fluency. Handles abstract topics, literary language, subtle cultural references.
- C2: Mastery level. Indistinguishable from educated native speaker in this context.

IMPORTANT: Be conservative in your assessment. When in doubt, place them at the lower level. It's better to place slightly lower and let them advance than to overwhelm them.

Respond in EXACTLY this JSON format and nothing else:
{{
  "level": "A0" | "A1" | "A2" | "B1" | "B2" | "C1" | "C2",
  "confidence": 0.0-1.0,
  "comprehension": 0.0-1.0,
  "vocabulary": 0.0-1.0,
  "grammar": 0.0-1.0,
  "fluency": 0.0-1.0,
  "culturalAwareness": 0.0-1.0,
  "reasoning": "Brief explanation of the placement decision",
  "strengths": ["strength1", "strength2"],
  "areasToImprove": ["area1", "area2"]
}}

--- CONVERSATION ---
{conversation}
--- END CONVERSATION ---""",
        )

    def assess(self, transcript: str) -> PlacementAssessment:
        """
        Place the learner from a placement transcript.

        Raises:
            OracleError: The model call failed
            AnalysisParseError: No valid placement JSON, including an unknown level
        """
        data = invoke_for_json(
            self.llm,
            self.placement_prompt.format(conversation=transcript),
            self.validator,
            PUBLIC_FAILURE_MESSAGE,
            "placement analysis",
        )
        return PlacementAssessment.from_response(data)
