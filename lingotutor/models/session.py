"""
Conversation sessions - one record per tutoring interaction.

Tracks:
- Session type and the focus concepts frozen at the first turn
- Ordered learner/tutor messages
- Start/end timestamps (an ended session is terminal)
- The optional post-session summary
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from ..errors import PreconditionError, SessionEndedError


class SessionType(str, Enum):
    LESSON = "LESSON"
    FREE_CONVERSATION = "FREE_CONVERSATION"
    REVIEW = "REVIEW"
    PLACEMENT = "PLACEMENT"

    def __str__(self) -> str:
        return self.value


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"

    def __str__(self) -> str:
        return self.value


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_time(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def _format_time(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class ConversationMessage:
    """One turn of the conversation."""

    role: MessageRole
    content: str
    created_at: datetime = field(default_factory=utc_now)
    message_id: str = field(default_factory=lambda: f"msg-{uuid.uuid4()}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "message_id": self.message_id,
            "role": self.role.value,
            "content": self.content,
            "created_at": _format_time(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ConversationMessage:
        return cls(
            role=MessageRole(data["role"]),
            content=data["content"],
            created_at=_parse_time(data["created_at"]),
            message_id=data["message_id"],
        )


@dataclass
class SessionSummary:
    """
    Post-session analysis, at most one per session.

    Attributes:
        topics_covered: What was discussed
        vocabulary_introduced: Comma-separated words/expressions introduced
        grammar_practiced: Comma-separated grammar structures practiced
        errors_observed: Notable learner errors
        overall_notes: Free-text notes on the learner's performance
        concept_scores: Concept key -> score (0-1) that drove mastery updates
        suggested_focus: Concept keys to focus on next time
    """

    topics_covered: str = ""
    vocabulary_introduced: str = ""
    grammar_practiced: str = ""
    errors_observed: str = ""
    overall_notes: str = ""
    concept_scores: dict[str, float] = field(default_factory=dict)
    suggested_focus: list[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "topics_covered": self.topics_covered,
            "vocabulary_introduced": self.vocabulary_introduced,
            "grammar_practiced": self.grammar_practiced,
            "errors_observed": self.errors_observed,
            "overall_notes": self.overall_notes,
            "concept_scores": dict(self.concept_scores),
            "suggested_focus": list(self.suggested_focus),
            "created_at": _format_time(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SessionSummary:
        return cls(
            topics_covered=data.get("topics_covered", ""),
            vocabulary_introduced=data.get("vocabulary_introduced", ""),
            grammar_practiced=data.get("grammar_practiced", ""),
            errors_observed=data.get("errors_observed", ""),
            overall_notes=data.get("overall_notes", ""),
            concept_scores=dict(data.get("concept_scores", {})),
            suggested_focus=list(data.get("suggested_focus", [])),
            created_at=_parse_time(data.get("created_at")) or utc_now(),
        )


@dataclass
class ConversationSession:
    """
    A tutoring interaction owned by one learner.

    Focus concepts are chosen once, at the first turn, and frozen after.
    Once `ended_at` is set no further messages may be appended.
    """

    learner_id: str
    session_type: SessionType
    session_number: int = 1
    ai_model: Optional[str] = None
    focus_concepts: list[str] = field(default_factory=list)
    messages: list[ConversationMessage] = field(default_factory=list)
    summary: Optional[SessionSummary] = None
    started_at: datetime = field(default_factory=utc_now)
    ended_at: Optional[datetime] = None
    focus_frozen: bool = False
    session_id: str = field(default_factory=lambda: f"cs-{uuid.uuid4()}")

    @property
    def message_count(self) -> int:
        return len(self.messages)

    @property
    def is_ended(self) -> bool:
        return self.ended_at is not None

    @property
    def is_placement(self) -> bool:
        return self.session_type == SessionType.PLACEMENT

    def freeze_focus(self, concept_ids: list[str]) -> None:
        """Set the session's focus concepts; allowed exactly once."""
        if self.focus_frozen:
            raise PreconditionError(f"Focus concepts already set for session {self.session_id}")
        self.focus_concepts = list(concept_ids)
        self.focus_frozen = True

    def append_message(
        self, role: MessageRole, content: str, when: Optional[datetime] = None
    ) -> ConversationMessage:
        if self.is_ended:
            raise SessionEndedError(f"Session {self.session_id} has ended")
        message = ConversationMessage(role=role, content=content, created_at=when or utc_now())
        self.messages.append(message)
        return message

    def remove_message(self, message_id: str) -> bool:
        """Drop a message by id; returns False if it was not present."""
        before = len(self.messages)
        self.messages = [m for m in self.messages if m.message_id != message_id]
        return len(self.messages) != before

    def end(self, when: Optional[datetime] = None) -> None:
        if self.is_ended:
            raise SessionEndedError(f"Session {self.session_id} already ended")
        self.ended_at = when or utc_now()

    def transcript(self) -> str:
        """Flatten the conversation as 'Learner:' / 'Tutor:' lines."""
        return "\n\n".join(
            f"{'Learner' if m.role == MessageRole.USER else 'Tutor'}: {m.content}"
            for m in self.messages
        )

    def to_dict(self, include_messages: bool = True) -> dict[str, Any]:
        data = {
            "session_id": self.session_id,
            "learner_id": self.learner_id,
            "session_type": self.session_type.value,
            "session_number": self.session_number,
            "ai_model": self.ai_model,
            "focus_concepts": list(self.focus_concepts),
            "focus_frozen": self.focus_frozen,
            "message_count": self.message_count,
            "started_at": _format_time(self.started_at),
            "ended_at": _format_time(self.ended_at),
            "summary": self.summary.to_dict() if self.summary else None,
        }
        if include_messages:
            data["messages"] = [m.to_dict() for m in self.messages]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ConversationSession:
        summary = data.get("summary")
        return cls(
            learner_id=data["learner_id"],
            session_type=SessionType(data["session_type"]),
            session_number=data.get("session_number", 1),
            ai_model=data.get("ai_model"),
            focus_concepts=list(data.get("focus_concepts", [])),
            messages=[ConversationMessage.from_dict(m) for m in data.get("messages", [])],
            summary=SessionSummary.from_dict(summary) if summary else None,
            started_at=_parse_time(data["started_at"]),
            ended_at=_parse_time(data.get("ended_at")),
            focus_frozen=data.get("focus_frozen", False),
            session_id=data["session_id"],
        )
