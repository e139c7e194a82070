"""
Prompt Composer: builds the layered system prompt for the tutor oracle.

Layer 1: constant persona
Layer 2: level curriculum context and session-type behaviour
Layer 3: session context (focus concepts, previous session summaries)

Pure and deterministic; no I/O.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence

from ..config import TutoringConfig, config
from ..curriculum import Level
from ..models.session import SessionType
from .level_templates import generate_focus_prompt, generate_level_prompt
from .persona import (
    BASE_PERSONA,
    PLACEMENT_PERSONA_ADDITION,
    SESSION_TYPE_BLOCKS,
    learner_name_line,
)

SECTION_SEPARATOR = "\n\n"
SUMMARY_SEPARATOR = "\n---\n"
MEMORY_HEADER = "PREVIOUS SESSION CONTEXT (use this to maintain continuity):"
MEMORY_FOOTER = (
    "Reference previous topics or vocabulary when natural. "
    "The learner should feel like you remember them."
)


def build_memory_section(summaries: Sequence[str], window: int = 3) -> str:
    """The last `window` summaries under the continuity header, or "" if none."""
    recent = list(summaries)[-window:] if window > 0 else []
    if not recent:
        return ""
    return f"{MEMORY_HEADER}\n{SUMMARY_SEPARATOR.join(recent)}\n{MEMORY_FOOTER}"


def build_system_prompt(
    level: Level | str,
    session_type: SessionType | str,
    focus_concepts: Sequence[str] = (),
    conversation_summaries: Sequence[str] = (),
    learner_name: Optional[str] = None,
    settings: Optional[TutoringConfig] = None,
) -> str:
    """
    Compose the system prompt for one turn.

    Args:
        level: Learner's current level
        session_type: Session type; PLACEMENT gets persona + placement addendum only
        focus_concepts: Concept keys frozen for this session
        conversation_summaries: Rendered summaries, oldest first (last 3 used)
        learner_name: Optional display name
        settings: Tutoring constants (defaults to the global config)

    Returns:
        Sections joined by blank lines

    Raises:
        ValueError: If level or session_type is not a known value
    """
    settings = settings or config.tutoring
    level = Level(level)
    session_type = SessionType(session_type)

    parts = [BASE_PERSONA]

    if session_type == SessionType.PLACEMENT:
        parts.append(PLACEMENT_PERSONA_ADDITION)
        if learner_name:
            parts.append(learner_name_line(learner_name, placement=True))
        return SECTION_SEPARATOR.join(parts)

    parts.append(generate_level_prompt(level, settings.level_vocabulary_preview))
    parts.append(SESSION_TYPE_BLOCKS[session_type])

    if focus_concepts:
        focus_section = generate_focus_prompt(
            focus_concepts, level, settings.focus_vocabulary_preview
        )
        if focus_section:
            parts.append(focus_section)

    memory_section = build_memory_section(conversation_summaries, settings.summary_window)
    if memory_section:
        parts.append(memory_section)

    if learner_name:
        parts.append(learner_name_line(learner_name))

    return SECTION_SEPARATOR.join(parts)


def estimate_tokens(text: str) -> int:
    """Rough token count: about 4 characters per token for mixed English/French."""
    return math.ceil(len(text) / 4)
