"""
Prompt layers for the tutor oracle.

- persona: constant persona, placement addendum, session-type blocks
- level_templates: per-level guidance and focus-concept lines
- composer: assembles the layered system prompt
"""

from .composer import build_memory_section, build_system_prompt, estimate_tokens
from .level_templates import (
    LEVEL_PROMPT_CONFIGS,
    LevelPromptConfig,
    generate_focus_prompt,
    generate_level_prompt,
)
from .persona import (
    BASE_PERSONA,
    PLACEMENT_PERSONA_ADDITION,
    SESSION_TYPE_BLOCKS,
    TUTOR_NAME,
)

__all__ = [
    "build_memory_section",
    "build_system_prompt",
    "estimate_tokens",
    "LEVEL_PROMPT_CONFIGS",
    "LevelPromptConfig",
    "generate_focus_prompt",
    "generate_level_prompt",
    "BASE_PERSONA",
    "PLACEMENT_PERSONA_ADDITION",
    "SESSION_TYPE_BLOCKS",
    "TUTOR_NAME",
]
