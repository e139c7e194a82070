"""
Unit tests for the layered system prompt.

Tests:
- Placement prompt (persona + addendum only)
- Section order for ordinary sessions
- Focus guidance lines, skipping unknown concepts
- Conversation memory window
- Vocabulary previews and token estimate
"""

import pytest

from lingotutor.curriculum import Level, curriculum_for
from lingotutor.prompts import (
    BASE_PERSONA,
    PLACEMENT_PERSONA_ADDITION,
    SESSION_TYPE_BLOCKS,
    build_memory_section,
    build_system_prompt,
    estimate_tokens,
    generate_focus_prompt,
    generate_level_prompt,
)
from lingotutor.prompts.composer import MEMORY_HEADER, SECTION_SEPARATOR
from lingotutor.prompts.level_templates import focus_guidance_lines, preview_words
from lingotutor.models.session import SessionType


class TestPlacementPrompt:
    def test_persona_and_addendum_only(self):
        prompt = build_system_prompt(
            Level.B1,
            SessionType.PLACEMENT,
            focus_concepts=["grammar.subjonctif_present"],
            conversation_summaries=["Session #1 ..."],
        )

        assert prompt == BASE_PERSONA + SECTION_SEPARATOR + PLACEMENT_PERSONA_ADDITION
        assert "CURRENT LEARNER LEVEL" not in prompt
        assert "SESSION FOCUS CONCEPTS" not in prompt
        assert MEMORY_HEADER not in prompt

    def test_name_line_for_placement(self):
        prompt = build_system_prompt(Level.A0, "PLACEMENT", learner_name="Camille")
        assert prompt.endswith("The learner's name is Camille. Use it naturally in conversation.")


class TestSystemPrompt:
    def test_sections_in_order(self):
        prompt = build_system_prompt(
            Level.A1,
            SessionType.LESSON,
            focus_concepts=["vocab.family"],
            conversation_summaries=["Session #1 (2025-03-01)\nType: LESSON\nTopics: greetings"],
            learner_name="Camille",
        )

        positions = [
            prompt.index(BASE_PERSONA),
            prompt.index("CURRENT LEARNER LEVEL: A1 (Beginner)"),
            prompt.index(SESSION_TYPE_BLOCKS[SessionType.LESSON]),
            prompt.index("SESSION FOCUS CONCEPTS"),
            prompt.index(MEMORY_HEADER),
            prompt.index("The learner's name is Camille. Use it occasionally and naturally."),
        ]
        assert positions == sorted(positions)

    @pytest.mark.parametrize(
        "session_type", [SessionType.LESSON, SessionType.FREE_CONVERSATION, SessionType.REVIEW]
    )
    def test_session_type_block_included(self, session_type):
        prompt = build_system_prompt(Level.A2, session_type)
        assert SESSION_TYPE_BLOCKS[session_type] in prompt

    def test_no_optional_sections_without_input(self):
        prompt = build_system_prompt(Level.A1, SessionType.LESSON)

        assert "SESSION FOCUS CONCEPTS" not in prompt
        assert MEMORY_HEADER not in prompt
        assert "The learner's name is" not in prompt

    def test_focus_section_omitted_when_nothing_resolves(self):
        prompt = build_system_prompt(
            Level.A1, SessionType.LESSON, focus_concepts=["vocab.does_not_exist"]
        )
        assert "SESSION FOCUS CONCEPTS" not in prompt

    def test_focus_from_another_level_contributes_nothing(self):
        prompt = build_system_prompt(
            Level.A1,
            SessionType.REVIEW,
            focus_concepts=["grammar.subjonctif_present", "vocab.family"],
        )
        assert "Present subjunctive" not in prompt
        assert "VOCABULARY FOCUS - Family" in prompt

    def test_deterministic(self):
        kwargs = dict(
            level=Level.B1,
            session_type="FREE_CONVERSATION",
            focus_concepts=["vocab.opinions"],
            conversation_summaries=["a", "b"],
            learner_name="Léa",
        )
        assert build_system_prompt(**kwargs) == build_system_prompt(**kwargs)

    def test_unknown_session_type_rejected(self):
        with pytest.raises(ValueError):
            build_system_prompt(Level.A1, "KARAOKE")


class TestFocusGuidance:
    def test_vocabulary_line_previews_six_words(self):
        lines = focus_guidance_lines(["vocab.family"], Level.A1)

        assert lines == [
            "VOCABULARY FOCUS - Family: Naturally weave in words like: "
            "mère, père, frère, sœur, enfant, grand-mère.... "
            "Create contexts where these words appear naturally."
        ]

    def test_grammar_line_uses_description(self):
        lines = focus_guidance_lines(["grammar.basic_negation"], Level.A1)

        assert lines == [
            "GRAMMAR FOCUS - Basic negation: ne ... pas around the conjugated verb. "
            "Create opportunities for the learner to practice this pattern."
        ]

    def test_order_follows_focus_list(self):
        lines = focus_guidance_lines(["vocab.colors", "grammar.articles_gender"], Level.A1)
        assert lines[0].startswith("VOCABULARY FOCUS - Colors")
        assert lines[1].startswith("GRAMMAR FOCUS - Articles and gender")

    def test_empty_when_nothing_resolves(self):
        assert generate_focus_prompt(["culture.unknown"], Level.A1) == ""


class TestLevelPrompt:
    def test_vocabulary_preview_capped_at_eight(self):
        prompt = generate_level_prompt(Level.A1)
        # Family has nine words; the ninth is cut
        assert "- Family: mère, père, frère, sœur, enfant, grand-mère, grand-père, cousin..." in prompt
        assert "famille" not in prompt.split("- Family:")[1].split("\n")[0]

    def test_short_cluster_has_no_ellipsis(self):
        prompt = generate_level_prompt(Level.A0)
        assert "- Identity: je, nom, comment\n" in prompt

    def test_grammar_targets_listed(self):
        prompt = generate_level_prompt(Level.A1)
        for grammar in curriculum_for(Level.A1).grammar_concepts:
            assert f"- {grammar.name}: {grammar.description}" in prompt

    def test_no_grammar_level(self):
        assert "No explicit grammar teaching at this level." in generate_level_prompt(Level.A0)

    def test_preview_words(self):
        assert preview_words(("a", "b", "c"), 2) == "a, b..."
        assert preview_words(("a", "b"), 2) == "a, b"


class TestMemorySection:
    def test_keeps_last_three(self):
        section = build_memory_section(["s1", "s2", "s3", "s4"])

        assert section.startswith(MEMORY_HEADER)
        assert "s1" not in section
        assert "s2\n---\ns3\n---\ns4" in section

    def test_empty_without_summaries(self):
        assert build_memory_section([]) == ""


class TestEstimateTokens:
    @pytest.mark.parametrize("text,expected", [("", 0), ("abcd", 1), ("abcde", 2)])
    def test_ceil_of_quarter_length(self, text, expected):
        assert estimate_tokens(text) == expected
