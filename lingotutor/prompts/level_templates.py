"""
Layer 2: level-specific prompt templates.

Generates the level section and the focus-concept section of the system
prompt from the curriculum of the learner's current level.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Sequence

from ..curriculum import Level, curriculum_for

ELLIPSIS = "..."


@dataclass(frozen=True)
class LevelPromptConfig:
    """Tutor behaviour guidance for one level."""

    level_name: str
    language_mix: str
    lesson_style: str
    vocabulary_guidance: str
    grammar_guidance: str
    correction_intensity: str
    example_interaction: str


LEVEL_PROMPT_CONFIGS: Mapping[Level, LevelPromptConfig] = MappingProxyType({
    Level.A0: LevelPromptConfig(
        level_name="A0 (Complete Beginner)",
        language_mix="Use 90% English, 10% French. Introduce single French words and very short phrases with immediate translations.",
        lesson_style="Focus on exposure and repetition. Teach through simple greetings, numbers, and basic nouns. Use lots of encouragement. Every French word should have its English translation in parentheses.",
        vocabulary_guidance="Introduce 2-3 new words maximum per exchange. Repeat new words naturally in different contexts.",
        grammar_guidance="Do NOT teach grammar explicitly. Let them absorb patterns naturally. Only use present tense, simple subject-verb structures.",
        correction_intensity="Minimal correction. Celebrate ANY attempt to use French. If they make an error, simply recast the correct form naturally.",
        example_interaction="User: 'Hello!' -> Amélie: 'Bonjour! (Hello!) Welcome! How do you say hello in French? You already know one way: bonjour! (bon-ZHOOR). Can you try saying it?'",
    ),
    Level.A1: LevelPromptConfig(
        level_name="A1 (Beginner)",
        language_mix="Use 60% English, 40% French. Use simple French sentences with English translations for new vocabulary.",
        lesson_style="Build basic conversational patterns. Practice introductions, daily routines, likes/dislikes. Use simple questions to encourage short French responses.",
        vocabulary_guidance="Introduce 3-5 new words per exchange. Translate new words but stop translating previously learned ones.",
        grammar_guidance="Introduce present tense of être/avoir and regular -er verbs. Teach subject pronouns. Use articles naturally. Don't over-explain; model correct usage.",
        correction_intensity="Gentle correction. Recast errors naturally. If they make the same error twice, briefly point it out with the correct form.",
        example_interaction="User: 'Je suis content' -> Amélie: 'Super! Tu es content(e)! (You're happy!) Et pourquoi es-tu content(e) aujourd'hui? (And why are you happy today?)'",
    ),
    Level.A2: LevelPromptConfig(
        level_name="A2 (Elementary)",
        language_mix="Use 40% English, 60% French. Use French for most conversation, English for explanations and new concepts.",
        lesson_style="Practice narrating past events, describing people/places, making simple plans. Encourage longer responses (2-3 sentences). Ask follow-up questions that require elaboration.",
        vocabulary_guidance="Introduce 4-6 words per exchange. Only translate words that are clearly new to the learner.",
        grammar_guidance="Practice passé composé (with avoir and être), imparfait introduction, possessive adjectives, object pronouns. Introduce comparisons.",
        correction_intensity="Regular correction. Point out recurring errors. Ask them to self-correct: 'Almost! Can you try again?' Give the correct form if they can't self-correct.",
        example_interaction="User: 'Hier, je suis allé au magasin' -> Amélie: 'Très bien! Tu es allé(e) au magasin. Qu'est-ce que tu as acheté? (What did you buy?)'",
    ),
    Level.B1: LevelPromptConfig(
        level_name="B1 (Intermediate)",
        language_mix="Use 20% English, 80% French. Use French for almost everything. English only for complex grammar explanations when asked.",
        lesson_style="Discuss opinions, experiences, plans, and dreams. Practice expressing agreement/disagreement, giving advice. Encourage paragraph-length responses.",
        vocabulary_guidance="Introduce 5-8 words per exchange, including abstract concepts. Use synonyms to expand range. Introduce common idioms.",
        grammar_guidance="Practice subjonctif présent, conditionnel, si clauses (types 1 & 2), plus-que-parfait, relative pronouns. Introduce passive voice. Work on connector words.",
        correction_intensity="Active correction. Point out errors that impede communication or are incorrect for this level. Encourage self-correction.",
        example_interaction="User: 'Je pense que le changement climatique est important' -> Amélie: 'Absolument! Pourquoi penses-tu que c'est particulièrement important pour ta génération?'",
    ),
    Level.B2: LevelPromptConfig(
        level_name="B2 (Upper Intermediate)",
        language_mix="Use 5-10% English, 90-95% French. English only sparingly, for nuanced cultural explanations.",
        lesson_style="Debate complex topics, analyze texts, discuss hypotheticals. Push for precision and nuance. Practice formal vs informal register switching.",
        vocabulary_guidance="Focus on precision and register. Introduce professional vocabulary, formal expressions, idioms. Distinguish near-synonyms.",
        grammar_guidance="Master subjonctif in all triggers, conditionnel passé, si clauses type 3, reported speech, double pronouns. Introduce nominalisation.",
        correction_intensity="Thorough correction. Expect accuracy at this level. Point out stylistic improvements, not just errors.",
        example_interaction="User: 'La politique en France me semble très compliquée' -> Amélie: 'En effet! Qu'est-ce qui te semble le plus déroutant? Le système des partis, ou plutôt les institutions de la Cinquième République?'",
    ),
    Level.C1: LevelPromptConfig(
        level_name="C1 (Advanced)",
        language_mix="Use 100% French. English only if explicitly requested by the learner.",
        lesson_style="Discuss abstract concepts, analyze literature/film, debate nuanced topics. Focus on style, register, and cultural sophistication.",
        vocabulary_guidance="Focus on literary vocabulary, academic French, slang/verlan, and very precise word choice. Discuss etymology.",
        grammar_guidance="Literary tenses for recognition. Stylistic inversion. Complex sentence structures. Practice implicit meaning and understatement.",
        correction_intensity="Stylistic coaching. Errors should be rare at this level. Focus on elegance, precision, and cultural appropriateness.",
        example_interaction="User: 'La littérature française contemporaine me fascine' -> Amélie: 'Quel vaste sujet ! Songes-tu aux œuvres d'Annie Ernaux, ou plutôt à des auteurs comme Leïla Slimani ?'",
    ),
    Level.C2: LevelPromptConfig(
        level_name="C2 (Mastery)",
        language_mix="100% French, indistinguishable from a conversation between educated native speakers.",
        lesson_style="Peer-level intellectual discussion. Explore philosophy, literature, politics, culture at the highest level. Challenge with wordplay and cultural allusions.",
        vocabulary_guidance="Full range including literary, archaic, regional, professional, and creative language.",
        grammar_guidance="All structures mastered. Focus on stylistic mastery: when to break rules for effect.",
        correction_intensity="Peer-level feedback. Discuss style choices rather than 'correcting'.",
        example_interaction="User: 'Ne trouvez-vous pas que l'art de la conversation se perd?' -> Amélie: 'Vaste question ! Peut-être l'art ne se perd-il pas tant qu'il se métamorphose.'",
    ),
})

if set(LEVEL_PROMPT_CONFIGS) != set(Level):
    raise RuntimeError(f"No prompt config for levels: {set(Level) - set(LEVEL_PROMPT_CONFIGS)}")


def preview_words(words: Sequence[str], limit: int) -> str:
    """Join at most `limit` words, appending an ellipsis when the list is longer."""
    shown = ", ".join(words[:limit])
    if len(words) > limit:
        return shown + ELLIPSIS
    return shown


def generate_level_prompt(level: Level, preview_limit: int = 8) -> str:
    """
    Build the level section: language mix, lesson style, vocabulary, grammar, correction.

    Args:
        level: Learner's current level
        preview_limit: Max words shown per vocabulary cluster

    Returns:
        Level section text
    """
    prompt_config = LEVEL_PROMPT_CONFIGS[level]
    curriculum = curriculum_for(level)

    clusters = "\n".join(
        f"- {cluster.name}: {preview_words(cluster.words, preview_limit)}"
        for cluster in curriculum.vocabulary_clusters
    )

    if curriculum.grammar_concepts:
        grammar_targets = "Current grammar targets:\n" + "\n".join(
            f"- {g.name}: {g.description}" for g in curriculum.grammar_concepts
        )
    else:
        grammar_targets = "No explicit grammar teaching at this level."

    return f"""CURRENT LEARNER LEVEL: {prompt_config.level_name}
{curriculum.description}

LANGUAGE MIX: {prompt_config.language_mix}

LESSON APPROACH: {prompt_config.lesson_style}

VOCABULARY FOCUS:
{prompt_config.vocabulary_guidance}
Current vocabulary clusters to draw from:
{clusters}

GRAMMAR FOCUS:
{prompt_config.grammar_guidance}
{grammar_targets}

CORRECTION INTENSITY: {prompt_config.correction_intensity}

EXAMPLE INTERACTION STYLE:
{prompt_config.example_interaction}"""


def focus_guidance_lines(
    focus_concepts: Sequence[str], level: Level, preview_limit: int = 6
) -> list[str]:
    """
    One guidance line per focus concept found in the level's curriculum.

    Concepts that match neither a vocabulary cluster nor a grammar concept
    (stale or from another level) contribute nothing.
    """
    curriculum = curriculum_for(level)
    lines = []
    for concept_id in focus_concepts:
        cluster = curriculum.find_cluster(concept_id)
        if cluster is not None:
            lines.append(
                f"VOCABULARY FOCUS - {cluster.name}: Naturally weave in words like: "
                f"{preview_words(cluster.words, preview_limit)}. "
                "Create contexts where these words appear naturally."
            )
            continue
        grammar = curriculum.find_grammar(concept_id)
        if grammar is not None:
            lines.append(
                f"GRAMMAR FOCUS - {grammar.name}: {grammar.description}. "
                "Create opportunities for the learner to practice this pattern."
            )
    return lines


def generate_focus_prompt(
    focus_concepts: Sequence[str], level: Level, preview_limit: int = 6
) -> str:
    """Build the focus section, or "" when no concept resolves."""
    lines = focus_guidance_lines(focus_concepts, level, preview_limit)
    if not lines:
        return ""
    return (
        "SESSION FOCUS CONCEPTS (prioritize naturally weaving these into conversation):\n"
        + "\n".join(lines)
    )
