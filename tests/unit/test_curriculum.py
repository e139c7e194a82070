"""
Unit tests for the curriculum catalog.

Tests:
- Level ordering and single-step navigation
- One curriculum per level, flattened concept keys
- Prefix-based concept classification
"""

import pytest

from lingotutor.curriculum import (
    CURRICULUM,
    ConceptType,
    Level,
    all_concept_ids,
    concept_type,
    curriculum_for,
    level_of_concept,
)
from lingotutor.models.learner_profile import ConceptMastery


class TestLevel:
    def test_seven_levels_in_order(self):
        assert [level.value for level in Level.ordered()] == [
            "A0", "A1", "A2", "B1", "B2", "C1", "C2",
        ]

    def test_next_and_previous_move_one_stage(self):
        assert Level.A1.next() == Level.A2
        assert Level.A1.previous() == Level.A0
        assert Level.B2.next().next() == Level.C2

    def test_ends_of_the_scale(self):
        assert Level.lowest().previous() is None
        assert Level.highest().next() is None

    def test_str_is_value(self):
        assert str(Level.B1) == "B1"
        assert f"{Level.B1}" == "B1"


class TestCatalog:
    def test_every_level_has_a_curriculum(self):
        assert set(CURRICULUM) == set(Level)
        for level in Level:
            assert curriculum_for(level).level == level

    def test_lookup_by_string(self):
        assert curriculum_for("A1") is curriculum_for(Level.A1)

    def test_unknown_level_is_an_error(self):
        with pytest.raises(ValueError):
            curriculum_for("Z9")

    def test_catalog_is_read_only(self):
        with pytest.raises(TypeError):
            CURRICULUM[Level.A0] = None

    def test_concept_ids_grammar_then_vocabulary(self):
        a1 = curriculum_for(Level.A1)
        ids = all_concept_ids(Level.A1)

        assert ids[: len(a1.grammar_concepts)] == tuple(g.concept_id for g in a1.grammar_concepts)
        assert ids[len(a1.grammar_concepts):] == tuple(c.concept_id for c in a1.vocabulary_clusters)
        assert len(set(ids)) == len(ids)

    def test_pre_beginner_level_has_no_grammar(self):
        a0 = curriculum_for(Level.A0)
        assert a0.grammar_concepts == ()
        assert all(cid.startswith("vocab.") for cid in a0.concept_ids)

    def test_concepts_belong_to_exactly_one_level(self):
        seen = {}
        for level in Level:
            for concept_id in all_concept_ids(level):
                assert concept_id not in seen, f"{concept_id} in {seen.get(concept_id)} and {level}"
                seen[concept_id] = level

    def test_level_of_concept(self):
        assert level_of_concept("grammar.etre_avoir_present") == Level.A1
        assert level_of_concept("vocab.greetings_basic") == Level.A0
        assert level_of_concept("vocab.not_in_any_level") is None

    def test_find_cluster_and_grammar(self):
        a1 = curriculum_for(Level.A1)
        assert a1.find_cluster("vocab.family").name == "Family"
        assert a1.find_grammar("grammar.basic_negation").name == "Basic negation"
        assert a1.find_cluster("grammar.basic_negation") is None
        assert a1.find_grammar("vocab.family") is None


class TestConceptType:
    @pytest.mark.parametrize(
        "concept_id,expected",
        [
            ("grammar.passe_compose", ConceptType.GRAMMAR),
            ("vocab.family", ConceptType.VOCABULARY),
            ("pronunciation.nasal_vowels", ConceptType.PRONUNCIATION),
            ("culture.la_bise", ConceptType.CULTURE),
            ("register.tu_vous", ConceptType.PRAGMATICS),
            ("", ConceptType.PRAGMATICS),
        ],
    )
    def test_prefix_classification(self, concept_id, expected):
        assert concept_type(concept_id) == expected

    def test_prefix_must_include_the_dot(self):
        assert concept_type("grammarian") == ConceptType.PRAGMATICS

    def test_mastery_records_agree_with_catalog(self):
        for level in Level:
            for concept_id in all_concept_ids(level):
                record = ConceptMastery(learner_id="l", concept_id=concept_id)
                assert record.concept_type == concept_type(concept_id)
