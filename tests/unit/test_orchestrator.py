"""
Unit tests for the Tutoring Orchestrator.

Tests the session lifecycle end to end:
- Learner registration, placement (assessed and skipped)
- Session creation and numbering
- Streamed turns: focus freezing, prompt composition, persistence
- Partial replies, cancellation and error paths
- Post-session analysis into mastery (idempotent summary)
- Level assessment and progress views
"""

import json
import threading
import unittest
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

from langchain_core.language_models.fake_chat_models import FakeListChatModel

from lingotutor.agents.placement_assessor import PlacementAssessor
from lingotutor.agents.session_analyzer import SessionAnalyzer
from lingotutor.config import TutoringConfig, config
from lingotutor.curriculum import Level, all_concept_ids
from lingotutor.errors import (
    AnalysisParseError,
    InputValidationError,
    NotFoundError,
    OracleError,
    PreconditionError,
    RateLimitExceededError,
    SessionBusyError,
    SessionEndedError,
    SessionTooShortError,
)
from lingotutor.models.learner_profile import ConceptMastery, SkillProfile
from lingotutor.models.session import MessageRole, SessionSummary, SessionType
from lingotutor.orchestrator import (
    CANCELLED_MESSAGE,
    PLACEMENT_SKIPPED_REASON,
    StreamEvent,
    TutoringOrchestrator,
)
from lingotutor.prompts import PLACEMENT_PERSONA_ADDITION
from lingotutor.prompts.composer import MEMORY_HEADER
from lingotutor.utils.persistence import TutorStore
from lingotutor.utils.rate_limit import RateLimiter

NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)
A1_IDS = all_concept_ids(Level.A1)

ANALYSIS = {
    "topicsCovered": "Talking about family",
    "vocabularyIntroduced": "mère, père",
    "grammarPracticed": "être present",
    "errorsObserved": "",
    "overallNotes": "Solid start",
    "conceptScores": [
        {"conceptId": A1_IDS[0], "score": 0.8},
        {"conceptId": A1_IDS[1], "score": "lots"},
    ],
    "suggestedFocus": [A1_IDS[2]],
}

PLACEMENT = {
    "level": "A2",
    "confidence": 0.7,
    "comprehension": 0.6,
    "vocabulary": 0.5,
    "grammar": 0.4,
    "fluency": 0.5,
    "reasoning": "Comfortable with passé composé",
    "strengths": [],
    "areasToImprove": [],
}


class ScriptedTutor:
    """Stands in for TutorAgent: records each call and streams word by word."""

    def __init__(self, *replies, fail_after=None):
        self.replies = list(replies) or ["Bonjour Camille !"]
        self.fail_after = fail_after
        self.calls = []

    def stream_reply(self, system_prompt, history, model_name=None):
        self.calls.append(
            {"system_prompt": system_prompt, "history": list(history), "model_name": model_name}
        )
        reply = self.replies[(len(self.calls) - 1) % len(self.replies)]
        words = reply.split(" ")
        deltas = [w + " " for w in words[:-1]] + [words[-1]]
        for i, delta in enumerate(deltas):
            if self.fail_after is not None and i == self.fail_after:
                raise OracleError("upstream returned 500")
            yield delta


class OrchestratorTestCase(unittest.TestCase):
    """Shared setup: one learner, scripted agents, fixed clock."""

    def setUp(self):
        self.store = TutorStore()
        self.tutor = ScriptedTutor()
        self.analyzer = SessionAnalyzer(
            llm=FakeListChatModel(responses=["Analysis:\n" + json.dumps(ANALYSIS)])
        )
        self.assessor = PlacementAssessor(
            llm=FakeListChatModel(responses=[json.dumps(PLACEMENT)])
        )
        self.orchestrator = self.make_orchestrator()
        self.learner = self.orchestrator.register_learner("Camille")
        self.learner_id = self.learner.learner_id

    def make_orchestrator(self, **overrides):
        kwargs = dict(
            store=self.store,
            tutor=self.tutor,
            analyzer=self.analyzer,
            placement_assessor=self.assessor,
            chat_limiter=RateLimiter(60, 1000, "chat"),
            analysis_limiter=RateLimiter(60, 1000, "analysis"),
            clock=lambda: NOW,
        )
        kwargs.update(overrides)
        return TutoringOrchestrator(**kwargs)

    def set_level(self, level):
        self.store.save_profile(SkillProfile(learner_id=self.learner_id, current_level=level))

    def turn(self, session_id, message="Bonjour !", orchestrator=None, **kwargs):
        orchestrator = orchestrator or self.orchestrator
        return list(orchestrator.send_message(self.learner_id, session_id, message, **kwargs))

    def session(self, session_id):
        return self.store.get_session(self.learner_id, session_id)


class TestSessions(OrchestratorTestCase):
    def test_register_learner(self):
        self.assertEqual(self.store.get_learner(self.learner_id).name, "Camille")

    def test_session_numbers_increase(self):
        first = self.orchestrator.create_session(self.learner_id)
        second = self.orchestrator.create_session(self.learner_id, "REVIEW")

        self.assertEqual((first.session_number, second.session_number), (1, 2))
        self.assertEqual(second.session_type, SessionType.REVIEW)
        self.assertEqual(first.started_at, NOW)

    def test_model_chosen_by_session_type(self):
        lesson = self.orchestrator.create_session(self.learner_id, SessionType.LESSON)
        placement = self.orchestrator.create_session(self.learner_id, SessionType.PLACEMENT)

        self.assertEqual(lesson.ai_model, config.model.conversation_model)
        self.assertEqual(placement.ai_model, config.model.analysis_model)

    def test_invalid_session_type(self):
        with self.assertRaises(InputValidationError):
            self.orchestrator.create_session(self.learner_id, "KARAOKE")

    def test_unknown_learner(self):
        with self.assertRaises(NotFoundError):
            self.orchestrator.create_session("learner-missing")

    def test_end_twice(self):
        session = self.orchestrator.create_session(self.learner_id)
        ended = self.orchestrator.end_session(self.learner_id, session.session_id)

        self.assertEqual(ended.ended_at, NOW)
        with self.assertRaises(SessionEndedError):
            self.orchestrator.end_session(self.learner_id, session.session_id)

    def test_list_sessions_with_short_summary(self):
        session = self.orchestrator.create_session(self.learner_id)
        self.store.upsert_summary(
            self.learner_id,
            session.session_id,
            SessionSummary(topics_covered="Café", overall_notes="Bien", errors_observed="x"),
        )
        self.orchestrator.create_session(self.learner_id)

        listing = self.orchestrator.list_sessions(self.learner_id)

        self.assertEqual([s["session_number"] for s in listing], [2, 1])
        self.assertIsNone(listing[0]["summary"])
        self.assertEqual(listing[1]["summary"], {"topics_covered": "Café", "overall_notes": "Bien"})
        self.assertNotIn("messages", listing[1])

    def test_other_learner_cannot_read_session(self):
        session = self.orchestrator.create_session(self.learner_id)
        other = self.orchestrator.register_learner("Other")

        with self.assertRaises(NotFoundError):
            self.orchestrator.get_session(other.learner_id, session.session_id)


class TestConversationTurns(OrchestratorTestCase):
    def test_fresh_a1_learner_lesson(self):
        """Zero mastery at A1: two new concepts, guidance only for them."""
        self.set_level(Level.A1)
        session = self.orchestrator.create_session(self.learner_id, SessionType.LESSON)

        events = self.turn(session.session_id)

        stored = self.session(session.session_id)
        self.assertEqual(stored.focus_concepts, list(A1_IDS[:2]))
        self.assertTrue(stored.focus_frozen)

        prompt = self.tutor.calls[0]["system_prompt"]
        self.assertEqual(prompt.count("FOCUS - "), 2)
        self.assertIn("GRAMMAR FOCUS - Être and avoir (present)", prompt)
        self.assertIn("GRAMMAR FOCUS - Regular -er verbs (present)", prompt)
        self.assertIn("The learner's name is Camille", prompt)

        self.assertEqual([e.type for e in events], ["delta", "delta", "delta", "done"])
        self.assertEqual("".join(e.text for e in events), "Bonjour Camille !")

    def test_messages_persisted_in_order(self):
        session = self.orchestrator.create_session(self.learner_id)

        events = self.turn(session.session_id, "Je suis fatigué")

        stored = self.session(session.session_id)
        self.assertEqual(
            [(m.role, m.content) for m in stored.messages],
            [(MessageRole.USER, "Je suis fatigué"), (MessageRole.ASSISTANT, "Bonjour Camille !")],
        )
        self.assertEqual(events[-1].message_id, stored.messages[-1].message_id)
        # The oracle saw the user's message as the last history entry
        self.assertEqual(self.tutor.calls[0]["history"][-1].content, "Je suis fatigué")

    def test_learner_without_profile_taught_at_lowest_level(self):
        session = self.orchestrator.create_session(self.learner_id)
        self.turn(session.session_id)

        self.assertIn("CURRENT LEARNER LEVEL: A0", self.tutor.calls[0]["system_prompt"])

    def test_focus_frozen_after_first_turn(self):
        self.set_level(Level.A1)
        session = self.orchestrator.create_session(self.learner_id)
        self.turn(session.session_id)
        frozen = self.session(session.session_id).focus_concepts

        # New mastery data would change the selection, but not for this session
        self.orchestrator.mastery_updater.apply(self.learner_id, {A1_IDS[0]: 0.9, A1_IDS[1]: 0.9})
        self.turn(session.session_id)

        self.assertEqual(self.session(session.session_id).focus_concepts, frozen)

    def test_placement_session_has_no_focus(self):
        session = self.orchestrator.create_session(self.learner_id, SessionType.PLACEMENT)

        self.turn(session.session_id)

        self.assertEqual(self.session(session.session_id).focus_concepts, [])
        prompt = self.tutor.calls[0]["system_prompt"]
        self.assertIn(PLACEMENT_PERSONA_ADDITION, prompt)
        self.assertNotIn("SESSION FOCUS CONCEPTS", prompt)
        self.assertEqual(self.tutor.calls[0]["model_name"], config.model.analysis_model)

    def test_previous_summaries_in_prompt(self):
        for topic in ("t1", "t2", "t3", "t4"):
            past = self.orchestrator.create_session(self.learner_id)
            self.store.upsert_summary(
                self.learner_id, past.session_id, SessionSummary(topics_covered=topic)
            )
        session = self.orchestrator.create_session(self.learner_id)

        self.turn(session.session_id)

        prompt = self.tutor.calls[0]["system_prompt"]
        self.assertIn(MEMORY_HEADER, prompt)
        self.assertNotIn("Topics: t1", prompt)
        self.assertLess(prompt.index("Topics: t2"), prompt.index("Topics: t4"))

    def test_history_window(self):
        orchestrator = self.make_orchestrator(settings=TutoringConfig(history_window=3))
        session = orchestrator.create_session(self.learner_id)
        for i in range(3):
            self.turn(session.session_id, f"message {i}", orchestrator=orchestrator)

        history = self.tutor.calls[-1]["history"]
        self.assertEqual(len(history), 3)
        self.assertEqual(history[-1].content, "message 2")

    def test_partial_reply_saved_on_oracle_error(self):
        self.tutor.fail_after = 2
        session = self.orchestrator.create_session(self.learner_id)

        events = self.turn(session.session_id)

        self.assertEqual([e.type for e in events], ["delta", "delta", "error"])
        self.assertEqual(events[-1].error, OracleError.default_public_message)
        self.assertNotIn("500", events[-1].error)
        stored = self.session(session.session_id)
        self.assertEqual(stored.messages[-1].role, MessageRole.ASSISTANT)
        self.assertEqual(stored.messages[-1].content, "Bonjour Camille ")

    def test_error_before_any_text_keeps_user_message(self):
        self.tutor.fail_after = 0
        session = self.orchestrator.create_session(self.learner_id)

        events = self.turn(session.session_id)

        self.assertEqual([e.type for e in events], ["error"])
        stored = self.session(session.session_id)
        self.assertEqual([m.role for m in stored.messages], [MessageRole.USER])

    def test_cancel_event_discards_turn(self):
        session = self.orchestrator.create_session(self.learner_id)
        cancel = threading.Event()
        events = []

        for event in self.orchestrator.send_message(
            self.learner_id, session.session_id, "Bonjour", cancel_event=cancel
        ):
            events.append(event)
            cancel.set()

        self.assertEqual(events[-1], StreamEvent(type="error", error=CANCELLED_MESSAGE))
        self.assertEqual(self.session(session.session_id).message_count, 0)

    def test_consumer_disconnect_discards_turn(self):
        session = self.orchestrator.create_session(self.learner_id)
        stream = self.orchestrator.send_message(self.learner_id, session.session_id, "Bonjour")

        self.assertEqual(next(stream).type, "delta")
        stream.close()

        self.assertEqual(self.session(session.session_id).message_count, 0)
        # Lock released: the next turn goes through
        self.assertEqual(self.turn(session.session_id)[-1].type, "done")

    def test_ended_session_rejects_messages(self):
        session = self.orchestrator.create_session(self.learner_id)
        self.orchestrator.end_session(self.learner_id, session.session_id)

        with self.assertRaises(SessionEndedError):
            self.orchestrator.send_message(self.learner_id, session.session_id, "Encore ?")
        self.assertEqual(self.tutor.calls, [])

    def test_empty_message_rejected(self):
        session = self.orchestrator.create_session(self.learner_id)
        for bad in ("", "   ", None, 42):
            with self.assertRaises(InputValidationError):
                self.orchestrator.send_message(self.learner_id, session.session_id, bad)

    def test_rate_limited(self):
        limiter = RateLimiter(60, 1, "chat")
        orchestrator = self.make_orchestrator(chat_limiter=limiter)
        self.assertIs(orchestrator.chat_limiter, limiter)
        session = orchestrator.create_session(self.learner_id)
        self.turn(session.session_id, orchestrator=orchestrator)

        with self.assertRaises(RateLimitExceededError):
            orchestrator.send_message(self.learner_id, session.session_id, "Encore")

    def test_end_waits_for_streaming_turn(self):
        session = self.orchestrator.create_session(self.learner_id)
        stream = self.orchestrator.send_message(self.learner_id, session.session_id, "Bonjour")
        events = [next(stream)]

        ender = threading.Thread(
            target=self.orchestrator.end_session, args=(self.learner_id, session.session_id)
        )
        ender.start()
        ender.join(timeout=0.05)
        self.assertTrue(ender.is_alive())

        events.extend(stream)
        ender.join(timeout=5)

        self.assertFalse(ender.is_alive())
        self.assertEqual([e.type for e in events], ["delta", "delta", "delta", "done"])
        stored = self.session(session.session_id)
        self.assertTrue(stored.is_ended)
        self.assertEqual(
            [(m.role, m.content) for m in stored.messages],
            [(MessageRole.USER, "Bonjour"), (MessageRole.ASSISTANT, "Bonjour Camille !")],
        )

    def test_turn_started_before_end_is_rejected_when_consumed(self):
        session = self.orchestrator.create_session(self.learner_id)
        stream = self.orchestrator.send_message(self.learner_id, session.session_id, "Bonjour")
        self.orchestrator.end_session(self.learner_id, session.session_id)

        with self.assertRaises(SessionEndedError):
            next(stream)
        self.assertEqual(self.session(session.session_id).message_count, 0)
        self.assertEqual(self.tutor.calls, [])

    def test_ending_forgets_session_lock(self):
        for _ in range(5):
            session = self.orchestrator.create_session(self.learner_id)
            self.turn(session.session_id)
            self.orchestrator.end_session(self.learner_id, session.session_id)

        self.assertEqual(self.orchestrator._session_locks, {})

    def test_ending_sweeps_expired_rate_limit_windows(self):
        ticks = [0.0]
        limiter = RateLimiter(60, 10, "chat", clock=lambda: ticks[0])
        orchestrator = self.make_orchestrator(chat_limiter=limiter)
        session = orchestrator.create_session(self.learner_id)
        self.turn(session.session_id, orchestrator=orchestrator)
        self.assertEqual(len(limiter), 1)

        ticks[0] = 61.0
        orchestrator.end_session(self.learner_id, session.session_id)

        self.assertEqual(len(limiter), 0)

    def test_concurrent_turn_in_same_session_is_busy(self):
        session = self.orchestrator.create_session(self.learner_id)
        lock = self.orchestrator._session_lock(session.session_id)
        lock.acquire()
        try:
            with patch.object(config.model, "request_timeout", 0.01):
                stream = self.orchestrator.send_message(
                    self.learner_id, session.session_id, "Bonjour"
                )
                with self.assertRaises(SessionBusyError):
                    next(stream)
        finally:
            lock.release()
        self.assertEqual(self.session(session.session_id).message_count, 0)

    def test_stream_event_to_dict(self):
        self.assertEqual(StreamEvent(type="delta", text="Bon").to_dict(), {"type": "delta", "text": "Bon"})
        self.assertEqual(
            StreamEvent(type="done", message_id="msg-1").to_dict(),
            {"type": "done", "messageId": "msg-1"},
        )
        self.assertTrue(StreamEvent(type="error", error="x").is_terminal)


class TestSessionAnalysis(OrchestratorTestCase):
    def finished_session(self, turns=2):
        self.set_level(Level.A1)
        session = self.orchestrator.create_session(self.learner_id)
        for _ in range(turns):
            self.turn(session.session_id)
        self.orchestrator.end_session(self.learner_id, session.session_id)
        return session

    def test_analysis_updates_mastery_and_summary(self):
        session = self.finished_session()

        outcome = self.orchestrator.analyze_session(self.learner_id, session.session_id)

        mastery = self.store.get_concept_mastery(self.learner_id, A1_IDS[0])
        self.assertAlmostEqual(mastery.mastery_score, 0.56)
        self.assertEqual(mastery.practice_count, 1)
        self.assertEqual(mastery.last_practiced, NOW)
        # The malformed score was skipped, not applied
        self.assertIsNone(self.store.get_concept_mastery(self.learner_id, A1_IDS[1]))
        self.assertEqual(len(outcome.mastery_updates.skipped), 1)

        summary = self.session(session.session_id).summary
        self.assertEqual(summary.topics_covered, "Talking about family")
        self.assertEqual(summary.concept_scores, {A1_IDS[0]: 0.8})
        self.assertEqual(outcome.suggested_focus, [A1_IDS[2]])
        self.assertEqual(outcome.to_dict()["summary"]["overall_notes"], "Solid start")

    def test_reanalysis_replaces_summary(self):
        session = self.finished_session()

        self.orchestrator.analyze_session(self.learner_id, session.session_id)
        self.orchestrator.analyze_session(self.learner_id, session.session_id)

        self.assertEqual(self.store.count_summaries(self.learner_id, session.session_id), 1)
        mastery = self.store.get_concept_mastery(self.learner_id, A1_IDS[0])
        self.assertEqual(mastery.practice_count, 2)
        self.assertAlmostEqual(mastery.mastery_score, 0.3 * 0.8 + 0.7 * 0.56)

    def test_too_short(self):
        session = self.finished_session(turns=1)

        with self.assertRaises(SessionTooShortError):
            self.orchestrator.analyze_session(self.learner_id, session.session_id)

    def test_must_be_ended(self):
        self.set_level(Level.A1)
        session = self.orchestrator.create_session(self.learner_id)
        self.turn(session.session_id)
        self.turn(session.session_id)

        with self.assertRaises(PreconditionError):
            self.orchestrator.analyze_session(self.learner_id, session.session_id)

    def test_missing_session(self):
        with self.assertRaises(NotFoundError):
            self.orchestrator.analyze_session(self.learner_id, "cs-missing")

    def test_unparseable_analysis_changes_nothing(self):
        session = self.finished_session()
        orchestrator = self.make_orchestrator(
            analyzer=SessionAnalyzer(llm=FakeListChatModel(responses=["I could not analyze this."]))
        )

        with self.assertRaises(AnalysisParseError) as ctx:
            orchestrator.analyze_session(self.learner_id, session.session_id)

        self.assertEqual(ctx.exception.public_message, "Failed to analyze session")
        self.assertEqual(self.store.list_concept_masteries(self.learner_id), [])
        self.assertIsNone(self.session(session.session_id).summary)

    def test_store_failure_rolls_back_mastery(self):
        session = self.finished_session()

        with patch.object(self.store, "upsert_summary", side_effect=RuntimeError("disk full")):
            with self.assertRaises(RuntimeError):
                self.orchestrator.analyze_session(self.learner_id, session.session_id)

        self.assertEqual(self.store.list_concept_masteries(self.learner_id), [])


class TestPlacement(OrchestratorTestCase):
    def test_placement_sets_profile_and_history(self):
        session = self.orchestrator.create_session(self.learner_id, SessionType.PLACEMENT)
        self.turn(session.session_id)

        outcome = self.orchestrator.analyze_placement(self.learner_id, session.session_id)

        self.assertEqual(outcome.level, Level.A2)
        profile = self.store.get_profile(self.learner_id)
        self.assertEqual(profile.current_level, Level.A2)
        self.assertEqual(profile.grammar_score, 0.4)
        self.assertEqual(profile.placement_completed_at, NOW)
        self.assertTrue(self.session(session.session_id).is_ended)

        history = self.store.list_level_history(self.learner_id)
        self.assertEqual(len(history), 1)
        self.assertEqual((history[0].from_level, history[0].to_level), (Level.A0, Level.A2))
        self.assertEqual(history[0].reason, "Placement assessment: Comfortable with passé composé")

    def test_placement_on_already_ended_session(self):
        session = self.orchestrator.create_session(self.learner_id, SessionType.PLACEMENT)
        self.orchestrator.end_session(self.learner_id, session.session_id)

        outcome = self.orchestrator.analyze_placement(self.learner_id, session.session_id)

        self.assertEqual(outcome.to_dict()["level"], "A2")

    def test_requires_placement_session(self):
        session = self.orchestrator.create_session(self.learner_id, SessionType.LESSON)

        with self.assertRaises(NotFoundError):
            self.orchestrator.analyze_placement(self.learner_id, session.session_id)

    def test_assessor_failure_leaves_no_profile(self):
        assessor = MagicMock()
        assessor.assess.side_effect = AnalysisParseError("bad level", "Failed to analyze placement")
        orchestrator = self.make_orchestrator(placement_assessor=assessor)
        session = orchestrator.create_session(self.learner_id, SessionType.PLACEMENT)

        with self.assertRaises(OracleError):
            orchestrator.analyze_placement(self.learner_id, session.session_id)

        self.assertIsNone(self.store.get_profile(self.learner_id))
        self.assertFalse(self.session(session.session_id).is_ended)

    def test_skip_placement(self):
        profile = self.orchestrator.skip_placement(self.learner_id)

        self.assertEqual(profile.current_level, Level.A0)
        self.assertEqual(set(profile.sub_scores().values()), {0.0})
        history = self.store.list_level_history(self.learner_id)
        self.assertEqual(history[0].reason, PLACEMENT_SKIPPED_REASON)

    def test_skip_after_placement_records_previous_level(self):
        self.set_level(Level.B1)

        self.orchestrator.skip_placement(self.learner_id)

        entry = self.store.list_level_history(self.learner_id)[-1]
        self.assertEqual((entry.from_level, entry.to_level), (Level.B1, Level.A0))


class TestLevelAssessment(OrchestratorTestCase):
    def master(self, concept_ids, score):
        for concept_id in concept_ids:
            self.store.update_concept_mastery(
                self.learner_id,
                concept_id,
                lambda _, cid=concept_id: ConceptMastery(self.learner_id, cid, score, 3, NOW),
            )

    def test_requires_profile(self):
        with self.assertRaises(NotFoundError):
            self.orchestrator.assess_level(self.learner_id)

    def test_promotion_applied(self):
        self.set_level(Level.A1)
        self.master(A1_IDS, 0.9)

        decision = self.orchestrator.assess_level(self.learner_id)

        self.assertEqual(decision.new_level, Level.A2)
        self.assertEqual(self.store.get_profile(self.learner_id).current_level, Level.A2)
        entry = self.store.list_level_history(self.learner_id)[-1]
        self.assertEqual(entry.reason, "Achieved 100% coverage with 90% average mastery at A1")
        self.assertEqual(entry.created_at, NOW)

    def test_demotion_applied(self):
        self.set_level(Level.A1)
        self.master(A1_IDS[:6], 0.1)

        decision = self.orchestrator.assess_level(self.learner_id)

        self.assertEqual(decision.level_change, "down")
        self.assertEqual(self.store.get_profile(self.learner_id).current_level, Level.A0)

    def test_other_levels_do_not_count(self):
        self.set_level(Level.A1)
        self.master(all_concept_ids(Level.A0), 1.0)

        decision = self.orchestrator.assess_level(self.learner_id)

        self.assertEqual(decision.level_change, "none")
        self.assertEqual(decision.stats.concepts_practiced, 0)
        self.assertEqual(self.store.list_level_history(self.learner_id), [])


class TestProgress(OrchestratorTestCase):
    def test_no_profile_yet(self):
        progress = self.orchestrator.get_progress(self.learner_id)
        self.assertIsNone(progress["profile"])
        self.assertEqual(progress["stats"]["total_sessions"], 0)

    def test_stats_keys_same_before_and_after_placement(self):
        before = self.orchestrator.get_progress(self.learner_id)["stats"]
        self.orchestrator.skip_placement(self.learner_id)
        after = self.orchestrator.get_progress(self.learner_id)["stats"]

        self.assertEqual(set(before), set(after))
        self.assertEqual(before["mastery_summary"]["count"], 0)
        self.assertEqual(before["mastery_histogram"], [])
        self.assertEqual(before["concepts_mastered"], 0)

    def test_dashboard(self):
        self.orchestrator.skip_placement(self.learner_id)
        session = self.orchestrator.create_session(self.learner_id)
        self.turn(session.session_id)
        a0 = all_concept_ids(Level.A0)
        self.orchestrator.mastery_updater.apply(self.learner_id, {a0[0]: 0.5, a0[1]: 1.0})
        self.orchestrator.mastery_updater.apply(self.learner_id, {a0[1]: 1.0})

        progress = self.orchestrator.get_progress(self.learner_id)

        self.assertEqual(progress["profile"]["current_level"], "A0")
        self.assertEqual(
            [m["concept_id"] for m in progress["masteries"]], [a0[1], a0[0]]
        )
        stats = progress["stats"]
        self.assertEqual(stats["total_sessions"], 1)
        self.assertEqual(stats["total_messages"], 2)
        self.assertEqual(stats["current_streak"], 1)
        self.assertEqual(stats["concepts_mastered"], 1)
        self.assertEqual(stats["total_concepts_in_level"], len(a0))
        self.assertEqual(stats["mastery_summary"]["count"], 2)
        self.assertEqual(progress["level_history"][0]["reason"], PLACEMENT_SKIPPED_REASON)


if __name__ == "__main__":
    unittest.main()
