"""
Tutoring Orchestrator

Drives the session lifecycle around the tutoring core:
1. Learner registration and placement (assessed or skipped)
2. Session creation with per-learner numbering and model choice
3. Conversation turns: focus selection, prompt composition, streamed replies
4. Session end and post-session analysis into mastery
5. Level assessment (promotion/demotion)
6. Progress and history views

This is the main entry point for callers such as a web layer.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Iterator, Literal, Optional

from .agents.placement_assessor import PlacementAssessment, PlacementAssessor
from .agents.session_analyzer import SessionAnalyzer
from .agents.tutor_agent import TutorAgent
from .config import TutoringConfig, config
from .curriculum import Level, all_concept_ids
from .errors import (
    InputValidationError,
    NotFoundError,
    OracleError,
    PreconditionError,
    SessionBusyError,
    SessionEndedError,
    SessionTooShortError,
)
from .models.learner_profile import Learner, LevelHistoryEntry, SkillProfile
from .models.level_transition import LevelDecision, LevelTransitionEvaluator
from .models.mastery import MasteryUpdater, MasteryUpdateResult
from .models.memory import select_focus_concepts
from .models.session import (
    ConversationSession,
    MessageRole,
    SessionSummary,
    SessionType,
    utc_now,
)
from .prompts import build_system_prompt
from .utils.persistence import TutorStore
from .utils.progress import (
    learning_streak,
    level_progress,
    mastery_by_concept_type,
    mastery_histogram,
    mastery_summary,
    recent_session_summaries,
)
from .utils.rate_limit import RateLimiter, analysis_rate_limiter, chat_rate_limiter

logger = logging.getLogger(__name__)

PLACEMENT_SKIPPED_REASON = "Skipped placement - starting as complete beginner"
CANCELLED_MESSAGE = "The request was cancelled."
SESSION_LIST_LIMIT = 50
PROGRESS_SESSION_LIMIT = 30


# ==================== Result Models ====================

@dataclass(frozen=True)
class StreamEvent:
    """
    One event of a streamed turn.

    A turn yields zero or more "delta" events followed by exactly one
    terminal "done" or "error" event.
    """

    type: Literal["delta", "done", "error"]
    text: str = ""
    message_id: Optional[str] = None
    error: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.type != "delta"

    def to_dict(self) -> dict[str, Any]:
        if self.type == "delta":
            return {"type": "delta", "text": self.text}
        if self.type == "done":
            return {"type": "done", "messageId": self.message_id}
        return {"type": "error", "error": self.error}


@dataclass
class SessionAnalysisOutcome:
    """What analyze_session returns to callers."""

    summary: SessionSummary
    concept_scores: list[Any] = field(default_factory=list)
    suggested_focus: list[str] = field(default_factory=list)
    mastery_updates: MasteryUpdateResult = field(default_factory=MasteryUpdateResult)

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": self.summary.to_dict(),
            "concept_scores": list(self.concept_scores),
            "suggested_focus": list(self.suggested_focus),
            "mastery_updates": self.mastery_updates.to_dict(),
        }


@dataclass
class PlacementOutcome:
    level: Level
    assessment: PlacementAssessment
    profile: SkillProfile

    def to_dict(self) -> dict[str, Any]:
        return {
            "level": self.level.value,
            "analysis": self.assessment.to_dict(),
            "profile": self.profile.to_dict(),
        }


class _TurnCancelled(Exception):
    pass


def _require_text(value: Any, name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InputValidationError(f"{name} is required")
    return value


# ==================== Orchestrator ====================

class TutoringOrchestrator:
    """
    Main orchestrator for the tutoring system.

    Manages:
    - Learners, placement and skill profiles
    - Conversation sessions and streamed turns
    - Post-session analysis and mastery updates
    - Level transitions and progress views
    """

    def __init__(
        self,
        store: Optional[TutorStore] = None,
        tutor: Optional[TutorAgent] = None,
        analyzer: Optional[SessionAnalyzer] = None,
        placement_assessor: Optional[PlacementAssessor] = None,
        chat_limiter: Optional[RateLimiter] = None,
        analysis_limiter: Optional[RateLimiter] = None,
        settings: Optional[TutoringConfig] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize the tutoring orchestrator.

        Args:
            store: Transactional store (new in-memory store if None)
            tutor: Conversational agent (built from config if None)
            analyzer: Session analysis agent (built lazily if None)
            placement_assessor: Placement agent (built lazily if None)
            chat_limiter: Per-learner limiter for conversation turns
            analysis_limiter: Per-learner limiter for analysis calls
            settings: Tutoring constants
            clock: Returns the current aware datetime
        """
        self.store = store if store is not None else TutorStore()
        self.settings = settings or config.tutoring
        self.clock = clock
        self._tutor = tutor
        self._analyzer = analyzer
        self._placement_assessor = placement_assessor
        self.chat_limiter = chat_limiter if chat_limiter is not None else chat_rate_limiter()
        self.analysis_limiter = (
            analysis_limiter if analysis_limiter is not None else analysis_rate_limiter()
        )

        self.mastery_updater = MasteryUpdater(self.store, self.settings, clock)
        self.level_evaluator = LevelTransitionEvaluator(self.settings)

        self._session_locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    # Agents are built on first use so a store-only orchestrator needs no API key
    @property
    def tutor(self) -> TutorAgent:
        if self._tutor is None:
            self._tutor = TutorAgent()
        return self._tutor

    @property
    def analyzer(self) -> SessionAnalyzer:
        if self._analyzer is None:
            self._analyzer = SessionAnalyzer()
        return self._analyzer

    @property
    def placement_assessor(self) -> PlacementAssessor:
        if self._placement_assessor is None:
            self._placement_assessor = PlacementAssessor()
        return self._placement_assessor

    def _session_lock(self, session_id: str) -> threading.Lock:
        with self._locks_guard:
            if session_id not in self._session_locks:
                self._session_locks[session_id] = threading.Lock()
            return self._session_locks[session_id]

    def _acquire_session(self, session_id: str) -> threading.Lock:
        """Wait for the session's in-flight turn, if any, up to the request timeout."""
        lock = self._session_lock(session_id)
        if not lock.acquire(timeout=config.model.request_timeout):
            raise SessionBusyError(f"Another turn is in flight for session {session_id}")
        return lock

    def _forget_session_lock(self, session_id: str) -> None:
        with self._locks_guard:
            self._session_locks.pop(session_id, None)

    def sweep(self) -> int:
        """Drop expired rate-limit windows; returns how many were removed."""
        removed = self.chat_limiter.sweep() + self.analysis_limiter.sweep()
        if removed:
            logger.debug("Swept %d expired rate-limit windows", removed)
        return removed

    def _current_level(self, learner_id: str) -> Level:
        profile = self.store.get_profile(learner_id)
        return profile.current_level if profile else Level.lowest()

    # ==================== Learners ====================

    def register_learner(self, name: Optional[str] = None, learner_id: Optional[str] = None) -> Learner:
        """Add a learner; the name is used by the tutor when present."""
        learner = Learner(name=name.strip() if name else None)
        if learner_id is not None:
            learner.learner_id = _require_text(learner_id, "learner_id")
        stored = self.store.add_learner(learner)
        logger.info("Registered learner %s", stored.learner_id)
        return stored

    # ==================== Sessions ====================

    def create_session(
        self, learner_id: str, session_type: SessionType | str = SessionType.LESSON
    ) -> ConversationSession:
        """
        Start a new session.

        Raises:
            InputValidationError: Unknown session type or missing learner id
            NotFoundError: Unknown learner
        """
        _require_text(learner_id, "learner_id")
        try:
            session_type = SessionType(session_type)
        except ValueError as e:
            raise InputValidationError(f"Invalid session type: {session_type!r}") from e

        with self.store.transaction():
            self.store.get_learner(learner_id)
            session = ConversationSession(
                learner_id=learner_id,
                session_type=session_type,
                session_number=self.store.next_session_number(learner_id),
                ai_model=config.model.model_for_session(session_type),
                started_at=self.clock(),
            )
            stored = self.store.add_session(session)

        logger.info(
            "Created %s session #%d for %s",
            session_type.value,
            stored.session_number,
            learner_id,
        )
        return stored

    def get_session(self, learner_id: str, session_id: str) -> ConversationSession:
        """Session with its messages and summary."""
        _require_text(learner_id, "learner_id")
        _require_text(session_id, "session_id")
        return self.store.get_session(learner_id, session_id)

    def list_sessions(self, learner_id: str, limit: int = SESSION_LIST_LIMIT) -> list[dict[str, Any]]:
        """Most recent sessions with a short summary, newest first."""
        _require_text(learner_id, "learner_id")
        self.store.get_learner(learner_id)
        listing = []
        for session in self.store.list_sessions(learner_id, limit):
            entry = session.to_dict(include_messages=False)
            entry["summary"] = (
                {
                    "topics_covered": session.summary.topics_covered,
                    "overall_notes": session.summary.overall_notes,
                }
                if session.summary
                else None
            )
            listing.append(entry)
        return listing

    def end_session(self, learner_id: str, session_id: str) -> ConversationSession:
        """
        Mark a session ended; it accepts no further messages.

        Waits for a turn that is still streaming so its reply is saved first.
        Also sweeps expired rate-limit windows.

        Raises:
            SessionEndedError: The session was already ended
            SessionBusyError: A turn kept the session past the request timeout
        """
        _require_text(learner_id, "learner_id")
        _require_text(session_id, "session_id")

        lock = self._acquire_session(session_id)
        try:
            now = self.clock()
            self.store.update_session(learner_id, session_id, lambda s: s.end(now))
        finally:
            lock.release()
        self._forget_session_lock(session_id)
        self.sweep()

        logger.info("Ended session %s", session_id)
        return self.store.get_session(learner_id, session_id)

    # ==================== Conversation turns ====================

    def send_message(
        self,
        learner_id: str,
        session_id: str,
        message: str,
        cancel_event: Optional[threading.Event] = None,
    ) -> Iterator[StreamEvent]:
        """
        Run one conversation turn and stream the reply.

        Input, ownership, session state and rate limit are checked before
        this returns; the turn itself runs as the returned iterator is consumed.

        Args:
            learner_id: Learner sending the message
            session_id: Target session
            message: Learner's text
            cancel_event: Set it to abandon the turn

        Returns:
            Iterator of StreamEvent: deltas, then one "done" or "error"

        Raises:
            InputValidationError: Missing ids or empty message
            NotFoundError: Unknown learner or session
            SessionEndedError: Session already ended
            RateLimitExceededError: Too many turns for this learner
        """
        _require_text(learner_id, "learner_id")
        _require_text(session_id, "session_id")
        _require_text(message, "message")

        session = self.store.get_session(learner_id, session_id)
        if session.is_ended:
            raise SessionEndedError(f"Session {session_id} has ended")
        self.chat_limiter.enforce(learner_id)

        return self._run_turn(learner_id, session_id, message, cancel_event)

    def _prepare_turn(self, learner_id: str, session_id: str) -> tuple[ConversationSession, str]:
        """Freeze focus on the first turn and compose the system prompt."""
        learner = self.store.get_learner(learner_id)
        level = self._current_level(learner_id)

        session = self.store.get_session(learner_id, session_id)
        if not session.focus_frozen:
            if session.is_placement:
                focus: list[str] = []
            else:
                focus = select_focus_concepts(
                    self.store.list_concept_masteries(learner_id),
                    all_concept_ids(level),
                    self.clock(),
                    self.settings,
                )
            self.store.update_session(learner_id, session_id, lambda s: s.freeze_focus(focus))
            session = self.store.get_session(learner_id, session_id)
            logger.debug("Focus for session %s: %s", session_id, focus)

        summaries = recent_session_summaries(
            self.store.list_sessions(learner_id), self.settings.summary_window
        )
        system_prompt = build_system_prompt(
            level=level,
            session_type=session.session_type,
            focus_concepts=session.focus_concepts,
            conversation_summaries=summaries,
            learner_name=learner.name,
            settings=self.settings,
        )
        return session, system_prompt

    def _run_turn(
        self,
        learner_id: str,
        session_id: str,
        message: str,
        cancel_event: Optional[threading.Event],
    ) -> Iterator[StreamEvent]:
        lock = self._acquire_session(session_id)

        try:
            # Ended while this turn waited for the lock
            if self.store.get_session(learner_id, session_id).is_ended:
                raise SessionEndedError(f"Session {session_id} has ended")

            session, system_prompt = self._prepare_turn(learner_id, session_id)

            # The learner's message is durable before the oracle sees it
            user_message = self.store.append_message(
                learner_id, session_id, MessageRole.USER, message
            )
            history = self.store.get_session(learner_id, session_id).messages
            history = history[-self.settings.history_window:]

            produced: list[str] = []
            replies = self.tutor.stream_reply(system_prompt, history, session.ai_model)
            try:
                for delta in replies:
                    if cancel_event is not None and cancel_event.is_set():
                        raise _TurnCancelled()
                    produced.append(delta)
                    yield StreamEvent(type="delta", text=delta)
                if cancel_event is not None and cancel_event.is_set():
                    raise _TurnCancelled()
            except _TurnCancelled:
                self.store.remove_message(learner_id, session_id, user_message.message_id)
                logger.info("Turn cancelled in session %s", session_id)
                yield StreamEvent(type="error", error=CANCELLED_MESSAGE)
                return
            except GeneratorExit:
                # Consumer went away mid-stream
                self.store.remove_message(learner_id, session_id, user_message.message_id)
                logger.info("Turn abandoned in session %s", session_id)
                raise
            except OracleError as e:
                if produced:
                    self.store.append_message(
                        learner_id, session_id, MessageRole.ASSISTANT, "".join(produced)
                    )
                    logger.warning(
                        "Saved partial reply (%d chars) after oracle failure in %s",
                        len("".join(produced)),
                        session_id,
                    )
                yield StreamEvent(type="error", error=e.public_message)
                return
            finally:
                replies.close()

            assistant = self.store.append_message(
                learner_id, session_id, MessageRole.ASSISTANT, "".join(produced)
            )
            yield StreamEvent(type="done", message_id=assistant.message_id)
        finally:
            lock.release()

    # ==================== Analysis ====================

    def analyze_session(self, learner_id: str, session_id: str) -> SessionAnalysisOutcome:
        """
        Analyze an ended session and fold its concept scores into mastery.

        The summary upsert and all mastery updates happen in one transaction;
        an oracle failure leaves stored state untouched.

        Raises:
            PreconditionError: Session not ended yet
            SessionTooShortError: Fewer messages than required
            OracleError / AnalysisParseError: Analysis call failed
            RateLimitExceededError: Too many analyses for this learner
        """
        _require_text(learner_id, "learner_id")
        _require_text(session_id, "session_id")

        session = self.store.get_session(learner_id, session_id)
        if not session.is_ended:
            raise PreconditionError(f"Session {session_id} must be ended before analysis")
        if session.message_count < self.settings.min_messages_for_analysis:
            raise SessionTooShortError(
                f"Session {session_id} has {session.message_count} messages; "
                f"at least {self.settings.min_messages_for_analysis} are needed"
            )
        self.analysis_limiter.enforce(learner_id)

        analysis = self.analyzer.analyze(session.transcript(), session.focus_concepts)

        with self.store.transaction():
            updates = self.mastery_updater.apply(learner_id, analysis.concept_scores)
            applied = {c.concept_id: c.observed_score for c in updates.changes}
            summary = self.store.upsert_summary(
                learner_id, session_id, analysis.to_summary(applied)
            )

        logger.info(
            "Analyzed session %s: %d concept updates", session_id, len(updates.changes)
        )
        return SessionAnalysisOutcome(
            summary=summary,
            concept_scores=analysis.concept_scores,
            suggested_focus=analysis.suggested_focus,
            mastery_updates=updates,
        )

    # ==================== Placement ====================

    def analyze_placement(self, learner_id: str, session_id: str) -> PlacementOutcome:
        """
        Place the learner from a PLACEMENT session.

        Sets the skill profile, ends the session and records the placement
        in the level history.

        Raises:
            NotFoundError: No such placement session for this learner
            OracleError / AnalysisParseError: Assessment failed or gave an unknown level
        """
        _require_text(learner_id, "learner_id")
        _require_text(session_id, "session_id")

        session = self.store.get_session(learner_id, session_id)
        if not session.is_placement:
            raise NotFoundError("Placement session", session_id)
        self.analysis_limiter.enforce(learner_id)

        assessment = self.placement_assessor.assess(session.transcript())
        now = self.clock()

        with self.store.transaction():
            previous = self.store.get_profile(learner_id)
            profile = self.store.save_profile(
                SkillProfile(
                    learner_id=learner_id,
                    current_level=assessment.level,
                    comprehension_score=assessment.comprehension,
                    vocabulary_score=assessment.vocabulary,
                    grammar_score=assessment.grammar,
                    fluency_score=assessment.fluency,
                    placement_completed_at=now,
                )
            )
            if not session.is_ended:
                self.store.update_session(learner_id, session_id, lambda s: s.end(now))
            self.store.append_level_history(
                LevelHistoryEntry(
                    learner_id=learner_id,
                    from_level=previous.current_level if previous else Level.lowest(),
                    to_level=assessment.level,
                    reason=f"Placement assessment: {assessment.reasoning}",
                    created_at=now,
                )
            )

        logger.info("Placed learner %s at %s", learner_id, assessment.level)
        return PlacementOutcome(level=assessment.level, assessment=assessment, profile=profile)

    def skip_placement(self, learner_id: str) -> SkillProfile:
        """Start the learner at the lowest level with zeroed sub-scores."""
        _require_text(learner_id, "learner_id")
        now = self.clock()
        lowest = Level.lowest()

        with self.store.transaction():
            self.store.get_learner(learner_id)
            previous = self.store.get_profile(learner_id)
            profile = self.store.save_profile(
                SkillProfile(
                    learner_id=learner_id,
                    current_level=lowest,
                    placement_completed_at=now,
                )
            )
            self.store.append_level_history(
                LevelHistoryEntry(
                    learner_id=learner_id,
                    from_level=previous.current_level if previous else lowest,
                    to_level=lowest,
                    reason=PLACEMENT_SKIPPED_REASON,
                    created_at=now,
                )
            )

        logger.info("Learner %s skipped placement", learner_id)
        return profile

    # ==================== Level assessment ====================

    def assess_level(self, learner_id: str) -> LevelDecision:
        """
        Evaluate promotion/demotion and apply it.

        Returns:
            LevelDecision, including the statistics, whether or not the level changed

        Raises:
            NotFoundError: The learner has no skill profile yet
        """
        _require_text(learner_id, "learner_id")

        with self.store.transaction():
            profile = self.store.get_profile(learner_id)
            if profile is None:
                raise NotFoundError("Skill profile", learner_id)

            concept_ids = all_concept_ids(profile.current_level)
            decision = self.level_evaluator.evaluate(
                profile.current_level,
                concept_ids,
                self.store.list_concept_masteries(learner_id, concept_ids),
            )

            if decision.changed:
                profile.current_level = decision.new_level
                self.store.save_profile(profile)
                self.store.append_level_history(
                    LevelHistoryEntry(
                        learner_id=learner_id,
                        from_level=decision.current_level,
                        to_level=decision.new_level,
                        reason=decision.reason,
                        created_at=self.clock(),
                    )
                )
                logger.info(
                    "Level %s for %s: %s -> %s (%s)",
                    decision.level_change,
                    learner_id,
                    decision.current_level,
                    decision.new_level,
                    decision.reason,
                )

        return decision

    # ==================== Progress ====================

    def _progress_stats(
        self, level: Level, masteries: list, sessions: list[ConversationSession]
    ) -> dict[str, Any]:
        scores = {m.concept_id: m.mastery_score for m in masteries}
        return {
            "total_sessions": len(sessions),
            "total_messages": sum(s.message_count for s in sessions),
            "current_streak": learning_streak(
                (s.started_at for s in sessions), self.clock().date()
            ),
            **level_progress(level, masteries, self.settings.mastered_threshold),
            "mastery_summary": mastery_summary(scores),
            "mastery_histogram": mastery_histogram(scores),
            "concepts_by_type": mastery_by_concept_type(masteries),
        }

    def get_progress(self, learner_id: str) -> dict[str, Any]:
        """
        Dashboard view: profile, masteries, recent sessions, level history and stats.

        Before placement the lists are empty and the stats are zeroed, with
        the same keys as afterwards.
        """
        _require_text(learner_id, "learner_id")
        self.store.get_learner(learner_id)

        profile = self.store.get_profile(learner_id)
        if profile is None:
            return {
                "profile": None,
                "masteries": [],
                "recent_sessions": [],
                "level_history": [],
                "stats": self._progress_stats(Level.lowest(), [], []),
            }

        masteries = sorted(
            self.store.list_concept_masteries(learner_id),
            key=lambda m: (-m.mastery_score, m.concept_id),
        )
        sessions = self.store.list_sessions(learner_id, PROGRESS_SESSION_LIMIT)
        history = list(reversed(self.store.list_level_history(learner_id)))

        return {
            "profile": profile.to_dict(),
            "masteries": [m.to_dict() for m in masteries],
            "recent_sessions": [s.to_dict(include_messages=False) for s in sessions],
            "level_history": [e.to_dict() for e in history],
            "stats": self._progress_stats(profile.current_level, masteries, sessions),
        }
