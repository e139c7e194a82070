"""
Tutoring store with transactional semantics and JSON snapshot persistence.

Holds every learner-scoped entity in process:
- Learners and their skill profiles
- Concept mastery keyed by (learner, concept)
- Conversation sessions with nested messages and optional summary
- Append-only level history

Reads return copies, so callers never mutate stored state by accident.
Every query is scoped by learner id.
"""

from __future__ import annotations

import json
import logging
import threading
from contextlib import contextmanager
from copy import deepcopy
from pathlib import Path
from typing import Callable, Iterator, Optional

from ..config import config
from ..errors import InputValidationError, NotFoundError
from ..models.learner_profile import (
    ConceptMastery,
    Learner,
    LevelHistoryEntry,
    SkillProfile,
)
from ..models.session import (
    ConversationMessage,
    ConversationSession,
    MessageRole,
    SessionSummary,
    utc_now,
)
from .validation import StoreSnapshotValidator

logger = logging.getLogger(__name__)

SNAPSHOT_SCHEMA_VERSION = 1


class TutorStore:
    """
    In-process transactional store.

    Thread-safe: all access goes through one re-entrant lock. `transaction()`
    holds the lock for the whole block and restores the previous state if
    the block raises.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._learners: dict[str, Learner] = {}
        self._profiles: dict[str, SkillProfile] = {}
        self._masteries: dict[tuple[str, str], ConceptMastery] = {}
        self._sessions: dict[str, ConversationSession] = {}
        self._history: list[LevelHistoryEntry] = []

    # ------------------------------------------------------------------ #
    # Transactions
    # ------------------------------------------------------------------ #

    def _state(self) -> tuple:
        return (
            self._learners,
            self._profiles,
            self._masteries,
            self._sessions,
            self._history,
        )

    def _restore(self, state: tuple) -> None:
        (
            self._learners,
            self._profiles,
            self._masteries,
            self._sessions,
            self._history,
        ) = state

    @contextmanager
    def transaction(self) -> Iterator[TutorStore]:
        """
        All-or-nothing block.

        Usage:
            with store.transaction():
                store.upsert_summary(...)
                updater.apply(...)
        """
        with self._lock:
            snapshot = deepcopy(self._state())
            try:
                yield self
            except BaseException:
                self._restore(snapshot)
                logger.debug("Transaction rolled back")
                raise

    # ------------------------------------------------------------------ #
    # Learners and profiles
    # ------------------------------------------------------------------ #

    def add_learner(self, learner: Learner) -> Learner:
        with self._lock:
            if learner.learner_id in self._learners:
                raise InputValidationError(f"Learner already exists: {learner.learner_id}")
            self._learners[learner.learner_id] = deepcopy(learner)
            return deepcopy(learner)

    def get_learner(self, learner_id: str) -> Learner:
        with self._lock:
            learner = self._learners.get(learner_id)
            if learner is None:
                raise NotFoundError("Learner", learner_id)
            return deepcopy(learner)

    def get_profile(self, learner_id: str) -> Optional[SkillProfile]:
        with self._lock:
            profile = self._profiles.get(learner_id)
            return deepcopy(profile) if profile else None

    def save_profile(self, profile: SkillProfile) -> SkillProfile:
        """Create or replace the learner's skill profile."""
        with self._lock:
            self.get_learner(profile.learner_id)
            profile = deepcopy(profile)
            profile.updated_at = utc_now()
            self._profiles[profile.learner_id] = profile
            return deepcopy(profile)

    # ------------------------------------------------------------------ #
    # Concept mastery
    # ------------------------------------------------------------------ #

    def get_concept_mastery(self, learner_id: str, concept_id: str) -> Optional[ConceptMastery]:
        with self._lock:
            mastery = self._masteries.get((learner_id, concept_id))
            return deepcopy(mastery) if mastery else None

    def list_concept_masteries(
        self, learner_id: str, concept_ids: Optional[set[str] | list[str]] = None
    ) -> list[ConceptMastery]:
        """The learner's mastery records, optionally restricted to some concepts."""
        wanted = set(concept_ids) if concept_ids is not None else None
        with self._lock:
            return [
                deepcopy(m)
                for (owner, concept_id), m in self._masteries.items()
                if owner == learner_id and (wanted is None or concept_id in wanted)
            ]

    def update_concept_mastery(
        self,
        learner_id: str,
        concept_id: str,
        fn: Callable[[Optional[ConceptMastery]], ConceptMastery],
    ) -> ConceptMastery:
        """
        Atomic read-modify-write of one mastery record.

        Args:
            learner_id: Owner
            concept_id: Concept key
            fn: Receives a copy of the current record (None if absent) and
                returns the record to store

        Returns:
            Copy of the stored record
        """
        with self._lock:
            self.get_learner(learner_id)
            current = self._masteries.get((learner_id, concept_id))
            updated = fn(deepcopy(current) if current else None)
            if updated.learner_id != learner_id or updated.concept_id != concept_id:
                raise InputValidationError("Mastery update changed the record identity")
            self._masteries[(learner_id, concept_id)] = deepcopy(updated)
            return deepcopy(updated)

    # ------------------------------------------------------------------ #
    # Level history (append-only)
    # ------------------------------------------------------------------ #

    def append_level_history(self, entry: LevelHistoryEntry) -> LevelHistoryEntry:
        with self._lock:
            self.get_learner(entry.learner_id)
            self._history.append(entry)
            return entry

    def list_level_history(self, learner_id: str) -> list[LevelHistoryEntry]:
        """Entries in insertion order (oldest first)."""
        with self._lock:
            return [e for e in self._history if e.learner_id == learner_id]

    # ------------------------------------------------------------------ #
    # Sessions
    # ------------------------------------------------------------------ #

    def add_session(self, session: ConversationSession) -> ConversationSession:
        with self._lock:
            self.get_learner(session.learner_id)
            if session.session_id in self._sessions:
                raise InputValidationError(f"Session already exists: {session.session_id}")
            self._sessions[session.session_id] = deepcopy(session)
            return deepcopy(session)

    def _owned_session(self, learner_id: str, session_id: str) -> ConversationSession:
        session = self._sessions.get(session_id)
        if session is None or session.learner_id != learner_id:
            raise NotFoundError("Session", session_id)
        return session

    def get_session(self, learner_id: str, session_id: str) -> ConversationSession:
        with self._lock:
            return deepcopy(self._owned_session(learner_id, session_id))

    def list_sessions(self, learner_id: str, limit: Optional[int] = None) -> list[ConversationSession]:
        """The learner's sessions, newest first."""
        with self._lock:
            sessions = [s for s in self._sessions.values() if s.learner_id == learner_id]
            sessions.sort(key=lambda s: (s.started_at, s.session_number), reverse=True)
            if limit is not None:
                sessions = sessions[:limit]
            return deepcopy(sessions)

    def next_session_number(self, learner_id: str) -> int:
        with self._lock:
            numbers = [
                s.session_number for s in self._sessions.values() if s.learner_id == learner_id
            ]
            return max(numbers, default=0) + 1

    def update_session(
        self,
        learner_id: str,
        session_id: str,
        fn: Callable[[ConversationSession], object],
    ):
        """
        Atomic mutation of one session.

        `fn` works on a copy; the copy is stored only if `fn` returns
        without raising. Returns whatever `fn` returns.
        """
        with self._lock:
            working = deepcopy(self._owned_session(learner_id, session_id))
            result = fn(working)
            self._sessions[session_id] = working
            return deepcopy(result)

    def append_message(
        self, learner_id: str, session_id: str, role: MessageRole, content: str
    ) -> ConversationMessage:
        return self.update_session(
            learner_id, session_id, lambda s: s.append_message(role, content)
        )

    def remove_message(self, learner_id: str, session_id: str, message_id: str) -> bool:
        return self.update_session(
            learner_id, session_id, lambda s: s.remove_message(message_id)
        )

    def upsert_summary(
        self, learner_id: str, session_id: str, summary: SessionSummary
    ) -> SessionSummary:
        """Set the session's single summary, replacing any previous one."""

        def apply(session: ConversationSession) -> SessionSummary:
            session.summary = deepcopy(summary)
            return session.summary

        return self.update_session(learner_id, session_id, apply)

    def count_summaries(self, learner_id: str, session_id: str) -> int:
        with self._lock:
            return 1 if self._owned_session(learner_id, session_id).summary else 0

    # ------------------------------------------------------------------ #
    # Snapshot persistence
    # ------------------------------------------------------------------ #

    def to_dict(self) -> dict:
        with self._lock:
            return {
                "meta": {
                    "schema_version": SNAPSHOT_SCHEMA_VERSION,
                    "saved_at": utc_now().isoformat(),
                },
                "learners": [learner.to_dict() for learner in self._learners.values()],
                "profiles": [p.to_dict() for p in self._profiles.values()],
                "masteries": [m.to_dict() for m in self._masteries.values()],
                "sessions": [s.to_dict() for s in self._sessions.values()],
                "level_history": [e.to_dict() for e in self._history],
            }

    def save(self, filepath: Optional[Path] = None) -> Path:
        """
        Write a JSON snapshot of the whole store.

        Args:
            filepath: Target file (defaults to the configured snapshot path)

        Returns:
            Path written
        """
        filepath = Path(filepath or config.paths.store_snapshot)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        data = self.to_dict()

        tmp = filepath.with_suffix(filepath.suffix + ".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        tmp.replace(filepath)

        logger.info("Saved store snapshot to %s", filepath)
        return filepath

    def load(self, filepath: Optional[Path] = None) -> TutorStore:
        """
        Replace the store contents with a validated snapshot.

        Raises:
            FileNotFoundError: If the snapshot does not exist
            InputValidationError: If the snapshot violates the schema
        """
        filepath = Path(filepath or config.paths.store_snapshot)
        with open(filepath, "r", encoding="utf-8") as f:
            data = json.load(f)

        result = StoreSnapshotValidator().validate(data)
        if not result.valid:
            raise InputValidationError(
                f"Invalid store snapshot {filepath}:\n" + "\n".join(result.errors)
            )

        learners = {d["learner_id"]: Learner.from_dict(d) for d in data["learners"]}
        profiles = {d["learner_id"]: SkillProfile.from_dict(d) for d in data["profiles"]}
        masteries = {
            (d["learner_id"], d["concept_id"]): ConceptMastery.from_dict(d)
            for d in data["masteries"]
        }
        sessions = {d["session_id"]: ConversationSession.from_dict(d) for d in data["sessions"]}
        history = [LevelHistoryEntry.from_dict(d) for d in data["level_history"]]

        with self._lock:
            self._restore((learners, profiles, masteries, sessions, history))

        logger.info("Loaded store snapshot from %s (%d learners)", filepath, len(learners))
        return self
