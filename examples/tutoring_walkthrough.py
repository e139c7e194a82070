"""
Tutoring walkthrough: Placement → Lesson → Analysis → Level check

Demonstrates one learner's path through the tutoring core:
1. Register a learner and skip placement (start at A0)
2. Run a short lesson with streamed replies
3. End the session and analyze it into concept mastery
4. Check for a level transition
5. Show progress and save a store snapshot

Requires OPENAI_API_KEY (a .env file works).
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from lingotutor.config import config, configure_logging, token_tracker
from lingotutor.models.session import SessionType
from lingotutor.orchestrator import TutoringOrchestrator

LEARNER_TURNS = [
    "Bonjour ! Je m'appelle Sam.",
    "Je suis étudiant. Et toi ?",
    "Merci, au revoir !",
]


def banner(title: str):
    print("=" * 60)
    print(title)
    print("=" * 60)


def main():
    problems = config.validate()
    if problems:
        print("⚠ Configuration problems:")
        for problem in problems:
            print(f"  - {problem}")
        return 1

    configure_logging()
    config.prepare_fs()
    orchestrator = TutoringOrchestrator()

    # ==================== Step 1: Learner ====================
    banner("STEP 1: Registering learner")
    learner = orchestrator.register_learner("Sam")
    profile = orchestrator.skip_placement(learner.learner_id)
    print(f"✓ Learner {learner.learner_id} starts at {profile.current_level}")
    print()

    # ==================== Step 2: Lesson ====================
    banner("STEP 2: Lesson")
    session = orchestrator.create_session(learner.learner_id, SessionType.LESSON)

    for text in LEARNER_TURNS:
        print(f"\n👤 {text}")
        print("🇫🇷 ", end="", flush=True)
        for event in orchestrator.send_message(learner.learner_id, session.session_id, text):
            if event.type == "delta":
                print(event.text, end="", flush=True)
            elif event.type == "error":
                print(f"\n✗ {event.error}")
        print()

    session = orchestrator.get_session(learner.learner_id, session.session_id)
    print(f"\n✓ Focus concepts: {', '.join(session.focus_concepts) or 'none'}")
    print()

    # ==================== Step 3: Analysis ====================
    banner("STEP 3: Ending and analyzing the session")
    orchestrator.end_session(learner.learner_id, session.session_id)
    outcome = orchestrator.analyze_session(learner.learner_id, session.session_id)

    print(f"  Topics: {outcome.summary.topics_covered}")
    for change in outcome.mastery_updates.changes:
        print(f"  {change.concept_id}: {change.new_score:.2f} (seen {change.practice_count}x)")
    if outcome.mastery_updates.skipped:
        print(f"  Skipped {len(outcome.mastery_updates.skipped)} malformed score(s)")
    print()

    # ==================== Step 4: Level check ====================
    banner("STEP 4: Level assessment")
    decision = orchestrator.assess_level(learner.learner_id)
    stats = decision.stats.to_dict()
    print(f"  Coverage: {stats['coverage']}%  Average: {stats['average_mastery']}%")
    if decision.changed:
        print(f"✓ {decision.reason} → now {decision.new_level}")
    else:
        print(f"  Staying at {decision.current_level}")
    print()

    # ==================== Step 5: Progress ====================
    banner("STEP 5: Progress")
    progress = orchestrator.get_progress(learner.learner_id)
    for key in ("total_sessions", "total_messages", "current_streak", "level_progress"):
        print(f"  {key}: {progress['stats'][key]}")

    path = orchestrator.store.save()
    print(f"\n✓ Snapshot saved to {path}")
    print(f"\n{token_tracker.summary()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
