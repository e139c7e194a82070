"""
Utility modules for the tutoring core.

This module contains:
- validation: JSON extraction and JSON Schema validation with auto-repair
- persistence: transactional in-process store with JSON snapshots
- rate_limit: clock-injected fixed-window rate limiting
- progress: analytics and session-memory rendering
"""

from .validation import (
    PlacementAnalysisValidator,
    SchemaValidator,
    SessionAnalysisValidator,
    ValidationResult,
    extract_json_object,
    parse_json_object,
    validate_placement_analysis,
    validate_session_analysis,
)
from .persistence import TutorStore
from .rate_limit import RateLimiter, RateLimitStatus, analysis_rate_limiter, chat_rate_limiter
from .progress import (
    format_session_summary,
    learning_streak,
    level_progress,
    mastery_by_concept_type,
    mastery_histogram,
    mastery_summary,
    recent_session_summaries,
)

__all__ = [
    # Validation
    "PlacementAnalysisValidator",
    "SchemaValidator",
    "SessionAnalysisValidator",
    "ValidationResult",
    "extract_json_object",
    "parse_json_object",
    "validate_placement_analysis",
    "validate_session_analysis",
    # Persistence
    "TutorStore",
    # Rate limiting
    "RateLimiter",
    "RateLimitStatus",
    "analysis_rate_limiter",
    "chat_rate_limiter",
    # Progress analytics
    "format_session_summary",
    "learning_streak",
    "level_progress",
    "mastery_by_concept_type",
    "mastery_histogram",
    "mastery_summary",
    "recent_session_summaries",
]
