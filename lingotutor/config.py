"""
Configuration management for lingotutor.

This module centralizes all configuration settings following 12-factor app principles:
- Secrets loaded from environment variables
- Sensible defaults for development
- Every tutoring threshold in one place
- Thread-safe token tracking
- Logging setup for the whole package
"""

import logging
import os
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


@dataclass
class ModelConfig:
    """LLM oracle configuration with OpenAI API settings."""

    api_key: str = field(default_factory=lambda: os.getenv("OPENAI_API_KEY", ""))
    base_url: Optional[str] = field(
        default_factory=lambda: os.getenv("OPENAI_BASE_URL")
    )

    # Cheaper model for ordinary turns, more capable one for assessment
    conversation_model: str = field(
        default_factory=lambda: os.getenv("TUTOR_CONVERSATION_MODEL", "gpt-4o-mini")
    )
    analysis_model: str = field(
        default_factory=lambda: os.getenv("TUTOR_ANALYSIS_MODEL", "gpt-4o")
    )

    conversation_temperature: float = 0.7
    analysis_temperature: float = 0.2
    max_tokens: int = 1024

    # The core never retries the oracle; retries belong to the caller
    max_retries: int = 0
    request_timeout: float = field(
        default_factory=lambda: float(os.getenv("REQUEST_TIMEOUT", "60.0"))
    )

    def model_for_session(self, session_type: str) -> str:
        """Pick the oracle model for a session type."""
        if str(session_type) == "PLACEMENT":
            return self.analysis_model
        return self.conversation_model


@dataclass
class TutoringConfig:
    """Constants of the memory, mastery and level-transition algorithms."""

    # Focus selection
    review_focus_limit: int = 3
    new_focus_limit: int = 2
    never_practiced_days: float = 999.0
    min_review_interval_days: float = 1.0
    review_interval_exponent: float = 1.5
    low_mastery_weight: float = 3.0

    # Conversation memory
    summary_window: int = 3
    history_window: int = 40
    min_messages_for_analysis: int = 4

    # Mastery updates
    first_observation_discount: float = 0.7
    ema_alpha: float = 0.3
    mastered_threshold: float = 0.7

    # Promotion
    promote_min_coverage: float = 0.70
    promote_min_average: float = 0.75
    promote_min_mastered_fraction: float = 0.60

    # Demotion
    demote_min_coverage: float = 0.50
    demote_max_average: float = 0.30
    demote_min_practiced: int = 5

    # Prompt previews
    level_vocabulary_preview: int = 8
    focus_vocabulary_preview: int = 6


@dataclass
class RateLimitConfig:
    """Boundary rate limits (window in seconds, max requests per window)."""

    chat_window_seconds: float = 60.0
    chat_max_requests: int = 20
    analysis_window_seconds: float = 60.0
    analysis_max_requests: int = 5


@dataclass
class PathConfig:
    """File system paths - single source of truth for all directories."""

    project_root: Path = field(default_factory=lambda: Path(__file__).parent)
    data_dir: Path = field(
        default_factory=lambda: Path(
            os.getenv("TUTOR_DATA_DIR", str(Path(__file__).parent.parent / "data"))
        )
    )

    store_snapshot: Path = field(init=False)
    logs_dir: Path = field(init=False)
    schemas_dir: Path = field(init=False)
    session_analysis_schema: Path = field(init=False)
    placement_analysis_schema: Path = field(init=False)
    store_schema: Path = field(init=False)

    def __post_init__(self):
        """Initialize computed paths."""
        self.store_snapshot = self.data_dir / "store.json"
        self.logs_dir = self.data_dir / "logs"
        self.schemas_dir = self.project_root / "schemas"
        self.session_analysis_schema = self.schemas_dir / "session_analysis.schema.json"
        self.placement_analysis_schema = self.schemas_dir / "placement_analysis.schema.json"
        self.store_schema = self.schemas_dir / "store_snapshot.schema.json"

    def prepare_filesystem(self):
        """
        Create directories if they don't exist.

        Separated from __post_init__ to avoid side-effects on import.
        Call this explicitly from your app entrypoint.
        """
        for directory in [self.data_dir, self.logs_dir]:
            directory.mkdir(parents=True, exist_ok=True)


@dataclass
class LoggingConfig:
    """Logging and token accounting configuration."""

    log_level: str = field(default_factory=lambda: os.getenv("TUTOR_LOG_LEVEL", "INFO"))
    log_format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    log_tokens: bool = True

    cost_per_1k_input: float = field(
        default_factory=lambda: float(os.getenv("COST_PER_1K_INPUT", "0.00015"))
    )
    cost_per_1k_output: float = field(
        default_factory=lambda: float(os.getenv("COST_PER_1K_OUTPUT", "0.0006"))
    )


class Config:
    """
    Main configuration class. Singleton pattern.

    Usage:
        from lingotutor.config import config

        timeout = config.model.request_timeout
        alpha = config.tutoring.ema_alpha

        # Prepare filesystem and logging (call once at startup)
        config.prepare_fs()
        configure_logging()
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance.paths = PathConfig()
            cls._instance.model = ModelConfig()
            cls._instance.tutoring = TutoringConfig()
            cls._instance.rate_limit = RateLimitConfig()
            cls._instance.logging = LoggingConfig()
        return cls._instance

    def prepare_fs(self):
        """Prepare filesystem (create directories). Call once at startup."""
        self.paths.prepare_filesystem()

    def validate(self) -> list[str]:
        """
        Validate configuration and return list of errors.

        Returns:
            List of error messages (empty if valid)
        """
        errors = []

        if not self.model.api_key:
            errors.append("OPENAI_API_KEY not set in environment")

        for name in ("conversation_temperature", "analysis_temperature"):
            value = getattr(self.model, name)
            if not (0 <= value <= 2):
                errors.append(f"{name} must be in [0, 2], got {value}")

        if self.model.max_tokens <= 0:
            errors.append(f"max_tokens must be > 0, got {self.model.max_tokens}")

        if self.model.request_timeout <= 0:
            errors.append(
                f"request_timeout must be > 0, got {self.model.request_timeout}"
            )

        tutoring = self.tutoring
        for name in (
            "first_observation_discount",
            "ema_alpha",
            "mastered_threshold",
            "promote_min_coverage",
            "promote_min_average",
            "promote_min_mastered_fraction",
            "demote_min_coverage",
            "demote_max_average",
        ):
            value = getattr(tutoring, name)
            if not (0 <= value <= 1):
                errors.append(f"Tutoring {name} must be in [0, 1], got {value}")

        if tutoring.review_focus_limit < 0 or tutoring.new_focus_limit < 0:
            errors.append("Focus limits must be >= 0")

        if tutoring.summary_window < 1:
            errors.append(f"summary_window must be >= 1, got {tutoring.summary_window}")

        for schema in (
            self.paths.session_analysis_schema,
            self.paths.placement_analysis_schema,
            self.paths.store_schema,
        ):
            if not schema.exists():
                errors.append(f"Schema not found: {schema}")

        return errors


# Global config instance
config = Config()


_logging_configured = False


def configure_logging(level: Optional[str] = None) -> None:
    """Install a stream handler on the package logger (idempotent)."""
    global _logging_configured
    package_logger = logging.getLogger("lingotutor")
    package_logger.setLevel((level or config.logging.log_level).upper())
    if _logging_configured:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(config.logging.log_format))
    package_logger.addHandler(handler)
    _logging_configured = True


# Thread-safe token tracking utility
class TokenTracker:
    """
    Thread-safe tracker for token usage and estimated costs.

    Usage:
        from lingotutor.config import token_tracker

        token_tracker.add_tokens(input_tokens=100, output_tokens=50)
        print(token_tracker.summary())
    """

    def __init__(self):
        self._lock = threading.Lock()
        self.input_tokens = 0
        self.output_tokens = 0
        self.total_calls = 0

    def add_tokens(self, input_tokens: int, output_tokens: int):
        """Add tokens from an API call (thread-safe)."""
        with self._lock:
            self.input_tokens += input_tokens
            self.output_tokens += output_tokens
            self.total_calls += 1

    def total_tokens(self) -> int:
        """Get total tokens used (thread-safe)."""
        with self._lock:
            return self.input_tokens + self.output_tokens

    def estimated_cost(self) -> float:
        """Calculate estimated cost in USD (thread-safe)."""
        with self._lock:
            return self._cost(self.input_tokens, self.output_tokens)

    @staticmethod
    def _cost(input_tokens: int, output_tokens: int) -> float:
        input_cost = (input_tokens / 1000) * config.logging.cost_per_1k_input
        output_cost = (output_tokens / 1000) * config.logging.cost_per_1k_output
        return input_cost + output_cost

    def summary(self) -> str:
        """Get formatted summary of usage."""
        stats = self.get_stats()
        return (
            "Token Usage Summary:\n"
            f"  API Calls: {stats['calls']}\n"
            f"  Input Tokens: {stats['input_tokens']:,}\n"
            f"  Output Tokens: {stats['output_tokens']:,}\n"
            f"  Total Tokens: {stats['total_tokens']:,}\n"
            f"  Estimated Cost: ${stats['estimated_cost']:.4f}"
        )

    def reset(self):
        """Reset counters (thread-safe)."""
        with self._lock:
            self.input_tokens = 0
            self.output_tokens = 0
            self.total_calls = 0

    def get_stats(self) -> dict:
        """Get current stats as dict (lock acquired once)."""
        with self._lock:
            input_tokens = self.input_tokens
            output_tokens = self.output_tokens
            total_calls = self.total_calls

        return {
            "calls": total_calls,
            "input_tokens": input_tokens,
            "output_tokens": output_tokens,
            "total_tokens": input_tokens + output_tokens,
            "estimated_cost": self._cost(input_tokens, output_tokens),
        }


# Global token tracker instance
token_tracker = TokenTracker()
