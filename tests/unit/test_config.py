"""
Unit tests for configuration system.

Tests:
- Config loading and initialization
- Path configuration
- Config validation
- Token tracker functionality
"""

import logging

import pytest

from lingotutor.config import (
    Config,
    ModelConfig,
    TokenTracker,
    config,
    configure_logging,
    token_tracker,
)


class TestConfig:
    """Test suite for Config class."""

    def test_config_singleton(self):
        """Test that Config implements singleton pattern."""
        config1 = Config()
        config2 = Config()
        assert config1 is config2, "Config should be a singleton"

    def test_tutoring_defaults(self):
        """Test that the algorithm constants have their documented values."""
        t = config.tutoring
        assert (t.review_focus_limit, t.new_focus_limit) == (3, 2)
        assert t.never_practiced_days == 999
        assert t.first_observation_discount == 0.7
        assert t.ema_alpha == 0.3
        assert t.mastered_threshold == 0.7
        assert (t.promote_min_coverage, t.promote_min_average, t.promote_min_mastered_fraction) == (
            0.70,
            0.75,
            0.60,
        )
        assert (t.demote_min_coverage, t.demote_max_average, t.demote_min_practiced) == (
            0.50,
            0.30,
            5,
        )
        assert t.summary_window == 3
        assert t.history_window == 40

    def test_oracle_is_never_retried(self):
        """The core leaves retries to its caller."""
        assert config.model.max_retries == 0
        assert config.model.request_timeout > 0

    def test_model_for_session(self):
        """Placement uses the assessment model, everything else the conversation model."""
        model = ModelConfig(conversation_model="small", analysis_model="large")
        assert model.model_for_session("PLACEMENT") == "large"
        assert model.model_for_session("LESSON") == "small"
        assert model.model_for_session("FREE_CONVERSATION") == "small"

    def test_paths_configured(self):
        """Test that schema paths exist on disk."""
        assert config.paths.session_analysis_schema.exists()
        assert config.paths.placement_analysis_schema.exists()
        assert config.paths.store_schema.exists()

    def test_config_validation_returns_list(self):
        """Test that valid config passes validation."""
        original_key = config.model.api_key
        config.model.api_key = "test-key"

        errors = config.validate()

        config.model.api_key = original_key

        assert errors == []

    def test_config_validation_detects_missing_api_key(self):
        original_key = config.model.api_key
        config.model.api_key = ""

        errors = config.validate()

        config.model.api_key = original_key

        assert any("OPENAI_API_KEY" in err for err in errors)

    def test_config_validation_detects_invalid_temperature(self):
        """Test that config validation detects invalid temperature."""
        original_temp = config.model.conversation_temperature
        config.model.conversation_temperature = 3.0  # Invalid: > 2

        errors = config.validate()

        config.model.conversation_temperature = original_temp

        assert any("temperature" in err.lower() for err in errors)

    def test_config_validation_detects_invalid_ema_alpha(self):
        original = config.tutoring.ema_alpha
        config.tutoring.ema_alpha = 1.5

        errors = config.validate()

        config.tutoring.ema_alpha = original

        assert any("ema_alpha" in err for err in errors)

    def test_configure_logging_is_idempotent(self):
        configure_logging("DEBUG")
        configure_logging("WARNING")

        package_logger = logging.getLogger("lingotutor")
        assert package_logger.level == logging.WARNING
        assert len(package_logger.handlers) == 1

        package_logger.setLevel(logging.NOTSET)


class TestTokenTracker:
    """Test suite for TokenTracker class."""

    def test_token_tracker_initialization(self):
        """Test that token tracker initializes with zero counts."""
        assert token_tracker.input_tokens == 0
        assert token_tracker.output_tokens == 0
        assert token_tracker.total_calls == 0

    def test_add_tokens_multiple_calls(self):
        """Test adding tokens across multiple calls."""
        token_tracker.add_tokens(100, 50)
        token_tracker.add_tokens(200, 100)

        assert token_tracker.input_tokens == 300
        assert token_tracker.output_tokens == 150
        assert token_tracker.total_calls == 2
        assert token_tracker.total_tokens() == 450

    def test_estimated_cost(self):
        """Test cost estimation."""
        token_tracker.add_tokens(1000, 1000)

        cost = token_tracker.estimated_cost()
        assert cost > 0
        assert isinstance(cost, float)

    def test_summary(self):
        """Test summary string generation."""
        token_tracker.add_tokens(100, 50)

        summary = token_tracker.summary()

        assert "100" in summary
        assert "150" in summary
        assert "$" in summary

    def test_get_stats_and_reset(self):
        tracker = TokenTracker()
        tracker.add_tokens(100, 50)

        stats = tracker.get_stats()
        assert stats["calls"] == 1
        assert stats["total_tokens"] == 150

        tracker.reset()
        assert tracker.total_tokens() == 0

    def test_thread_safety_no_deadlock(self):
        """Test that summary() doesn't cause deadlock."""
        import threading

        def add_and_summarize():
            for _ in range(10):
                token_tracker.add_tokens(10, 5)
                _ = token_tracker.summary()
                _ = token_tracker.get_stats()

        threads = [threading.Thread(target=add_and_summarize) for _ in range(5)]

        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert token_tracker.total_calls == 50
