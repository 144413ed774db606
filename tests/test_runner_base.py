"""Tests for runner option, event and result types."""

from dataclasses import FrozenInstanceError

import pytest

from sequence_runner.runners.base import RunnerEvents, RunnerOptions, RunnerResult


class TestRunnerOptions:
    """Tests for RunnerOptions."""

    def test_defaults(self):
        """Test default option values."""
        options = RunnerOptions()
        assert options.sequential is True
        assert options.priority_based is False
        assert options.skip_allowed is True
        assert options.auto_start is True
        assert options.auto_start_delay == 0
        assert options.extras == {}

    def test_frozen(self):
        """Test options cannot change once built."""
        with pytest.raises(FrozenInstanceError):
            RunnerOptions().auto_start = False

    def test_from_dict_camel_case(self):
        """Test camelCase keys map to fields and the rest go to extras."""
        options = RunnerOptions.from_dict(
            {"priorityBased": True, "skipAllowed": False, "autoStartDelay": 250, "staggerDelay": 0.04}
        )
        assert options.priority_based is True
        assert options.skip_allowed is False
        assert options.auto_start_delay == 250
        assert options.extras == {"staggerDelay": 0.04}
        assert options.get("staggerDelay") == 0.04
        assert options.get("missing", "fallback") == "fallback"

    def test_from_dict_none(self):
        """Test None gives defaults."""
        assert RunnerOptions.from_dict(None) == RunnerOptions()


class TestRunnerEvents:
    """Tests for RunnerEvents."""

    def test_all_hooks_optional(self):
        events = RunnerEvents()
        assert events.on_initialize is None
        assert events.on_finish is None
        assert events.on_current_start is None
        assert events.on_current_complete is None
        assert events.on_current_skip is None
        assert events.on_interaction is None
        assert events.on_error is None


class TestRunnerResult:
    """Tests for RunnerResult."""

    def test_completion_ratio(self):
        """Test the ratio counts completed items only."""
        result = RunnerResult(success=True, total=4, items_completed=3, items_skipped=1)
        assert result.completion_ratio == 0.75

    def test_completion_ratio_empty(self):
        """Test an empty run counts as fully complete."""
        assert RunnerResult(success=True, total=0).completion_ratio == 1.0
