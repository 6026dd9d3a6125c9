"""Tests for configuration defaults and validation"""
import pytest

from trajectory import config
from trajectory.exceptions import ConfigurationError


class TestConfigDefaults:
    """Test default values when no environment overrides are set"""

    def test_ledger_limits(self):
        assert config.DAILY_XP_LIMIT == 100
        assert config.DAILY_GOAL_XP_LIMIT == 10

    def test_decay_defaults(self):
        assert config.DECAY_INACTIVITY_THRESHOLD_DAYS == 3
        assert config.DECAY_RATE == 0.05

    def test_windows(self):
        assert config.TREND_LOOKBACK_DAYS == 14
        assert config.SIMULATION_WINDOW_DAYS == 30


class TestConfigValidation:
    """Test validate_config"""

    def test_valid_configuration(self):
        """Test defaults pass validation"""
        config.validate_config()

    def test_non_positive_limit_rejected(self, monkeypatch):
        """Test a zero daily limit raises ConfigurationError"""
        monkeypatch.setattr(config, "DAILY_XP_LIMIT", 0)

        with pytest.raises(ConfigurationError) as exc_info:
            config.validate_config()

        assert exc_info.value.config_key == "DAILY_XP_LIMIT"

    def test_decay_rate_out_of_range(self, monkeypatch):
        """Test a decay rate above 1 raises ConfigurationError"""
        monkeypatch.setattr(config, "DECAY_RATE", 1.5)

        with pytest.raises(ConfigurationError) as exc_info:
            config.validate_config()

        assert exc_info.value.config_key == "DECAY_RATE"
