"""Configuration management"""
import os
from dotenv import load_dotenv

from trajectory.exceptions import ConfigurationError

load_dotenv()

# Ledger limits
DAILY_XP_LIMIT: int = int(os.getenv("DAILY_XP_LIMIT", "100"))
DAILY_GOAL_XP_LIMIT: int = int(os.getenv("DAILY_GOAL_XP_LIMIT", "10"))

# Inactivity decay
DECAY_INACTIVITY_THRESHOLD_DAYS: int = int(os.getenv("DECAY_INACTIVITY_THRESHOLD_DAYS", "3"))
DECAY_RATE: float = float(os.getenv("DECAY_RATE", "0.05"))

# Analytics windows (days)
TREND_LOOKBACK_DAYS: int = int(os.getenv("TREND_LOOKBACK_DAYS", "14"))
SIMULATION_WINDOW_DAYS: int = int(os.getenv("SIMULATION_WINDOW_DAYS", "30"))

# Logging
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

# Monitoring
ENABLE_PROMETHEUS: bool = os.getenv("ENABLE_PROMETHEUS", "false").lower() == "true"


# Validation
def validate_config() -> None:
    """Validate numeric limits"""
    for key, value in (
        ("DAILY_XP_LIMIT", DAILY_XP_LIMIT),
        ("DAILY_GOAL_XP_LIMIT", DAILY_GOAL_XP_LIMIT),
        ("DECAY_INACTIVITY_THRESHOLD_DAYS", DECAY_INACTIVITY_THRESHOLD_DAYS),
        ("TREND_LOOKBACK_DAYS", TREND_LOOKBACK_DAYS),
        ("SIMULATION_WINDOW_DAYS", SIMULATION_WINDOW_DAYS),
    ):
        if value <= 0:
            raise ConfigurationError(f"{key} must be positive, got {value}", config_key=key)
    if not 0.0 <= DECAY_RATE <= 1.0:
        raise ConfigurationError(
            f"DECAY_RATE must be between 0 and 1, got {DECAY_RATE}",
            config_key="DECAY_RATE",
        )
