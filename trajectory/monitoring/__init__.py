"""Monitoring infrastructure for trajectory"""
from trajectory.monitoring.metrics import (
    metrics,
    track_xp_transaction,
    track_cap_hit,
    track_anti_cheat_rejection,
    track_simulation,
)

__all__ = [
    "metrics",
    "track_xp_transaction",
    "track_cap_hit",
    "track_anti_cheat_rejection",
    "track_simulation",
]
