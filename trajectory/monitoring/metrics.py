"""Prometheus metrics definitions and helpers"""
import logging
import time
from contextlib import contextmanager

from prometheus_client import Counter, Histogram

from trajectory.config import ENABLE_PROMETHEUS

logger = logging.getLogger(__name__)


class PrometheusMetrics:
    """Container for all Prometheus metrics"""

    def __init__(self, enabled: bool = ENABLE_PROMETHEUS):
        if not enabled:
            logger.info("Prometheus metrics disabled")
            self._enabled = False
            return

        # Ledger Metrics
        self.xp_transactions_total = Counter(
            'xp_transactions_total',
            'Total applied XP transactions',
            ['source', 'kind']
        )

        self.xp_amount_total = Counter(
            'xp_amount_total',
            'Absolute XP moved by applied transactions',
            ['source', 'kind']
        )

        self.daily_cap_hits_total = Counter(
            'daily_cap_hits_total',
            'Transactions reduced by a daily cap',
            ['cap']
        )

        self.anti_cheat_rejections_total = Counter(
            'anti_cheat_rejections_total',
            'Duplicate same-day rewards or notes rejected',
            ['kind']
        )

        # Forecasting Metrics
        self.simulations_total = Counter(
            'simulations_total',
            'Total trajectory simulations run',
            ['burnout_risk']
        )

        self.simulation_duration_seconds = Histogram(
            'simulation_duration_seconds',
            'Trajectory simulation latency',
            buckets=[0.0005, 0.001, 0.005, 0.01, 0.05, 0.1]
        )

        self._enabled = True
        logger.info("Prometheus metrics initialized")

    @property
    def enabled(self) -> bool:
        """Check if metrics are enabled"""
        return self._enabled


# Global metrics instance
metrics = PrometheusMetrics()


def _kind(amount: int) -> str:
    return "gain" if amount > 0 else "loss"


def track_xp_transaction(source: str, amount: int) -> None:
    """Count an applied (non-zero) XP transaction"""
    if not metrics.enabled:
        return

    kind = _kind(amount)
    metrics.xp_transactions_total.labels(source=source, kind=kind).inc()
    metrics.xp_amount_total.labels(source=source, kind=kind).inc(abs(amount))


def track_cap_hit(cap: str) -> None:
    """Count a transaction reduced by the daily or per-goal cap"""
    if not metrics.enabled:
        return

    metrics.daily_cap_hits_total.labels(cap=cap).inc()


def track_anti_cheat_rejection(kind: str) -> None:
    """Count a duplicate reward/note rejection"""
    if not metrics.enabled:
        return

    metrics.anti_cheat_rejections_total.labels(kind=kind).inc()


@contextmanager
def track_simulation():
    """
    Track simulation latency and outcome

    Yields a dict; set "burnout_risk" on it to label the run.
    """
    if not metrics.enabled:
        yield {}
        return

    start_time = time.time()
    labels = {"burnout_risk": "unknown"}

    try:
        yield labels
    finally:
        duration = time.time() - start_time
        metrics.simulation_duration_seconds.observe(duration)
        metrics.simulations_total.labels(burnout_risk=labels["burnout_risk"]).inc()
