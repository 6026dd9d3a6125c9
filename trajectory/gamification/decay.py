"""
Inactivity Decay

Once a user has been inactive for more than the threshold, every extra day
removes floor(remaining_xp x rate), compounding on the shrinking balance.
All decay days are folded into one DECAY transaction.
"""

from datetime import date
from typing import Optional
import logging

from trajectory import config
from trajectory.exceptions import ConfigurationError, ValidationError
from trajectory.models.progression import XpSource, XpTransaction

logger = logging.getLogger(__name__)


class XpDecayCalculator:
    """Computes the aggregated decay for a stretch of inactivity"""

    def __init__(
        self,
        inactivity_threshold_days: int = config.DECAY_INACTIVITY_THRESHOLD_DAYS,
        decay_rate: float = config.DECAY_RATE,
    ):
        if inactivity_threshold_days <= 0:
            raise ConfigurationError(
                f"Inactivity threshold must be positive, got {inactivity_threshold_days}",
                config_key="DECAY_INACTIVITY_THRESHOLD_DAYS",
            )
        if not 0.0 <= decay_rate <= 1.0:
            raise ConfigurationError(
                f"Decay rate must be between 0 and 1, got {decay_rate}",
                config_key="DECAY_RATE",
            )
        self.inactivity_threshold_days = inactivity_threshold_days
        self.decay_rate = decay_rate

    def calculate_decay(
        self,
        last_activity_date: date,
        current_date: date,
        current_xp: int,
    ) -> Optional[XpTransaction]:
        """
        Decay owed for the gap between last activity and current date

        Returns None when the gap is within the threshold or nothing decays.
        """
        if last_activity_date is None or current_date is None:
            raise ValidationError("Activity dates are required", field="last_activity_date")
        if current_xp < 0:
            raise ValidationError("XP cannot be negative", field="current_xp", value=current_xp)
        if last_activity_date > current_date:
            raise ValidationError(
                "Last activity date cannot be after current date",
                field="last_activity_date",
                value=last_activity_date.isoformat(),
            )

        days_inactive = (current_date - last_activity_date).days
        if days_inactive <= self.inactivity_threshold_days:
            return None

        remaining = current_xp
        total_decay = 0
        for _ in range(days_inactive - self.inactivity_threshold_days):
            daily = int(remaining * self.decay_rate)
            if daily == 0:
                break
            remaining -= daily
            total_decay += daily

        if total_decay == 0:
            return None

        logger.debug(
            f"Decay of {total_decay} XP after {days_inactive} inactive days "
            f"(threshold {self.inactivity_threshold_days})"
        )
        return XpTransaction(
            amount=-total_decay,
            reason=(
                f"Inactivity decay: {days_inactive} days inactive "
                f"(threshold: {self.inactivity_threshold_days} days)"
            ),
            source=XpSource.DECAY,
        )
