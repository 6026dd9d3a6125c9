"""
In-memory Ledger Registry

One UserLedger per user, each guarded by its own asyncio.Lock so that the
read-then-write anti-cheat and cap logic never interleaves for one user.
Different users proceed concurrently.

Persistence is the caller's concern; ledgers live as long as the registry.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Dict, List, Optional

from trajectory.exceptions import ConflictError, ValidationError
from trajectory.gamification.ledger import UserLedger

logger = logging.getLogger(__name__)


class LedgerRegistry:
    """Per-user ledgers with single-writer access"""

    def __init__(self, ledger_factory: Optional[Callable[[str], UserLedger]] = None):
        self._ledger_factory = ledger_factory or (lambda user_id: UserLedger(user_id=user_id))
        self._ledgers: Dict[str, UserLedger] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def _get_or_create(self, user_id: str) -> UserLedger:
        ledger = self._ledgers.get(user_id)
        if ledger is None:
            ledger = self._ledger_factory(user_id)
            self._ledgers[user_id] = ledger
            logger.debug(f"Created ledger for user {user_id}")
        return ledger

    @asynccontextmanager
    async def session(self, user_id: str) -> AsyncIterator[UserLedger]:
        """
        Exclusive access to a user's ledger

        Example:
            async with registry.session("123") as ledger:
                ledger.check_habit(habit, today, HabitCheckResult.DONE)
        """
        if not user_id:
            raise ValidationError("User ID is required", field="user_id", operation="ledger_session")

        lock = self._locks.setdefault(user_id, asyncio.Lock())
        async with lock:
            yield self._get_or_create(user_id)

    def get_ledger(self, user_id: str) -> Optional[UserLedger]:
        """Read-only lookup; does not take the user's lock"""
        return self._ledgers.get(user_id)

    def user_ids(self) -> List[str]:
        return list(self._ledgers)

    def remove(self, user_id: str) -> None:
        """
        Forget a user's ledger and lock

        Raises:
            ConflictError: a session currently holds the user's lock
        """
        lock = self._locks.get(user_id)
        if lock is not None and lock.locked():
            raise ConflictError(
                f"Ledger for user {user_id} is in use and cannot be removed",
                entity=user_id,
                user_id=user_id,
                operation="remove_ledger",
            )
        self._ledgers.pop(user_id, None)
        self._locks.pop(user_id, None)
        logger.debug(f"Removed ledger for user {user_id}")


# Global instance
ledger_registry = LedgerRegistry()
