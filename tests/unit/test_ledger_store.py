"""Unit tests for the per-user ledger registry"""
import asyncio

import pytest

from trajectory.exceptions import ConflictError, DuplicateRewardError, ValidationError
from trajectory.gamification.ledger import UserLedger
from trajectory.gamification.ledger_store import LedgerRegistry
from trajectory.models.progression import Habit, HabitCheckResult


@pytest.fixture
def registry():
    return LedgerRegistry()


@pytest.mark.asyncio
async def test_session_creates_ledger(registry):
    """Test first session creates and keeps the ledger"""
    async with registry.session("42") as ledger:
        assert isinstance(ledger, UserLedger)
        assert ledger.user_id == "42"

    assert registry.get_ledger("42") is ledger
    assert registry.user_ids() == ["42"]


@pytest.mark.asyncio
async def test_session_requires_user_id(registry):
    with pytest.raises(ValidationError):
        async with registry.session(""):
            pass


@pytest.mark.asyncio
async def test_sessions_for_one_user_are_serialized(registry):
    """Test a second session waits until the first one exits"""
    order = []

    async def worker(name: str):
        async with registry.session("42"):
            order.append(f"{name}-enter")
            await asyncio.sleep(0.01)
            order.append(f"{name}-exit")

    await asyncio.gather(worker("a"), worker("b"))

    assert order in (
        ["a-enter", "a-exit", "b-enter", "b-exit"],
        ["b-enter", "b-exit", "a-enter", "a-exit"],
    )


@pytest.mark.asyncio
async def test_concurrent_duplicate_reward_rejected_once(registry, today):
    """Test racing DONE checks for one habit reward exactly once"""
    habit = Habit(name="Run", difficulty=3)
    outcomes = []

    async def check():
        async with registry.session("42") as ledger:
            await asyncio.sleep(0)
            try:
                ledger.check_habit(habit, today, HabitCheckResult.DONE)
                outcomes.append("ok")
            except DuplicateRewardError:
                outcomes.append("duplicate")

    await asyncio.gather(*(check() for _ in range(3)))

    assert sorted(outcomes) == ["duplicate", "duplicate", "ok"]
    assert registry.get_ledger("42").user_stats.total_xp == 30


@pytest.mark.asyncio
async def test_custom_factory_and_remove(today):
    registry = LedgerRegistry(ledger_factory=lambda user_id: UserLedger(user_id=user_id, daily_limit=20))

    async with registry.session("7") as ledger:
        result = ledger.check_habit(Habit(name="Run", difficulty=3), today, HabitCheckResult.DONE)
        assert result.transaction.amount == 20

    registry.remove("7")
    assert registry.get_ledger("7") is None


@pytest.mark.asyncio
async def test_remove_refused_while_session_open(registry):
    """Test a ledger in use keeps its lock until the session exits"""
    async with registry.session("42"):
        with pytest.raises(ConflictError):
            registry.remove("42")
        assert registry.get_ledger("42") is not None

    registry.remove("42")
    assert registry.user_ids() == []
