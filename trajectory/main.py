"""Command-line entry point: seeds a demo user and prints a multi-year plan"""
import argparse
import asyncio
import logging
from datetime import date, timedelta

from prometheus_client import generate_latest

from trajectory.config import LOG_LEVEL, validate_config
from trajectory.exceptions import TrajectoryError
from trajectory.gamification.ledger_store import ledger_registry
from trajectory.models.progression import Goal, Habit, HabitCheckResult
from trajectory.monitoring.metrics import metrics
from trajectory.strategy.planning import PlanningService

# Configure logging
logging.basicConfig(
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    level=getattr(logging, LOG_LEVEL)
)

logger = logging.getLogger(__name__)

DEMO_HABITS = (
    Habit(name="Morning run", difficulty=3),
    Habit(name="Deep work block", difficulty=4),
    Habit(name="Read 20 pages", difficulty=2),
)


async def seed_demo_history(user_id: str, today: date, days: int) -> None:
    """Four weeks of mostly-completed habits plus a goal with regular notes"""
    async with ledger_registry.session(user_id) as ledger:
        goal = Goal(
            title="Ship side project",
            start_date=today - timedelta(days=days),
            target_date=today + timedelta(days=180),
            importance=4,
            total_progress_points=200,
        )
        ledger.add_goal(goal)

        for offset in range(days, -1, -1):
            day = today - timedelta(days=offset)
            for index, habit in enumerate(DEMO_HABITS):
                missed = (offset + index) % 7 == 0
                ledger.check_habit(habit, day, HabitCheckResult.MISSED if missed else HabitCheckResult.DONE)
            if offset % 3 == 0:
                ledger.add_goal_note(goal, day, f"Progress update for {day.isoformat()}", requested_xp=8)


async def main() -> None:
    parser = argparse.ArgumentParser(description="Build a demo trajectory plan")
    parser.add_argument("--user", default="demo", help="User id for the demo ledger")
    parser.add_argument("--years", type=int, default=5, help="Years to simulate (1-5)")
    parser.add_argument("--days", type=int, default=28, help="Days of demo history to seed")
    args = parser.parse_args()

    try:
        logger.info("Validating configuration...")
        validate_config()

        today = date.today()
        await seed_demo_history(args.user, today, args.days)

        async with ledger_registry.session(args.user) as ledger:
            plan = PlanningService().build_plan(ledger, today, args.years)

        print(plan['summary'])
        print()
        print(plan['base_simulation'].explanation)
        print()
        print(plan['action_plan'])
        print()
        for milestone in plan['key_milestones']:
            print(f"- {milestone}")

        if metrics.enabled:
            print()
            print(generate_latest().decode("utf-8"))

    except TrajectoryError as e:
        logger.error(f"Plan failed: {e.message}")
        raise SystemExit(1)


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
