"""
XP Ledger

Turns habit checks and goal notes into XP transactions under the
anti-cheat and rate-limiting rules.

Rules:
- A habit can be rewarded (DONE) at most once per date; MISSED re-checks are recorded
- A goal takes at most one note per date
- Gains on one date never exceed the daily XP limit (habit and goal XP share it)
- Goal XP is also limited per goal per date
- Penalties and decay are never capped
- Inactivity decay is applied before the first habit check after a gap

All mutable per-user state lives in LedgerState; HabitLedger and GoalLedger
draw on one DailyXpBudget over that state.
"""

from datetime import date
from typing import Dict, List, NamedTuple, Optional
import logging

from trajectory import config
from trajectory.exceptions import (
    DuplicateNoteError,
    DuplicateRewardError,
    RecordNotFoundError,
    ValidationError,
)
from trajectory.gamification.decay import XpDecayCalculator
from trajectory.gamification.xp_system import calculate_habit_transaction
from trajectory.models.progression import (
    DailyActivityLog,
    Goal,
    GoalNote,
    Habit,
    HabitCheck,
    HabitCheckResult,
    UserStats,
    XpHistoryEntry,
    XpSource,
    XpTransaction,
)
from trajectory.monitoring.metrics import (
    track_anti_cheat_rejection,
    track_cap_hit,
    track_xp_transaction,
)
from trajectory.services.goal_consistency import (
    calculate_accumulated_points,
    calculate_goal_progress,
)

logger = logging.getLogger(__name__)


class CheckResult(NamedTuple):
    """Outcome of a habit check"""
    user_stats: UserStats
    activity_log: DailyActivityLog
    transaction: XpTransaction
    decay_transaction: Optional[XpTransaction] = None


class NoteResult(NamedTuple):
    """Outcome of a goal note"""
    user_stats: UserStats
    note: GoalNote
    transaction: XpTransaction


class LedgerState:
    """Mutable ledger state owned by exactly one user session"""

    def __init__(self, user_id: Optional[str] = None):
        self.user_id = user_id
        self.activity_logs: Dict[date, DailyActivityLog] = {}
        self.last_activity_date: Optional[date] = None
        self.goals: Dict[str, Goal] = {}
        self.goal_notes: Dict[str, Dict[date, GoalNote]] = {}
        self.goal_xp: Dict[str, Dict[date, int]] = {}
        self.xp_history: List[XpHistoryEntry] = []

    def get_log(self, log_date: date) -> DailyActivityLog:
        """Activity log for a date (empty when nothing was recorded)"""
        return self.activity_logs.get(log_date) or DailyActivityLog.empty(log_date)

    def save_log(self, log: DailyActivityLog) -> None:
        self.activity_logs[log.log_date] = log

    def record_transaction(self, entry_date: date, transaction: XpTransaction) -> None:
        """Append an applied transaction to the XP history"""
        if transaction.is_no_op:
            return
        self.xp_history.append(XpHistoryEntry(
            entry_date=entry_date,
            xp_change=transaction.amount,
            source=transaction.source,
        ))
        track_xp_transaction(transaction.source.value, transaction.amount)


class DailyXpBudget:
    """Daily gain ceiling shared by habit and goal XP"""

    def __init__(self, state: LedgerState, daily_limit: int = config.DAILY_XP_LIMIT):
        if daily_limit <= 0:
            raise ValidationError("Daily XP limit must be positive", field="daily_limit", value=daily_limit)
        self.state = state
        self.daily_limit = daily_limit

    def remaining(self, on_date: date) -> int:
        """Capacity left on a date; can be <= 0 once the cap is reached"""
        return self.daily_limit - self.state.get_log(on_date).xp_gained

    def cap_transaction(self, transaction: XpTransaction, on_date: date, label: str) -> XpTransaction:
        """Shrink a gain to the remaining capacity; losses pass through"""
        if not transaction.is_gain:
            return transaction

        remaining = self.remaining(on_date)
        if remaining <= 0:
            track_cap_hit("daily")
            logger.warning(
                f"Daily XP cap reached for user {self.state.user_id} on {on_date}: "
                f"{label} capped from {transaction.amount} to 0"
            )
            return transaction.with_amount(
                0,
                f"Daily XP cap reached ({self.daily_limit} XP). {label} would give "
                f"{transaction.amount} XP but is capped at 0.",
            )

        if transaction.amount > remaining:
            track_cap_hit("daily")
            logger.info(f"{label} capped from {transaction.amount} to {remaining} XP on {on_date}")
            return transaction.with_amount(
                remaining,
                f"{transaction.reason} (capped from {transaction.amount} to {remaining} due to daily limit)",
            )

        return transaction

    def record_goal_xp(self, on_date: date, xp: int) -> None:
        """Count goal XP against the day's gained total"""
        self.state.save_log(self.state.get_log(on_date).add_xp(xp))


class HabitLedger:
    """Records habit checks"""

    def __init__(
        self,
        state: LedgerState,
        budget: DailyXpBudget,
        decay_calculator: Optional[XpDecayCalculator] = None,
    ):
        self.state = state
        self.budget = budget
        self.decay_calculator = decay_calculator or XpDecayCalculator()

    def check_habit(
        self,
        user_stats: UserStats,
        habit: Habit,
        check_date: date,
        result: HabitCheckResult,
    ) -> CheckResult:
        """
        Record a habit as DONE or MISSED on a date

        Args:
            user_stats: Stats before the check
            habit: Habit being resolved
            check_date: Date the habit is resolved for
            result: DONE or MISSED

        Returns:
            CheckResult with the new stats, the day's log, the (possibly capped)
            habit transaction and the decay transaction applied first, if any

        Raises:
            ValidationError: missing arguments
            DuplicateRewardError: habit already DONE on check_date
        """
        for field, value in (("user_stats", user_stats), ("habit", habit),
                             ("check_date", check_date), ("result", result)):
            if value is None:
                raise ValidationError(
                    f"{field} is required",
                    field=field,
                    user_id=self.state.user_id,
                    operation="check_habit",
                )

        try:
            result = HabitCheckResult(result)
        except ValueError:
            raise ValidationError(
                f"Unknown habit check result: {result}",
                field="result",
                value=result,
                user_id=self.state.user_id,
                operation="check_habit",
            )

        log = self.state.get_log(check_date)

        if result == HabitCheckResult.DONE and log.has_habit_been_done(habit):
            track_anti_cheat_rejection("habit")
            raise DuplicateRewardError(
                habit.name,
                check_date,
                user_id=self.state.user_id,
                operation="check_habit",
            )

        stats = user_stats
        decay_transaction = None
        last_activity = self.state.last_activity_date
        if last_activity is not None and last_activity < check_date:
            decay_transaction = self.decay_calculator.calculate_decay(
                last_activity, check_date, stats.total_xp
            )
            if decay_transaction is not None:
                stats = stats.apply_transaction(decay_transaction)
                self.state.record_transaction(check_date, decay_transaction)
                logger.info(
                    f"Applied decay of {decay_transaction.amount} XP for user "
                    f"{self.state.user_id} ({last_activity} -> {check_date})"
                )

        transaction = calculate_habit_transaction(habit, result)
        transaction = self.budget.cap_transaction(transaction, check_date, f"Habit '{habit.name}'")

        log = log.add_habit_check(
            HabitCheck(habit=habit, check_date=check_date, result=result),
            transaction.amount,
        )
        self.state.save_log(log)

        if not transaction.is_no_op:
            stats = stats.apply_transaction(transaction)
            self.state.record_transaction(check_date, transaction)

        if last_activity is None or check_date > last_activity:
            self.state.last_activity_date = check_date

        logger.info(
            f"Habit '{habit.name}' {result.value} on {check_date}: {transaction.amount:+d} XP "
            f"(total {stats.total_xp}, level {stats.level})"
        )
        return CheckResult(stats, log, transaction, decay_transaction)


class GoalLedger:
    """Registers goals and records goal notes"""

    def __init__(
        self,
        state: LedgerState,
        budget: DailyXpBudget,
        goal_daily_limit: int = config.DAILY_GOAL_XP_LIMIT,
    ):
        if goal_daily_limit <= 0:
            raise ValidationError(
                "Daily goal XP limit must be positive",
                field="goal_daily_limit",
                value=goal_daily_limit,
            )
        self.state = state
        self.budget = budget
        self.goal_daily_limit = goal_daily_limit

    def add_goal(self, goal: Goal) -> None:
        if goal is None:
            raise ValidationError("Goal is required", field="goal", operation="add_goal")
        if goal.title in self.state.goals:
            raise ValidationError(
                f"A goal with title '{goal.title}' already exists",
                field="title",
                value=goal.title,
                user_id=self.state.user_id,
                operation="add_goal",
            )
        self.state.goals[goal.title] = goal
        logger.info(f"Registered goal '{goal.title}' for user {self.state.user_id}")

    def get_goal(self, title: str) -> Optional[Goal]:
        return self.state.goals.get(title)

    def list_goals(self) -> List[Goal]:
        return list(self.state.goals.values())

    def add_goal_note(
        self,
        user_stats: UserStats,
        goal: Goal,
        note_date: date,
        text: str,
        requested_xp: int,
    ) -> NoteResult:
        """
        Add the day's note to a goal and grant XP within both caps

        Granted XP = min(requested, per-goal remaining, daily remaining), floored at 0.

        Raises:
            ValidationError: missing/blank arguments or negative requested XP
            RecordNotFoundError: goal was never registered
            DuplicateNoteError: goal already has a note on note_date
        """
        for field, value in (("user_stats", user_stats), ("goal", goal), ("note_date", note_date)):
            if value is None:
                raise ValidationError(
                    f"{field} is required",
                    field=field,
                    user_id=self.state.user_id,
                    operation="add_goal_note",
                )
        if text is None or not text.strip():
            raise ValidationError("Note text cannot be blank", field="text", operation="add_goal_note")
        if requested_xp is None or requested_xp < 0:
            raise ValidationError(
                "Requested XP cannot be negative",
                field="requested_xp",
                value=requested_xp,
                operation="add_goal_note",
            )
        if goal.title not in self.state.goals:
            raise RecordNotFoundError(
                f"Goal '{goal.title}' not found",
                record_type="goal",
                record_id=goal.title,
                user_id=self.state.user_id,
                operation="add_goal_note",
            )

        notes = self.state.goal_notes.setdefault(goal.title, {})
        if note_date in notes:
            track_anti_cheat_rejection("goal_note")
            raise DuplicateNoteError(
                goal.title,
                note_date,
                user_id=self.state.user_id,
                operation="add_goal_note",
            )

        goal_xp = self.state.goal_xp.setdefault(goal.title, {})
        already_assigned = goal_xp.get(note_date, 0)
        goal_capacity = max(0, self.goal_daily_limit - already_assigned)
        granted = min(requested_xp, goal_capacity)
        granted = min(granted, max(0, self.budget.remaining(note_date)))

        if granted < requested_xp:
            track_cap_hit("goal")

        note = GoalNote(goal=goal, note_date=note_date, text=text, points=granted)
        notes[note_date] = note
        goal_xp[note_date] = already_assigned + granted

        if granted == 0:
            reason = f"Goal '{goal.title}' note added, but XP capped at 0 (daily limits reached)"
        elif granted < requested_xp:
            reason = (
                f"Goal '{goal.title}' note: {granted} XP assigned "
                f"(requested {requested_xp}, capped due to daily limits)"
            )
        else:
            reason = f"Goal '{goal.title}' note: {granted} XP assigned"
        transaction = XpTransaction(amount=granted, reason=reason, source=XpSource.GOAL)

        stats = user_stats
        if granted > 0:
            stats = stats.apply_transaction(transaction)
            self.budget.record_goal_xp(note_date, granted)
            self.state.record_transaction(note_date, transaction)

        logger.info(
            f"Goal '{goal.title}' note on {note_date}: {granted} XP "
            f"(requested {requested_xp}, total {stats.total_xp})"
        )
        return NoteResult(stats, note, transaction)

    def get_goal_notes(self, goal: Goal) -> List[GoalNote]:
        """Notes of a goal in date order"""
        notes = self.state.goal_notes.get(goal.title, {})
        return [notes[d] for d in sorted(notes)]

    def get_goal_note(self, goal: Goal, note_date: date) -> Optional[GoalNote]:
        return self.state.goal_notes.get(goal.title, {}).get(note_date)

    def calculate_progress(self, goal: Goal) -> float:
        """Percent of the goal's progress points earned so far (0-100)"""
        return calculate_goal_progress(goal, self.get_accumulated_points(goal))

    def get_accumulated_points(self, goal: Goal) -> int:
        return calculate_accumulated_points(self.get_goal_notes(goal))


class UserLedger:
    """
    Per-user facade over the habit and goal ledgers

    Owns one LedgerState; serialize access per user (see LedgerRegistry).
    """

    def __init__(
        self,
        user_id: Optional[str] = None,
        daily_limit: int = config.DAILY_XP_LIMIT,
        goal_daily_limit: int = config.DAILY_GOAL_XP_LIMIT,
        decay_calculator: Optional[XpDecayCalculator] = None,
    ):
        self.user_id = user_id
        self.state = LedgerState(user_id)
        self.budget = DailyXpBudget(self.state, daily_limit)
        self.habits = HabitLedger(self.state, self.budget, decay_calculator)
        self.goals = GoalLedger(self.state, self.budget, goal_daily_limit)
        self.user_stats = UserStats.create_new()

    @property
    def daily_limit(self) -> int:
        return self.budget.daily_limit

    @property
    def last_activity_date(self) -> Optional[date]:
        return self.state.last_activity_date

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def check_habit(
        self,
        habit: Habit,
        check_date: date,
        result: HabitCheckResult,
        user_stats: Optional[UserStats] = None,
    ) -> CheckResult:
        """Check a habit against the ledger's own stats (or the given ones)"""
        stats = self.user_stats if user_stats is None else user_stats
        outcome = self.habits.check_habit(stats, habit, check_date, result)
        self.user_stats = outcome.user_stats
        return outcome

    def add_goal(self, goal: Goal) -> None:
        self.goals.add_goal(goal)

    def add_goal_note(
        self,
        goal: Goal,
        note_date: date,
        text: str,
        requested_xp: int,
        user_stats: Optional[UserStats] = None,
    ) -> NoteResult:
        outcome = self.goals.add_goal_note(
            self.user_stats if user_stats is None else user_stats,
            goal, note_date, text, requested_xp,
        )
        self.user_stats = outcome.user_stats
        return outcome

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_activity_log(self, log_date: date) -> DailyActivityLog:
        return self.state.get_log(log_date)

    def activity_logs(self) -> List[DailyActivityLog]:
        return [self.state.activity_logs[d] for d in sorted(self.state.activity_logs)]

    def all_habit_checks(self) -> List[HabitCheck]:
        return [check for log in self.activity_logs() for check in log.habit_checks]

    def all_habits(self) -> List[Habit]:
        """Distinct habits seen in checks, first-seen order"""
        return list(dict.fromkeys(check.habit for check in self.all_habit_checks()))

    def all_goal_notes(self) -> List[GoalNote]:
        return [note for goal in self.goals.list_goals() for note in self.goals.get_goal_notes(goal)]

    def xp_history(self) -> List[XpHistoryEntry]:
        return list(self.state.xp_history)
