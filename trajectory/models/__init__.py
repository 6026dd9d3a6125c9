"""Value types shared across the ledger, analytics, simulation and strategy layers"""

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
from trajectory.models.analytics import (
    BehaviorSnapshot,
    BurnoutWarning,
    DriftEvent,
    DriftSeverity,
    DriftType,
    GoalConsistency,
    HabitStreak,
    Trend,
)
from trajectory.models.simulation import (
    BurnoutRisk,
    IncomeRange,
    SimulationInput,
    SimulationResult,
    YearlyProjection,
)
from trajectory.models.strategy import (
    BurnoutRiskChange,
    DeviationReport,
    DeviationSeverity,
    EffectivenessEvaluation,
    GeneratedScenario,
    LearningSignal,
    Recommendation,
    RecommendationImpact,
    RecommendationOutcome,
    RecommendationType,
    ScenarioImpactSummary,
)
