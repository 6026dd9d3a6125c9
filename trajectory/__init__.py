"""
Trajectory: progression and forecasting engine

- gamification: XP ledger, levels, decay and streaks
- services: analytics over ledger history
- simulation: multi-year trajectory forecasting
- strategy: recommendations, what-if scenarios and effectiveness tracking
"""
