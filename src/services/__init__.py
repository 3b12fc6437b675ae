from src.services import (
    aggregation_service,
    badge_service,
    leaderboard_service,
    milestone_service,
    period_service,
    ranking_service,
    trend_service,
)


__all__ = [
    "aggregation_service",
    "badge_service",
    "leaderboard_service",
    "milestone_service",
    "period_service",
    "ranking_service",
    "trend_service",
]
