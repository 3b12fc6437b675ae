"""Achievement badge classification.

Three independent tiers are evaluated together. Within a tier only the highest
threshold reached is awarded; badges from different tiers add up.

- Lifetime total: million_club > 500k_club > 100k_club
- Current streak: streak_30 > streak_7 > streak_3
- Longest streak: legend_365 > centurion

Award badges (leader, most_improved) depend on a whole leaderboard rather than
one user's stats and are assigned by the ranking service.
"""

from src.core.config import Constants
from src.domain.badge import BadgeId


_LIFETIME_TIER: tuple[tuple[int, BadgeId], ...] = (
    (Constants.BADGE_MILLION_CLUB_TOTAL, BadgeId.MILLION_CLUB),
    (Constants.BADGE_500K_CLUB_TOTAL, BadgeId.CLUB_500K),
    (Constants.BADGE_100K_CLUB_TOTAL, BadgeId.CLUB_100K),
)

_CURRENT_STREAK_TIER: tuple[tuple[int, BadgeId], ...] = (
    (Constants.BADGE_STREAK_30_DAYS, BadgeId.STREAK_30),
    (Constants.BADGE_STREAK_7_DAYS, BadgeId.STREAK_7),
    (Constants.BADGE_STREAK_3_DAYS, BadgeId.STREAK_3),
)

_LONGEST_STREAK_TIER: tuple[tuple[int, BadgeId], ...] = (
    (Constants.BADGE_LEGEND_DAYS, BadgeId.LEGEND_365),
    (Constants.BADGE_CENTURION_DAYS, BadgeId.CENTURION),
)


def _highest_in_tier(value: int, tier: tuple[tuple[int, BadgeId], ...]) -> BadgeId | None:
    # Tiers are ordered highest threshold first
    for threshold, badge in tier:
        if value >= threshold:
            return badge
    return None


def classify_badges(total_lifetime: int, current_streak: int, longest_streak: int) -> set[BadgeId]:
    """Return the tier badges earned by a user's lifetime stats."""
    earned = (
        _highest_in_tier(total_lifetime, _LIFETIME_TIER),
        _highest_in_tier(current_streak, _CURRENT_STREAK_TIER),
        _highest_in_tier(longest_streak, _LONGEST_STREAK_TIER),
    )
    return {badge for badge in earned if badge is not None}
