"""Badge identifiers."""

from enum import StrEnum


class BadgeId(StrEnum):
    """Achievement badges shown on leaderboard entries."""

    # Lifetime total tier
    MILLION_CLUB = "million_club"
    CLUB_500K = "500k_club"
    CLUB_100K = "100k_club"

    # Current streak tier
    STREAK_30 = "streak_30"
    STREAK_7 = "streak_7"
    STREAK_3 = "streak_3"

    # Longest streak tier
    LEGEND_365 = "legend_365"
    CENTURION = "centurion"

    # Leaderboard awards
    LEADER = "leader"
    MOST_IMPROVED = "most_improved"
