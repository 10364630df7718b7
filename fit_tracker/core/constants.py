"""Application constants."""

# Weekly goal (workouts per week)
DEFAULT_WEEKLY_GOAL = 4
MIN_WEEKLY_GOAL = 1
MAX_WEEKLY_GOAL = 14

# Default quote category
DEFAULT_QUOTE_CATEGORY = "motivation"

# Community presence
COMMUNITY_FEED_LIMIT = 100
ANONYMOUS_USERNAME = "Anonymous"

# Streak scan window for goal stats
STREAK_LOOKBACK_DAYS = 430
