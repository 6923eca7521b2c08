"""Shared practice-log constants.

Categories form a closed set. Their order is the display order everywhere
(plan page, history split, session log).
"""

CATEGORIES: tuple[str, ...] = ("scales", "review", "new", "technique")

CATEGORY_LABELS: dict[str, str] = {
    "scales": "Scales",
    "review": "Review Rep",
    "new": "New Rep",
    "technique": "Technique",
}

DEFAULT_DAILY_GOAL = 180
DEFAULT_CATEGORY_MINUTES = 45
DEFAULT_CATEGORY_NOTES: dict[str, str] = {
    "scales": "Tone & Intonation",
    "review": "Dvorak mvmt II",
    "new": "Shostakovich Prelude",
    "technique": "Shifts & vibrato",
}

# A day counts toward consistency once it reaches this share of the daily goal.
CONSISTENCY_THRESHOLD = 0.8

HISTORY_RANGES: dict[str, int] = {
    "week": 7,
    "month": 30,
    "quarter": 90,
    "year": 365,
}

REMINDER_PAYLOAD: dict[str, str] = {
    "title": "Practice Log",
    "body": "Tuesday check-in: review or update your weekly practice goals.",
    "icon": "/icons/icon-192.png",
    "badge": "/icons/icon-192.png",
}
