"""ORM models exposed for metadata discovery."""
from practice_log.db.models.plan import Plan
from practice_log.db.models.practice_session import PracticeSession
from practice_log.db.models.push_subscription import PushSubscription

__all__ = [
    "Plan",
    "PracticeSession",
    "PushSubscription",
]
