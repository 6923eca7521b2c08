"""Backend persistence: declarative base plus the plan, sessions and push_subscriptions tables."""

from practice_log.db.base import Base
from practice_log.db.models import Plan, PracticeSession, PushSubscription

__all__ = ["Base", "Plan", "PracticeSession", "PushSubscription"]
