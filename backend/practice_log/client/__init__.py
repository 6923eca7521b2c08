"""Local-first practice log client."""

from practice_log.client.errors import PracticeLogError, RemoteStoreError, SaveError
from practice_log.client.local_store import LocalStore
from practice_log.client.models import PlanItem, SessionEntry, WeeklyPlan
from practice_log.client.practice_client import PracticeClient
from practice_log.client.reconciler import Reconciler, ReconcileResult, ReconcilerStatus
from practice_log.client.remote import HttpRemoteStore, RemoteStore

__all__ = [
    "HttpRemoteStore",
    "LocalStore",
    "PlanItem",
    "PracticeClient",
    "PracticeLogError",
    "Reconciler",
    "ReconcileResult",
    "ReconcilerStatus",
    "RemoteStore",
    "RemoteStoreError",
    "SaveError",
    "SessionEntry",
    "WeeklyPlan",
]
