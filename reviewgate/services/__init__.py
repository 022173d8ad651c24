"""Review services."""

from reviewgate.core.storage import Database
from reviewgate.services.action_log import ActionLog
from reviewgate.services.analytics import AnalyticsAggregator
from reviewgate.services.application_store import ApplicationStore
from reviewgate.services.claim_guard import ClaimGuard
from reviewgate.services.decision_executor import DecisionExecutor
from reviewgate.services.modmail_cache import ModmailThreadStore, open_threads
from reviewgate.services.notify import Notifier
from reviewgate.services.panic import panic_switch
from reviewgate.services.short_codes import ShortCodeResolver


def create_claim_guard(db: Database) -> ClaimGuard:
    """Factory function to create ClaimGuard with the process panic switch."""
    return ClaimGuard(db, ActionLog(db), panic_switch)


def create_decision_executor(db: Database, notifier: Notifier) -> DecisionExecutor:
    """Factory function to create DecisionExecutor with dependencies."""
    return DecisionExecutor(db, notifier, ActionLog(db))


def create_thread_store(db: Database) -> ModmailThreadStore:
    """Factory function bound to the process routing cache."""
    return ModmailThreadStore(db, open_threads)


__all__ = [
    "ActionLog",
    "AnalyticsAggregator",
    "ApplicationStore",
    "ClaimGuard",
    "DecisionExecutor",
    "ModmailThreadStore",
    "ShortCodeResolver",
    "create_claim_guard",
    "create_decision_executor",
    "create_thread_store",
]
