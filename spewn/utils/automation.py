"""
Monthly automation sweep.

Runs lazily when a user's profile is read: users who opted into
automation get their distribution recomputed once per calendar month.
"""

from typing import Optional
import logging

from spewn import db
from spewn.utils.audit_log import AuditLogger
from spewn.utils.distribution import compute_distribution, current_month

logger = logging.getLogger(__name__)


def is_automation_due(user, month: str) -> bool:
    """Due when automation is on and this month has not been processed."""
    return bool(user.automate) and (user.last_automated_month or '') != month


def ensure_monthly_automation(user, month: Optional[str] = None) -> bool:
    """
    Recompute the user's distribution for ``month`` if automation is due.

    Extra income is not carried over; the distribution is rebuilt from
    the stored salary and splits alone. ``last_automated_month`` makes a
    second call within the same month a no-op.

    Args:
        user: The User row to check
        month: 'YYYY-MM' to process, defaults to the current UTC month

    Returns:
        True if the distribution was recomputed and saved
    """
    month = month or current_month()
    if not is_automation_due(user, month):
        return False

    user.distribution = compute_distribution(user.salary or 0, user.splits, 0)
    user.last_automated_month = month
    db.session.commit()

    logger.info(f"Automation recomputed distribution for user {user.id} month {month}")
    AuditLogger.log_event('AUTOMATION_RUN', {'user_id': user.id, 'month': month})
    return True
