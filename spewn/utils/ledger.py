"""
Transaction recording against the user's live distribution.

The distribution is a running "remaining" balance: recording a spend
lowers the bucket, deleting the spend later does not raise it again.
"""

from typing import Dict, List, Optional
import logging

from spewn import db
from spewn.models.transaction import Transaction
from spewn.utils.audit_log import AuditLogger
from spewn.utils.distribution import to_number
from spewn.utils.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 5


def list_transactions(user, limit: Optional[int] = DEFAULT_PAGE_SIZE) -> List[Transaction]:
    """
    Return the user's transactions newest first.

    A limit of 0 or None returns every transaction.
    """
    if limit is not None and limit < 0:
        raise ValidationError('limit must not be negative')
    query = Transaction.query.filter_by(user_id=user.id).order_by(
        Transaction.created_at.desc(), Transaction.id.desc()
    )
    if limit:
        query = query.limit(limit)
    return query.all()


def deduct_from_bucket(distribution: Dict, bucket: str, amount: float) -> Optional[Dict]:
    """
    Return a copy of distribution with amount taken off bucket, floored at 0.

    Returns None when the bucket has no numeric allocation to deduct from.
    """
    current = (distribution or {}).get(bucket)
    if current is None or isinstance(current, bool) or not isinstance(current, (int, float)):
        return None
    updated = dict(distribution)
    updated[bucket] = max(0, current - amount)
    return updated


def add_transaction(user, bucket, category, amount, page_size: int = DEFAULT_PAGE_SIZE):
    """
    Record a spend and deduct it from the matching bucket.

    Returns:
        Tuple of (created transaction, refreshed newest-first page)
    """
    amount = to_number(amount)
    if not bucket or not isinstance(bucket, str) or amount <= 0:
        raise ValidationError('Invalid payload')

    txn = Transaction(user_id=user.id, bucket=bucket, category=str(category or ''), amount=amount)
    db.session.add(txn)

    updated = deduct_from_bucket(user.distribution, bucket, amount)
    if updated is not None:
        user.distribution = updated
    else:
        logger.debug(f"No allocation for bucket {bucket!r} on user {user.id}; nothing deducted")

    db.session.commit()

    AuditLogger.log_event('TRANSACTION_CREATED', {'user_id': user.id, 'transaction_id': txn.id, 'bucket': bucket})
    return txn, list_transactions(user, page_size)


def delete_transaction(user, transaction_id) -> None:
    """
    Delete one of the user's transactions.

    The amount deducted at creation stays deducted.

    Raises:
        NotFoundError: if the id does not exist or belongs to someone else
    """
    txn = Transaction.query.filter_by(id=transaction_id, user_id=user.id).first()
    if txn is None:
        raise NotFoundError('Transaction not found or unauthorized')

    db.session.delete(txn)
    db.session.commit()

    AuditLogger.log_event('TRANSACTION_DELETED', {'user_id': user.id, 'transaction_id': transaction_id})
