"""
Transaction routes - list, record and delete spends.
"""

from flask import Blueprint, current_app, jsonify, request
from flask_login import login_required, current_user

from spewn.utils.ledger import add_transaction, delete_transaction, list_transactions

transactions_bp = Blueprint('transactions', __name__, url_prefix='/api/transactions')


def _page_size() -> int:
    return current_app.config.get('TRANSACTIONS_PAGE_SIZE', 5)


@transactions_bp.route('', methods=['GET'])
@login_required
def get_transactions():
    """Newest-first transactions; ?limit=0 returns all."""
    limit = request.args.get('limit', type=int)
    if limit is None:
        limit = _page_size()
    txns = list_transactions(current_user, limit)
    return jsonify({'transactions': [t.to_dict() for t in txns]})


@transactions_bp.route('', methods=['POST'])
@login_required
def create_transaction():
    """Record a spend and deduct it from the bucket's remaining amount."""
    data = request.get_json(silent=True) or {}
    txn, recent = add_transaction(
        current_user._get_current_object(),
        data.get('bucket'),
        data.get('category'),
        data.get('amount'),
        page_size=_page_size()
    )
    return jsonify({
        'transaction': txn.to_dict(),
        'transactions': [t.to_dict() for t in recent]
    }), 201


@transactions_bp.route('/<int:transaction_id>', methods=['DELETE'])
@login_required
def remove_transaction(transaction_id):
    """Delete one of the current user's transactions."""
    delete_transaction(current_user, transaction_id)
    return jsonify({'message': 'Transaction deleted successfully'})
