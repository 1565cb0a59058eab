"""
Spending transactions recorded against a budget bucket.
"""

from spewn import db
from datetime import datetime


class Transaction(db.Model):
    """A single spend event. Created and deleted, never edited."""

    __tablename__ = 'transactions'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    bucket = db.Column(db.String(50), nullable=False)
    category = db.Column(db.String(120), default='')
    amount = db.Column(db.Float, nullable=False)  # always positive
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'userId': self.user_id,
            'bucket': self.bucket,
            'category': self.category or '',
            'amount': self.amount,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self) -> str:
        return f'<Transaction {self.bucket} {self.amount:,.2f}>'
