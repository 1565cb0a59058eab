"""
Per-month distribution snapshots, kept apart from the user's current distribution.
"""

from spewn import db
from datetime import datetime


class MonthlyDistribution(db.Model):
    """Append-only record of the allocation a user had for a given month."""

    __tablename__ = 'monthly_distributions'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    month = db.Column(db.String(7), nullable=False, index=True)
    distribution = db.Column(db.JSON, nullable=False, default=dict)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # One snapshot per user per month
    __table_args__ = (
        db.UniqueConstraint('user_id', 'month', name='uq_user_month_distribution'),
    )

    def to_dict(self) -> dict:
        from spewn.models.user import normalize_buckets
        return {
            'month': self.month,
            'distribution': normalize_buckets(self.distribution),
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self) -> str:
        return f'<MonthlyDistribution user_id={self.user_id} month={self.month}>'
