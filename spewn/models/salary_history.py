"""
Salary history snapshots written once per cycle transition.
"""

from spewn import db
from datetime import datetime


class SalaryHistory(db.Model):
    """The salary period a new cycle superseded. Rows are never updated."""

    __tablename__ = 'salary_history'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    salary = db.Column(db.Float, nullable=False, default=0.0)
    start_month = db.Column(db.String(7), default='')
    extra_income = db.Column(db.Float, default=0.0)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self) -> dict:
        return {
            'salary': self.salary,
            'startMonth': self.start_month or '',
            'extraIncome': self.extra_income or 0,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self) -> str:
        return f'<SalaryHistory user_id={self.user_id} month={self.start_month} salary={self.salary:,.0f}>'
