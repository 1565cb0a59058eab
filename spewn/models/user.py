"""
User model for authentication and the salary-splitting profile.
"""

from spewn import db
from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash
from datetime import datetime, timedelta
import secrets


BUCKETS = ('savings', 'parents_preserve', 'extras_buffer', 'wants', 'needs')

PRESETS = {
    'balanced': {'savings': 30, 'parents_preserve': 10, 'extras_buffer': 10, 'wants': 15, 'needs': 35},
    'conservative': {'savings': 35, 'parents_preserve': 10, 'extras_buffer': 5, 'wants': 10, 'needs': 40},
    'aggressive': {'savings': 40, 'parents_preserve': 5, 'extras_buffer': 10, 'wants': 20, 'needs': 25},
}


def normalize_buckets(mapping) -> dict:
    """
    Return a plain dict ordered by the canonical bucket order.

    Known buckets come first in BUCKETS order, any other keys follow sorted.
    Accepts None, dicts, or iterables of (key, value) pairs.
    """
    if not mapping:
        return {}
    items = dict(mapping)
    ordered = {k: items[k] for k in BUCKETS if k in items}
    for key in sorted(k for k in items if k not in ordered):
        ordered[key] = items[key]
    return ordered


class User(UserMixin, db.Model):
    """User account plus current salary, splits and live distribution."""

    __tablename__ = 'users'

    # Core fields
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    name = db.Column(db.String(120), default='')
    password_hash = db.Column(db.String(255), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    last_login = db.Column(db.DateTime, nullable=True)

    # Compensation
    salary = db.Column(db.Float, default=0.0)
    salary_frequency = db.Column(db.String(20), default='monthly')
    extra_income = db.Column(db.Float, default=0.0)  # extra income of the current cycle
    _splits = db.Column('splits', db.JSON, default=lambda: {k: 0 for k in BUCKETS})
    _distribution = db.Column('distribution', db.JSON, default=dict)
    preset = db.Column(db.String(20), nullable=True, default='balanced')
    currency = db.Column(db.String(8), default='INR')
    subscribed = db.Column(db.Boolean, default=False)

    # Cycle / automation state ("YYYY-MM" strings, '' when unset)
    automate = db.Column(db.Boolean, default=False)
    active_tracking = db.Column(db.Boolean, default=False)
    start_month = db.Column(db.String(7), default='')
    salary_locked_month = db.Column(db.String(7), default='')
    last_automated_month = db.Column(db.String(7), default='')
    onboard_complete = db.Column(db.Boolean, default=False)

    # Password reset fields
    password_reset_token = db.Column(db.String(255), nullable=True)
    password_reset_expiry = db.Column(db.DateTime, nullable=True)

    # Relationships
    salary_history = db.relationship(
        'SalaryHistory', backref='user', lazy=True,
        order_by='SalaryHistory.id', cascade='all, delete-orphan'
    )
    transactions = db.relationship('Transaction', backref='user', lazy=True, cascade='all, delete-orphan')
    monthly_distributions = db.relationship(
        'MonthlyDistribution', backref='user', lazy=True, cascade='all, delete-orphan'
    )

    # JSON columns are reassigned, never mutated in place, so changes get flushed.
    @property
    def splits(self) -> dict:
        return normalize_buckets(self._splits)

    @splits.setter
    def splits(self, value) -> None:
        self._splits = normalize_buckets(value)

    @property
    def distribution(self) -> dict:
        return normalize_buckets(self._distribution)

    @distribution.setter
    def distribution(self, value) -> None:
        self._distribution = normalize_buckets(value)

    def set_password(self, password: str) -> None:
        """Hash and set the user's password."""
        self.password_hash = generate_password_hash(password, method='pbkdf2:sha256:600000')

    def check_password(self, password: str) -> bool:
        """Check if provided password matches the hash."""
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    def generate_password_reset_token(self, valid_for: timedelta = timedelta(hours=1)) -> str:
        """Generate a reset token; only its hash is stored."""
        token = secrets.token_urlsafe(32)
        self.password_reset_token = generate_password_hash(token)
        self.password_reset_expiry = datetime.utcnow() + valid_for
        return token

    def verify_password_reset_token(self, token: str) -> bool:
        """Verify password reset token and its expiry."""
        if not self.password_reset_token or not self.password_reset_expiry:
            return False
        if datetime.utcnow() > self.password_reset_expiry:
            return False
        return check_password_hash(self.password_reset_token, token)

    def clear_password_reset_token(self) -> None:
        self.password_reset_token = None
        self.password_reset_expiry = None

    def to_profile(self) -> dict:
        """Serialize the fields the frontend reads from /me."""
        return {
            'id': self.id,
            'email': self.email,
            'name': self.name or '',
            'salary': self.salary or 0,
            'salaryFrequency': self.salary_frequency or 'monthly',
            'splits': self.splits,
            'distribution': self.distribution or None,
            'preset': self.preset or None,
            'currency': self.currency or 'INR',
            'subscribed': bool(self.subscribed),
            'automate': bool(self.automate),
            'activeTracking': bool(self.active_tracking),
            'salaryHistory': [entry.to_dict() for entry in self.salary_history],
            'salaryLockedMonth': self.salary_locked_month or '',
            'startMonth': self.start_month or '',
            'onboardComplete': bool(self.onboard_complete),
            'lastAutomatedMonth': self.last_automated_month or '',
        }

    def __repr__(self) -> str:
        return f'<User {self.email}>'
