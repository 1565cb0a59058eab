"""
Model package initialization.
"""

from spewn.models.user import User, BUCKETS, PRESETS
from spewn.models.salary_history import SalaryHistory
from spewn.models.transaction import Transaction
from spewn.models.monthly_distribution import MonthlyDistribution

__all__ = [
    'User',
    'BUCKETS',
    'PRESETS',
    'SalaryHistory',
    'Transaction',
    'MonthlyDistribution'
]
