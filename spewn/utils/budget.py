"""
Profile updates, cycle transitions and distribution previews.

Every function takes the resolved User row explicitly and either
commits its whole change or raises before anything is written.
"""

from datetime import datetime
from typing import Dict
import logging

from spewn import db
from spewn.models.salary_history import SalaryHistory
from spewn.models.user import PRESETS
from spewn.utils.audit_log import AuditLogger
from spewn.utils.distribution import (
    clean_splits,
    compute_distribution,
    current_month,
    is_valid_month,
    to_number,
    validate_splits,
)
from spewn.utils.errors import ConflictError, ValidationError

logger = logging.getLogger(__name__)


def _resolve_preset(user, preset):
    if not preset:
        return user.preset
    if preset not in PRESETS:
        raise ValidationError(f"preset must be one of: {', '.join(PRESETS)}")
    return preset


def _non_negative(value, field: str) -> float:
    number = to_number(value)
    if number < 0:
        raise ValidationError(f'{field} must not be negative')
    return number


def _ensure_unlocked(user, month: str, what: str) -> None:
    if user.salary_locked_month and user.salary_locked_month == month:
        raise ConflictError(f'{what} for {month} is locked and cannot be overwritten')


def _profile_subset(user) -> Dict:
    profile = user.to_profile()
    keys = (
        'salary', 'salaryFrequency', 'splits', 'distribution', 'preset', 'automate',
        'startMonth', 'subscribed', 'salaryHistory', 'salaryLockedMonth',
        'activeTracking', 'onboardComplete',
    )
    return {key: profile[key] for key in keys}


def update_profile(user, data: Dict) -> Dict:
    """
    Apply a profile update, starting a new cycle when ``startNewCycle`` is set.

    Checks run in order and the first failure wins: splits sum, supplied
    startMonth format, startMonth presence for a cycle, then the month lock.

    Returns:
        The updated profile subset the settings/onboarding pages read
    """
    data = data or {}
    start_new_cycle = bool(data.get('startNewCycle'))
    splits = data.get('splits')
    if splits is None:
        splits = user.splits
    start_month = data.get('startMonth')

    validate_splits(splits)
    splits = clean_splits(splits)

    if start_month and not is_valid_month(start_month):
        raise ValidationError('startMonth must be in YYYY-MM format')

    if start_new_cycle:
        _start_new_cycle(user, data, splits, start_month)
    else:
        _patch_profile(user, data, splits)

    return _profile_subset(user)


def _start_new_cycle(user, data: Dict, splits: Dict, start_month) -> None:
    if not start_month or not is_valid_month(start_month):
        raise ValidationError('startMonth must be provided in YYYY-MM format when starting a new cycle')
    _ensure_unlocked(user, start_month, 'Salary')
    preset = _resolve_preset(user, data.get('preset'))

    salary = _non_negative(data.get('salary'), 'salary')
    extra_income = _non_negative(data.get('extraIncome'), 'extraIncome')
    automate = bool(data['automate']) if data.get('automate') is not None else bool(user.automate)

    try:
        # Snapshot the period being superseded before overwriting it
        db.session.add(SalaryHistory(
            user_id=user.id,
            salary=user.salary or 0,
            start_month=user.start_month or '',
            extra_income=user.extra_income or 0,
            created_at=datetime.utcnow()
        ))

        user.salary = salary
        user.extra_income = extra_income
        user.start_month = start_month
        user.salary_locked_month = start_month
        user.splits = splits
        user.preset = preset
        user.automate = automate
        # Tracking is only active for automated users who explicitly start a cycle
        user.active_tracking = automate
        user.onboard_complete = True
        user.distribution = compute_distribution(salary, splits, extra_income)

        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info(f"User {user.id} started a new cycle for {start_month}")
    AuditLogger.log_event('CYCLE_STARTED', {'user_id': user.id, 'month': start_month, 'salary': salary})


def _patch_profile(user, data: Dict, splits: Dict) -> None:
    preset = _resolve_preset(user, data.get('preset'))
    if data.get('salary') is not None:
        user.salary = _non_negative(data.get('salary'), 'salary')
    if data.get('salaryFrequency'):
        user.salary_frequency = str(data['salaryFrequency'])
    user.splits = splits
    user.preset = preset
    user.onboard_complete = True
    if data.get('automate') is not None:
        user.automate = bool(data['automate'])
    if 'startMonth' in data:
        user.start_month = data.get('startMonth') or ''

    db.session.commit()


def simulate_distribution(user, data: Dict) -> Dict:
    """
    Compute and store a distribution for a target month.

    The month defaults to the user's startMonth, then the current month.
    Salary history and the month lock are left untouched.

    Returns:
        Dict with the total salary used, the distribution, month and preset
    """
    data = data or {}
    salary = data.get('salary')
    salary = _non_negative(salary if salary is not None else user.salary, 'salary')
    splits = data.get('splits')
    if splits is None:
        splits = user.splits

    validate_splits(splits)
    splits = clean_splits(splits)

    month = data.get('month') or user.start_month or current_month()
    if not is_valid_month(month):
        raise ValidationError('month must be in YYYY-MM format')
    _ensure_unlocked(user, month, 'Salary distribution')
    preset = _resolve_preset(user, data.get('preset'))

    total = salary + _non_negative(data.get('extraIncome'), 'extraIncome')
    distribution = compute_distribution(total, splits, 0)

    user.distribution = distribution
    db.session.commit()

    return {'salary': total, 'distribution': user.distribution, 'month': month, 'preset': preset}
