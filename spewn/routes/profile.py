"""
Profile routes - salary and splits, cycle start, distribution preview.
"""

from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user

from spewn.models.monthly_distribution import MonthlyDistribution
from spewn.models.user import PRESETS
from spewn.utils.budget import update_profile, simulate_distribution

profile_bp = Blueprint('profile', __name__, url_prefix='/api')


@profile_bp.route('/profile', methods=['PUT'])
@login_required
def put_profile():
    """Update salary/splits, or start a new cycle when startNewCycle is set."""
    data = request.get_json(silent=True) or {}
    return jsonify(update_profile(current_user._get_current_object(), data))


@profile_bp.route('/simulate-distribute', methods=['POST'])
@login_required
def simulate_distribute():
    """Compute and store the distribution for a month."""
    data = request.get_json(silent=True) or {}
    return jsonify(simulate_distribution(current_user._get_current_object(), data))


@profile_bp.route('/presets')
def presets():
    """Preset split tables offered by the onboarding form."""
    return jsonify(PRESETS)


@profile_bp.route('/distribution-history')
@login_required
def distribution_history():
    """Per-month distribution snapshots, newest month first."""
    snapshots = MonthlyDistribution.query.filter_by(user_id=current_user.id).order_by(
        MonthlyDistribution.month.desc()
    ).all()
    return jsonify({'history': [s.to_dict() for s in snapshots]})
