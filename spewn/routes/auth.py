"""
Authentication routes - register, login, logout, current user, password reset.
"""

from flask import Blueprint, jsonify, request
from flask_login import login_user, logout_user, current_user, login_required
from email_validator import validate_email, EmailNotValidError
from datetime import datetime
import logging

from spewn import db
from spewn.models.user import User
from spewn.utils.audit_log import AuditLogger
from spewn.utils.automation import ensure_monthly_automation
from spewn.utils.errors import ValidationError
from spewn.utils.mailer import send_password_reset_email
from spewn.utils.password_security import validate_password

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__, url_prefix='/api/auth')


def _normalize_email(raw) -> str:
    try:
        return validate_email((raw or '').strip(), check_deliverability=False).normalized.lower()
    except EmailNotValidError as e:
        raise ValidationError(f'Invalid email: {str(e)}')


def _check_new_password(password, email=None) -> None:
    is_valid, errors = validate_password(password, email)
    if not is_valid:
        raise ValidationError('; '.join(errors))


@auth_bp.route('/register', methods=['POST'])
def register():
    """Create an account and log it in."""
    data = request.get_json(silent=True) or {}
    password = data.get('password') or ''
    if not data.get('email') or not password:
        raise ValidationError('Email and password required')

    email = _normalize_email(data.get('email'))
    _check_new_password(password, email)

    if User.query.filter_by(email=email).first():
        AuditLogger.log_security_event('REGISTRATION_DUPLICATE_EMAIL', {'email': email})
        raise ValidationError('User already exists')

    user = User(email=email, name=(data.get('name') or '').strip())
    user.set_password(password)
    db.session.add(user)
    db.session.commit()

    login_user(user)
    AuditLogger.log_account_creation(email)
    return jsonify({'ok': True, 'user': {'id': user.id, 'email': user.email}}), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    """Log in with email and password."""
    data = request.get_json(silent=True) or {}
    email = (data.get('email') or '').strip().lower()
    password = data.get('password') or ''
    if not email or not password:
        raise ValidationError('Email and password required')

    user = User.query.filter_by(email=email).first()
    if not user or not user.check_password(password):
        AuditLogger.log_auth_failure(email, 'invalid_credentials')
        raise ValidationError('Invalid credentials')

    login_user(user, remember=bool(data.get('rememberMe')))
    user.last_login = datetime.utcnow()
    db.session.commit()

    AuditLogger.log_auth_success(email)
    return jsonify({'ok': True, 'user': {'id': user.id, 'email': user.email}})


@auth_bp.route('/logout', methods=['POST'])
def logout():
    """Clear the session."""
    if current_user.is_authenticated:
        AuditLogger.log_logout(current_user.email)
    logout_user()
    return jsonify({'ok': True})


@auth_bp.route('/me')
@login_required
def me():
    """Current user's full profile; runs the monthly automation first."""
    user = current_user._get_current_object()
    try:
        ensure_monthly_automation(user)
    except Exception as e:
        db.session.rollback()
        logger.warning(f"Automation check failed for user {user.id}: {e}", exc_info=True)
        db.session.refresh(user)

    return jsonify(user.to_profile())


@auth_bp.route('/forgot-password', methods=['POST'])
def forgot_password():
    """Start a password reset. The answer is the same whether or not the account exists."""
    data = request.get_json(silent=True) or {}
    email = (data.get('email') or '').strip().lower()
    if not email:
        raise ValidationError('Email required')

    user = User.query.filter_by(email=email).first()
    if user:
        token = user.generate_password_reset_token()
        db.session.commit()
        AuditLogger.log_security_event('PASSWORD_RESET_REQUESTED', {'email': email})
        try:
            send_password_reset_email(email, token)
        except Exception as e:
            logger.error(f"Failed to send password reset email to {email}: {e}", exc_info=True)

    return jsonify({'ok': True, 'message': 'If account exists, we will send reset instructions'})


@auth_bp.route('/reset-password', methods=['POST'])
def reset_password():
    """Finish a password reset with the mailed token."""
    data = request.get_json(silent=True) or {}
    email = (data.get('email') or '').strip().lower()
    token = data.get('token')
    new_password = data.get('newPassword')
    if not email or not token or not new_password:
        raise ValidationError('Email, token and newPassword required')

    user = User.query.filter_by(email=email).first()
    if not user or not user.verify_password_reset_token(token):
        raise ValidationError('Invalid or expired token')

    _check_new_password(new_password, email)
    user.set_password(new_password)
    user.clear_password_reset_token()
    db.session.commit()

    AuditLogger.log_password_change(user.id)
    return jsonify({'ok': True, 'message': 'Password updated'})


@auth_bp.route('/change-password', methods=['POST'])
@login_required
def change_password():
    """Change the password of the logged-in user."""
    data = request.get_json(silent=True) or {}
    if not current_user.check_password(data.get('currentPassword') or ''):
        raise ValidationError('Current password is incorrect')

    _check_new_password(data.get('newPassword') or '', current_user.email)
    current_user.set_password(data['newPassword'])
    db.session.commit()

    AuditLogger.log_password_change(current_user.id)
    return jsonify({'ok': True, 'message': 'Password updated'})
