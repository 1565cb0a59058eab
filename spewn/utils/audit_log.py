"""
Audit logging for authentication and budget lifecycle events.

Events go to the 'spewn.audit' logger as a single line:
    EVENT_NAME key=value key=value ...
"""

from flask import has_request_context, request
import logging

audit_logger = logging.getLogger('spewn.audit')


class AuditLogger:
    """Static helpers that record security and lifecycle events."""

    @staticmethod
    def _emit(event: str, details: dict = None, level: int = logging.INFO) -> None:
        details = dict(details or {})
        if has_request_context():
            details.setdefault('ip', request.remote_addr)
        fields = ' '.join(f'{key}={value}' for key, value in details.items())
        audit_logger.log(level, f'{event} {fields}'.strip())

    @staticmethod
    def log_security_event(event: str, details: dict = None) -> None:
        AuditLogger._emit(event, details, logging.WARNING)

    @staticmethod
    def log_event(event: str, details: dict = None) -> None:
        AuditLogger._emit(event, details)

    @staticmethod
    def log_auth_success(email: str) -> None:
        AuditLogger._emit('AUTH_SUCCESS', {'email': email})

    @staticmethod
    def log_auth_failure(email: str, reason: str) -> None:
        AuditLogger._emit('AUTH_FAILURE', {'email': email, 'reason': reason}, logging.WARNING)

    @staticmethod
    def log_account_creation(email: str) -> None:
        AuditLogger._emit('ACCOUNT_CREATED', {'email': email})

    @staticmethod
    def log_logout(email: str) -> None:
        AuditLogger._emit('LOGOUT', {'email': email})

    @staticmethod
    def log_password_change(user_id: int) -> None:
        AuditLogger._emit('PASSWORD_CHANGED', {'user_id': user_id})
