"""
Outgoing mail for the password reset flow.
"""

from flask import current_app
from flask_mail import Message
from spewn import mail
import logging

logger = logging.getLogger(__name__)


def send_password_reset_email(email: str, token: str) -> bool:
    """
    Mail a reset token to the user.

    Returns False without sending when MAIL_SERVER is not configured.
    """
    if not current_app.config.get('MAIL_SERVER'):
        logger.info(f"Mail not configured; password reset token for {email} was not sent")
        return False

    reset_url = f"{current_app.config['FRONTEND_URL']}/?reset=1&email={email}&token={token}"
    msg = Message(
        subject='Reset your password',
        recipients=[email],
        body=(
            'Someone asked to reset the password for your account.\n\n'
            f'Use this link within one hour:\n{reset_url}\n\n'
            'If this was not you, ignore this email.'
        )
    )
    mail.send(msg)
    logger.info(f"Password reset email sent to {email}")
    return True
