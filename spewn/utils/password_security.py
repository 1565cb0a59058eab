"""
Password policy checks used at registration and password reset.
"""

import re
from typing import Tuple, List


class PasswordValidator:
    """Validates a new password against a configurable policy."""

    COMMON_PASSWORDS = {
        'password', 'password123', '123456', '12345678', 'qwerty',
        'abc123', '111111', 'letmein', 'iloveyou', 'admin'
    }

    def __init__(self, min_length: int = 8, max_length: int = 128, require_digit: bool = False):
        self.min_length = min_length
        self.max_length = max_length
        self.require_digit = require_digit

    def validate(self, password: str, email: str = None) -> Tuple[bool, List[str]]:
        """
        Validate password against the policy.

        Args:
            password: The password to validate
            email: Optional email; its local part must not appear in the password

        Returns:
            Tuple of (is_valid, list_of_errors)
        """
        errors = []
        password = password or ''

        if len(password) < self.min_length:
            errors.append(f'Password must be at least {self.min_length} characters long')

        if len(password) > self.max_length:
            errors.append(f'Password must not exceed {self.max_length} characters')

        if self.require_digit and not re.search(r'\d', password):
            errors.append('Password must contain at least one digit')

        if password.lower() in self.COMMON_PASSWORDS:
            errors.append('This password is too common. Please choose a more unique password')

        if email:
            local_part = email.split('@', 1)[0].lower()
            if len(local_part) >= 3 and local_part in password.lower():
                errors.append('Password must not contain your email name')

        return (len(errors) == 0, errors)


# Global validator instance
password_validator = PasswordValidator(min_length=6)


def validate_password(password: str, email: str = None) -> Tuple[bool, List[str]]:
    """Convenience function for password validation."""
    return password_validator.validate(password, email)
