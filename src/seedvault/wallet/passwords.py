"""
Password policy for vault passwords.

Minimum 6 characters with both letters and numbers. Strength is a
rough score for display, not a security guarantee.
"""

import re
from dataclasses import dataclass, field

from ..errors import InvalidPassword

MIN_PASSWORD_LENGTH = 6

STRENGTH_NONE = "None"
STRENGTH_WEAK = "Weak"
STRENGTH_MEDIUM = "Medium"
STRENGTH_STRONG = "Strong"


@dataclass
class PasswordCheck:
    """Result of validating a password against the policy."""
    is_valid: bool
    errors: list[str] = field(default_factory=list)
    strength: str = STRENGTH_NONE


def password_strength(password: str) -> str:
    """Score a password: one point each for length>=6, length>=8, lower, upper, digit, symbol."""
    if not password:
        return STRENGTH_NONE

    score = 0
    if len(password) >= 6:
        score += 1
    if len(password) >= 8:
        score += 1
    if re.search(r"[a-z]", password):
        score += 1
    if re.search(r"[A-Z]", password):
        score += 1
    if re.search(r"[0-9]", password):
        score += 1
    if re.search(r"[^A-Za-z0-9]", password):
        score += 1

    if score <= 2:
        return STRENGTH_WEAK
    if score <= 4:
        return STRENGTH_MEDIUM
    return STRENGTH_STRONG


def validate_password(password: str) -> PasswordCheck:
    """Check a password against the policy."""
    errors = []

    if not password:
        errors.append("Password is required")
    elif len(password) < MIN_PASSWORD_LENGTH:
        errors.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    elif not (re.search(r"\d", password) and re.search(r"[a-zA-Z]", password)):
        errors.append("Password must contain both letters and numbers")

    return PasswordCheck(
        is_valid=not errors,
        errors=errors,
        strength=password_strength(password),
    )


def require_valid_password(password: str) -> PasswordCheck:
    """
    Validate a password, raising if it fails the policy.

    Raises:
        InvalidPassword: With the list of failed rules
    """
    check = validate_password(password)
    if not check.is_valid:
        raise InvalidPassword(check.errors)
    return check
