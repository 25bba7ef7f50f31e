"""
Input checks shared by the authentication flows.

All of these raise before anything is written.
"""
import re
from typing import Optional

from django.conf import settings

from apps.core.errors import BadRequest

# Addresses allowed to receive codes; the TLD list mirrors the mail provider's allow-list.
CODE_EMAIL_RE = re.compile(
    r'^[\w.%+-]+@([a-zA-Z0-9-]+\.)+(gmail\.com|com|net|org|edu|gov|mil|co\.in|in|co|io|info|biz|tech|me|ai)$',
    re.IGNORECASE,
)
CODE_EMAIL_MIN_LENGTH = 5
CODE_EMAIL_MAX_LENGTH = 56

EMAIL_RE = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')


def is_code_email_valid(email: str) -> bool:
    if not email:
        return False
    return (
        CODE_EMAIL_MIN_LENGTH <= len(email) <= CODE_EMAIL_MAX_LENGTH
        and CODE_EMAIL_RE.match(email) is not None
    )


def validate_email_format(email: str, message: str = "Invalid email format") -> str:
    email = (email or "").strip()
    if not EMAIL_RE.match(email):
        raise BadRequest(message)
    return email


def validate_new_password(password: Optional[str], confirm_password: Optional[str]) -> str:
    """Minimum length and confirmation equality."""
    password = password or ""
    if len(password) < settings.PASSWORD_MIN_LENGTH:
        raise BadRequest(f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters long")
    if password != confirm_password:
        raise BadRequest("Password and confirm password do not match")
    return password
