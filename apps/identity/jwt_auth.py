"""
Session token utilities for the Job Portal.

Tokens are HS256-signed JWTs carried in the X-Access-Token header.
They hold the user id, email and role and stay valid for 30 days.
"""
import jwt
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID
from django.conf import settings


JWT_ALGORITHM = 'HS256'
SESSION_TOKEN_HEADER = 'X-Access-Token'


def _secret() -> str:
    return getattr(settings, 'JWT_SECRET', None) or settings.SECRET_KEY


def create_session_token(user_id: UUID, email: str, role: str) -> str:
    """
    Create a session token for an authenticated user.

    Expires after SESSION_TOKEN_LIFETIME_DAYS (30 by default).
    """
    now = datetime.now(timezone.utc)
    payload = {
        'sub': str(user_id),
        'email': email,
        'role': role,
        'iat': now,
        'exp': now + timedelta(days=settings.SESSION_TOKEN_LIFETIME_DAYS),
        'type': 'session',
    }
    return jwt.encode(payload, _secret(), algorithm=JWT_ALGORITHM)


def decode_token(token: str) -> Optional[dict]:
    """
    Decode and validate a session token.

    Returns:
        Decoded payload if valid, None if invalid/expired.
    """
    try:
        return jwt.decode(token, _secret(), algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None


def get_user_id_from_payload(payload: dict) -> Optional[UUID]:
    if payload and 'sub' in payload:
        try:
            return UUID(str(payload['sub']))
        except ValueError:
            return None
    return None
