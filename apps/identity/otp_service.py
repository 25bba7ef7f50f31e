"""
One-time code lifecycle: issue, verify-and-consume, purge.

Only the most recent code for an (email, action) pair can succeed, and any
terminal verification outcome removes every code stored for that pair.
"""
import logging
import secrets
import string
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.core.errors import ActionFailed, BadRequest, NotFound, ParameterMissing
from apps.core.responses import ResponseMessages

from .models import CodeAction, OneTimeCode, User
from .notifications import CodeSender, get_code_sender
from .validators import is_code_email_valid

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits
MAX_ISSUE_ATTEMPTS = 10


@dataclass(frozen=True)
class IssuedCode:
    email: str
    action: str
    expires_at: datetime
    delivered: bool


def generate_code(length: Optional[int] = None) -> str:
    length = length or settings.OTP_CODE_LENGTH
    return ''.join(secrets.choice(CODE_ALPHABET) for _ in range(length))


def resolve_action(email: str, action: str) -> str:
    """REGISTER-OR-LOGIN becomes LOGIN for known emails and REGISTER otherwise."""
    if action != CodeAction.REGISTER_OR_LOGIN:
        return action
    if User.objects.filter(email=email).exists():
        return CodeAction.LOGIN
    return CodeAction.REGISTER


def purge_expired() -> int:
    deleted, _ = OneTimeCode.objects.filter(expires_at__lt=timezone.now()).delete()
    if deleted:
        logger.info(f"Purged {deleted} expired one-time codes")
    return deleted


def _store_code(email: str, action: str) -> OneTimeCode:
    expires_at = timezone.now() + timedelta(minutes=settings.OTP_EXPIRY_MINUTES)
    for _ in range(MAX_ISSUE_ATTEMPTS):
        try:
            with transaction.atomic():
                return OneTimeCode.objects.create(
                    email=email,
                    code=generate_code(),
                    action=action,
                    expires_at=expires_at,
                )
        except IntegrityError:
            logger.info("Generated code collided with a stored one, regenerating")
    raise ActionFailed("Could not generate a unique code. Please try again.")


def issue_code(email: Optional[str], action: Optional[str], sender: Optional[CodeSender] = None) -> IssuedCode:
    """
    Create a fresh code for (email, action) and hand it to the sender.

    Delivery failure is logged and reported through `delivered`; it never
    fails the request.
    """
    email = (email or "").strip().lower()
    if not email or not action or action not in CodeAction.values:
        raise ParameterMissing()
    if not is_code_email_valid(email):
        raise BadRequest()

    action = resolve_action(email, action)
    purge_expired()
    otp = _store_code(email, action)
    logger.info(f"Issued {action} code for {email}")

    sender = sender or get_code_sender()
    try:
        delivered = bool(sender.send_code(email, otp.code, action, otp.expires_at))
    except Exception as e:
        logger.error(f"Code delivery to {email} raised: {e}")
        delivered = False
    if not delivered:
        logger.error(f"Code for {action} could not be delivered to {email}")

    return IssuedCode(email=email, action=action, expires_at=otp.expires_at, delivered=delivered)


def consume_code(email: str, action: str, submitted: Optional[str]) -> None:
    """
    Check `submitted` against the latest code for (email, action).

    Must run outside any transaction the caller may roll back, so the
    deletions on failure stick.
    """
    email = (email or "").strip().lower()
    pending = OneTimeCode.objects.filter(email=email, action=action)
    latest = pending.first()

    if latest is None:
        raise NotFound(ResponseMessages.OTP_NOT_FOUND)

    if latest.is_expired:
        pending.delete()
        raise BadRequest(ResponseMessages.OTP_EXPIRED)

    if not secrets.compare_digest(latest.code, (submitted or "").strip()):
        pending.delete()
        raise BadRequest(ResponseMessages.INVALID_OTP)

    pending.delete()
