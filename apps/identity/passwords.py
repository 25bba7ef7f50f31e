"""
Password storage with a short reuse history.

Hashes go through Django's configured password hashers. A Credential keeps
the current hash and up to PASSWORD_HISTORY_DEPTH previous ones.
"""
from typing import Optional

from django.conf import settings
from django.contrib.auth.hashers import check_password, make_password

from apps.core.errors import BadRequest

from .models import Credential, User

PASSWORD_REUSE_MESSAGE = "New password must be different from your last two passwords"


def get_credential(user: User) -> Optional[Credential]:
    return Credential.objects.filter(user=user).first()


def verify_password(credential: Optional[Credential], password: str) -> bool:
    if credential is None or not credential.password_hash:
        return False
    return check_password(password, credential.password_hash)


def ensure_not_reused(credential: Optional[Credential], password: str) -> None:
    """Reject the current password and any kept in history."""
    if credential is None:
        return
    for known_hash in [credential.password_hash, *credential.previous_hashes]:
        if known_hash and check_password(password, known_hash):
            raise BadRequest(PASSWORD_REUSE_MESSAGE)


def create_credential(user: User, password: str, created_by: str = "") -> Credential:
    return Credential.objects.create(
        user=user,
        password_hash=make_password(password),
        previous_hashes=[],
        created_by=created_by,
    )


def rotate_password(credential: Credential, password: str, updated_by: str = "") -> Credential:
    """Store a new hash, pushing the current one onto the history."""
    history = [credential.password_hash, *credential.previous_hashes]
    credential.previous_hashes = history[:settings.PASSWORD_HISTORY_DEPTH]
    credential.password_hash = make_password(password)
    credential.updated_by = updated_by
    credential.save(update_fields=['password_hash', 'previous_hashes', 'updated_by', 'updated_at'])
    return credential


def set_password(user: User, password: str, actor_label: str = "") -> Credential:
    """Create the credential or rotate the existing one. Reuse is rejected."""
    credential = get_credential(user)
    ensure_not_reused(credential, password)
    if credential is None:
        return create_credential(user, password, created_by=actor_label)
    return rotate_password(credential, password, updated_by=actor_label)
