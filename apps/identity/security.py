"""
Role-scoped authorization for session tokens.

`authorize()` is the single decision point: it resolves a token to a user
and returns either Authorized or Denied. `SessionTokenAuth` wires that
decision into django-ninja so a denial short-circuits the request before
the handler runs.
"""
import logging
from dataclasses import dataclass
from typing import Any, FrozenSet, Optional, Union

from django.http import HttpRequest
from ninja.security import APIKeyHeader

from apps.core.errors import ApiError, Forbidden, NotFound, Unauthorized

from .jwt_auth import SESSION_TOKEN_HEADER, decode_token, get_user_id_from_payload
from .models import User
from .permissions import get_role_profile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Authorized:
    user: User
    role: str
    profile: Optional[Any]
    label: str


@dataclass(frozen=True)
class Denied:
    status: int
    reason: str
    error: type = Unauthorized

    def to_error(self) -> ApiError:
        error = self.error(self.reason)
        error.status = self.status
        return error


AuthResult = Union[Authorized, Denied]


def _load_user(payload: dict) -> Optional[User]:
    queryset = User.objects.select_related(
        'address', 'employee_profile', 'employer_profile', 'admin_profile',
    )
    user_id = get_user_id_from_payload(payload)
    if user_id:
        return queryset.filter(id=user_id).first()
    email = payload.get('email')
    if email:
        return queryset.filter(email=email).first()
    return None


def authorize(token: Optional[str], allowed_roles: FrozenSet[str]) -> AuthResult:
    """Resolve a session token and admit it only for one of `allowed_roles`."""
    if not token:
        return Denied(401, "Permission denied. Token is missing.")

    payload = decode_token(token)
    if not payload:
        return Denied(401, "Invalid or expired token.")

    user = _load_user(payload)
    if user is None:
        return Denied(404, "User not found.", NotFound)

    if not user.is_active:
        return Denied(401, "Unauthorized user. Please contact admin.")

    if user.role not in allowed_roles:
        return Denied(403, f"Access denied for role {user.role}.", Forbidden)

    return Authorized(
        user=user,
        role=user.role,
        profile=get_role_profile(user),
        label=user.display_label,
    )


class SessionTokenAuth(APIKeyHeader):
    """
    django-ninja auth class admitting session tokens for a set of roles.

    On success `request.auth` is the Authorized result.
    """
    param_name = SESSION_TOKEN_HEADER

    def __init__(self, allowed_roles: FrozenSet[str]):
        self.allowed_roles = frozenset(allowed_roles)
        super().__init__()

    def authenticate(self, request: HttpRequest, key: Optional[str]) -> Authorized:
        result = authorize(key, self.allowed_roles)
        if isinstance(result, Denied):
            logger.warning(f"Denied {request.method} {request.path}: {result.reason}")
            raise result.to_error()
        return result
