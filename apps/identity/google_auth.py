"""
Google ID-token verification.

The verifier class is chosen by the IDENTITY_VERIFIER setting so tests can
substitute a fake; the default checks the RS256 signature against Google's
published keys and accepts any of GOOGLE_CLIENT_IDS as audience.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import jwt
from django.conf import settings
from django.utils.module_loading import import_string
from jwt import PyJWKClient
from jwt.exceptions import InvalidTokenError, PyJWKClientError

logger = logging.getLogger(__name__)

GOOGLE_ISSUERS = ["accounts.google.com", "https://accounts.google.com"]


@dataclass(frozen=True)
class GoogleIdentity:
    email: str
    name: str = ""
    email_verified: bool = True

    @property
    def first_name(self) -> str:
        return self.name.split(" ", 1)[0] if self.name else ""

    @property
    def last_name(self) -> str:
        parts = self.name.split(" ", 1) if self.name else []
        return parts[1] if len(parts) > 1 else ""


class IdentityVerificationError(Exception):
    """Raised when an external identity token cannot be trusted."""


class IdentityVerifier(ABC):
    @abstractmethod
    def verify_token(self, token: str) -> GoogleIdentity:
        pass


class GoogleIdentityVerifier(IdentityVerifier):
    _jwk_client: Optional[PyJWKClient] = None

    @classmethod
    def _client(cls) -> PyJWKClient:
        if cls._jwk_client is None:
            cls._jwk_client = PyJWKClient(settings.GOOGLE_CERTS_URL)
        return cls._jwk_client

    def verify_token(self, token: str) -> GoogleIdentity:
        audience = settings.GOOGLE_CLIENT_IDS
        if not audience:
            raise IdentityVerificationError("Google sign-in is not configured.")

        try:
            signing_key = self._client().get_signing_key_from_jwt(token).key
            payload = jwt.decode(
                token,
                signing_key,
                algorithms=["RS256"],
                audience=audience,
                issuer=GOOGLE_ISSUERS,
                leeway=60,
            )
        except PyJWKClientError as e:
            logger.error(f"Could not fetch Google signing keys: {e}")
            raise IdentityVerificationError("Google sign-in is temporarily unavailable.")
        except InvalidTokenError as e:
            raise IdentityVerificationError(f"Invalid Google token: {e}")

        email = payload.get("email")
        if not isinstance(email, str) or not email.strip():
            raise IdentityVerificationError("Invalid Google token: missing email.")
        if payload.get("email_verified") is not True:
            raise IdentityVerificationError("Google email is not verified.")

        return GoogleIdentity(email=email.strip().lower(), name=payload.get("name") or "")


def get_identity_verifier() -> IdentityVerifier:
    """Build the verifier configured by IDENTITY_VERIFIER."""
    return import_string(settings.IDENTITY_VERIFIER)()
