"""
Delivery of one-time codes.

The sender class is chosen by the OTP_CODE_SENDER setting (a dotted path),
so tests and alternative transports plug in without touching the flows.

    OTP_CODE_SENDER=apps.identity.notifications.EmailCodeSender   # SMTP via Django mail
"""
import logging
from abc import ABC, abstractmethod
from datetime import datetime

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template.loader import render_to_string
from django.utils import timezone
from django.utils.module_loading import import_string

logger = logging.getLogger(__name__)


class CodeSender(ABC):
    """Narrow interface for handing a code to the user."""

    @abstractmethod
    def send_code(self, email: str, code: str, action: str, expires_at: datetime) -> bool:
        """
        Deliver `code` to `email`.

        Returns:
            True if the transport accepted the message, False otherwise.
        """
        pass


class EmailCodeSender(CodeSender):
    """Sends codes as an HTML email through Django's configured mail backend."""

    subject_template = "Verify Your Details - {portal}"

    def send_code(self, email: str, code: str, action: str, expires_at: datetime) -> bool:
        context = {
            'portal_name': settings.PORTAL_NAME,
            'code': code,
            'action': action,
            'expires_at': timezone.localtime(expires_at).strftime('%d %b %Y, %I:%M %p %Z'),
            'expiry_minutes': settings.OTP_EXPIRY_MINUTES,
        }
        message = EmailMultiAlternatives(
            subject=self.subject_template.format(portal=settings.PORTAL_NAME),
            body=render_to_string('identity/otp_email.txt', context),
            from_email=settings.DEFAULT_FROM_EMAIL,
            to=[email],
        )
        message.attach_alternative(render_to_string('identity/otp_email.html', context), 'text/html')

        try:
            sent = message.send(fail_silently=False)
        except Exception as e:
            logger.error(f"Failed to send {action} code to {email}: {e}")
            return False
        return sent > 0


def get_code_sender() -> CodeSender:
    """Build the sender configured by OTP_CODE_SENDER."""
    return import_string(settings.OTP_CODE_SENDER)()
