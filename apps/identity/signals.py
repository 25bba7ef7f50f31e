import logging

from django.contrib.auth.signals import user_logged_in
from django.dispatch import receiver

logger = logging.getLogger(__name__)


@receiver(user_logged_in)
def log_user_login(sender, user, request, **kwargs):
    """
    Record session-token issuance. Django's own receiver updates last_login.
    """
    ip = request.META.get('REMOTE_ADDR') if request else 'Unknown'
    logger.info(f"USER_LOGIN {user.email} role={getattr(user, 'role', '')} ip={ip}")
