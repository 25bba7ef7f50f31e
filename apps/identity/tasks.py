from celery import shared_task
import logging

from .otp_service import purge_expired

logger = logging.getLogger(__name__)


@shared_task
def purge_expired_codes():
    """
    Remove expired one-time codes. Runs on the beat schedule in addition to
    the sweep done whenever a code is issued.
    """
    deleted = purge_expired()
    logger.info(f"Scheduled purge removed {deleted} expired codes")
    return deleted
