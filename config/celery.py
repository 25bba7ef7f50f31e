"""
Celery configuration for the Job Portal.
"""
import os
from celery import Celery
from celery.schedules import crontab

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

app = Celery('config')
app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks()

# Celery Beat Schedule
app.conf.beat_schedule = {
    'purge-expired-otp-codes': {
        'task': 'apps.identity.tasks.purge_expired_codes',
        'schedule': crontab(minute='*/15'),
    },
}
