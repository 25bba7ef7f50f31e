"""
Django settings for the Job Portal API.

Every value is read from the environment so the same module serves local
development, CI and production. Database and storage sections are built by
config/database.py and config/storage.py.
"""
import os
from pathlib import Path

from .database import get_database_config
from .storage import get_storage_settings

BASE_DIR = Path(__file__).resolve().parent.parent


def _env_bool(name: str, default: str = 'false') -> bool:
    return os.getenv(name, default).lower() in ('1', 'true', 'yes')


def _env_list(name: str, default: str = '') -> list:
    return [item.strip() for item in os.getenv(name, default).split(',') if item.strip()]


# =============================================================================
# Core
# =============================================================================

SECRET_KEY = os.getenv('SECRET_KEY', 'django-insecure-local-development-key')
DEBUG = _env_bool('DEBUG', 'true')
ALLOWED_HOSTS = _env_list('ALLOWED_HOSTS', 'localhost,127.0.0.1,testserver')

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'apps.core',
    'apps.identity',
    'apps.categories',
    'apps.jobs',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
]

ROOT_URLCONF = 'config.urls'
ASGI_APPLICATION = 'config.asgi.application'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

DATABASES = {'default': get_database_config(BASE_DIR)}
DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

AUTH_USER_MODEL = 'identity.User'

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

STATIC_URL = '/static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'

# Registration forms carry resumes and work samples.
DATA_UPLOAD_MAX_MEMORY_SIZE = 25 * 1024 * 1024
FILE_UPLOAD_MAX_MEMORY_SIZE = 25 * 1024 * 1024


# =============================================================================
# Storage (S3 or local filesystem)
# =============================================================================

globals().update(get_storage_settings(BASE_DIR))
UPLOAD_ROOT_FOLDER = os.getenv('UPLOAD_ROOT_FOLDER', 'JOBPORTALDATA')


# =============================================================================
# Authentication
# =============================================================================

JWT_SECRET = os.getenv('JWT_SECRET', SECRET_KEY)
SESSION_TOKEN_LIFETIME_DAYS = int(os.getenv('SESSION_TOKEN_LIFETIME_DAYS', '30'))

OTP_CODE_LENGTH = 6
OTP_EXPIRY_MINUTES = int(os.getenv('OTP_EXPIRY_MINUTES', '5'))
PASSWORD_MIN_LENGTH = 6
PASSWORD_HISTORY_DEPTH = 2

# Android and web client ids are both accepted as audiences.
GOOGLE_CLIENT_IDS = _env_list('GOOGLE_CLIENT_IDS')
GOOGLE_CERTS_URL = os.getenv('GOOGLE_CERTS_URL', 'https://www.googleapis.com/oauth2/v3/certs')

# Collaborators, swappable by dotted path.
OTP_CODE_SENDER = os.getenv('OTP_CODE_SENDER', 'apps.identity.notifications.EmailCodeSender')
IDENTITY_VERIFIER = os.getenv('IDENTITY_VERIFIER', 'apps.identity.google_auth.GoogleIdentityVerifier')


# =============================================================================
# Email
# =============================================================================

EMAIL_BACKEND = os.getenv('EMAIL_BACKEND', 'django.core.mail.backends.smtp.EmailBackend')
EMAIL_HOST = os.getenv('EMAIL_HOST', 'smtpout.secureserver.net')
EMAIL_PORT = int(os.getenv('EMAIL_PORT', '465'))
EMAIL_HOST_USER = os.getenv('EMAIL_HOST_USER', '')
EMAIL_HOST_PASSWORD = os.getenv('EMAIL_HOST_PASSWORD', '')
EMAIL_USE_SSL = _env_bool('EMAIL_USE_SSL', 'true')
EMAIL_TIMEOUT = int(os.getenv('EMAIL_TIMEOUT', '10'))
DEFAULT_FROM_EMAIL = os.getenv('DEFAULT_FROM_EMAIL', f"Job Portal <{EMAIL_HOST_USER or 'no-reply@localhost'}>")
PORTAL_NAME = os.getenv('PORTAL_NAME', 'Job Portal')


# =============================================================================
# Celery
# =============================================================================

CELERY_BROKER_URL = os.getenv('CELERY_BROKER_URL', 'redis://localhost:6379/0')
CELERY_RESULT_BACKEND = os.getenv('CELERY_RESULT_BACKEND', CELERY_BROKER_URL)
CELERY_TASK_ALWAYS_EAGER = _env_bool('CELERY_TASK_ALWAYS_EAGER')
CELERY_TIMEZONE = TIME_ZONE


# =============================================================================
# Logging
# =============================================================================

LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'standard': {
            'format': '%(asctime)s %(levelname)s [%(name)s] %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'standard',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': LOG_LEVEL,
    },
    'loggers': {
        'django': {
            'handlers': ['console'],
            'level': os.getenv('DJANGO_LOG_LEVEL', 'WARNING'),
            'propagate': False,
        },
    },
}
