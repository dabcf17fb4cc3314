"""Django settings for the ReviewAssigner project.

Values come from ``ReviewAssigner.config``; see that module for the
environment variables it reads.
"""

from ReviewAssigner.config import BASE_DIR, get_settings

SERVICE = get_settings()

SECRET_KEY = SERVICE.secret_key.get_secret_value()
DEBUG = SERVICE.debug
ALLOWED_HOSTS = SERVICE.allowed_hosts

INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'django.contrib.auth',
    'rest_framework',
    'reviews',
]

MIDDLEWARE = [
    'reviews.middleware.RequestContextMiddleware',
    'django.middleware.common.CommonMiddleware',
]

ROOT_URLCONF = 'ReviewAssigner.urls'
WSGI_APPLICATION = 'ReviewAssigner.wsgi.application'

DATABASES = {
    'default': SERVICE.database.as_django(),
}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = False
USE_TZ = True

APPEND_SLASH = False

REST_FRAMEWORK = {
    'DEFAULT_RENDERER_CLASSES': ['rest_framework.renderers.JSONRenderer'],
    'DEFAULT_PARSER_CLASSES': ['rest_framework.parsers.JSONParser'],
    'DEFAULT_AUTHENTICATION_CLASSES': [],
    'DEFAULT_PERMISSION_CLASSES': ['rest_framework.permissions.AllowAny'],
    'UNAUTHENTICATED_USER': None,
    'TEST_REQUEST_DEFAULT_FORMAT': 'json',
}

# Wall-clock limit of one unit of work, in seconds.
REVIEWS_TRANSACTION_TIMEOUT = SERVICE.transaction_timeout

REVIEWS_LOG_LEVEL = SERVICE.log_level
REVIEWS_LOG_JSON = SERVICE.log_json

LOGGING_CONFIG = None
