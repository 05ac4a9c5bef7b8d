import os
import secrets
from pathlib import Path
from dotenv import load_dotenv
import dj_database_url

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent

ENVIRONMENT = os.getenv('ENVIRONMENT', 'development')

load_dotenv(BASE_DIR / '.env')


# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = os.environ.get('SECRET_KEY', secrets.token_hex(32))

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = os.getenv('DEBUG', 'False') == 'True'

if ENVIRONMENT == 'production':
    ALLOWED_HOSTS = [host for host in os.getenv('ALLOWED_HOSTS', '').split(',') if host]
else:
    ALLOWED_HOSTS = ['localhost', '127.0.0.1', 'testserver']


# Application definition

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',

    'rest_framework',

    'eld_devices',
    'eld_logs',
    'hos_compliance',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'hos_tracking_api.urls'

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

WSGI_APPLICATION = 'hos_tracking_api.wsgi.application'


# Database
# Telemetry ingestion must fail fast, so connection/lock waits stay in single-digit seconds.
DB_TIMEOUT_SECONDS = int(os.getenv('DB_TIMEOUT_SECONDS', '5'))

DATABASES = {
    'default': dj_database_url.config(
        default=f"sqlite:///{BASE_DIR / 'db.sqlite3'}",
        conn_max_age=600 if ENVIRONMENT == 'production' else 0,
        conn_health_checks=True,
    )
}

if DATABASES['default']['ENGINE'] == 'django.db.backends.sqlite3':
    DATABASES['default']['OPTIONS'] = {'timeout': DB_TIMEOUT_SECONDS}
else:
    DATABASES['default']['OPTIONS'] = {
        'connect_timeout': DB_TIMEOUT_SECONDS,
        'options': f'-c lock_timeout={DB_TIMEOUT_SECONDS * 1000}',
    }
    if ENVIRONMENT == 'production':
        DATABASES['default']['OPTIONS']['sslmode'] = 'require'


# Internationalization

LANGUAGE_CODE = 'en-us'

TIME_ZONE = 'UTC'

USE_I18N = True

USE_TZ = True


# Static files (CSS, JavaScript, Images)

STATIC_URL = 'static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# REST Framework settings
# Authentication and subscription gating sit in front of this service.
REST_FRAMEWORK = {
    'DEFAULT_PERMISSION_CLASSES': [
        'rest_framework.permissions.AllowAny',
    ],
    'DEFAULT_RENDERER_CLASSES': [
        'rest_framework.renderers.JSONRenderer',
    ],
    'DEFAULT_PARSER_CLASSES': [
        'rest_framework.parsers.JSONParser',
    ],
    'DATETIME_FORMAT': 'iso-8601',
}

# Hours of Service thresholds (minutes unless noted)
HOS_SETTINGS = {
    'MAX_DRIVING_MINUTES': 11 * 60,
    'MAX_ON_DUTY_MINUTES': 14 * 60,
    'MAX_CYCLE_MINUTES': 70 * 60,
    'CYCLE_DAYS': 8,
    'MAX_DRIVING_BEFORE_BREAK_MINUTES': 8 * 60,
    'REQUIRED_BREAK_MINUTES': 30,
    'COMPLIANCE_WINDOW_HOURS': 24,
}

# Telemetry / interval tracking
ELD_SETTINGS = {
    'TRANSITION_MAX_ATTEMPTS': int(os.getenv('ELD_TRANSITION_MAX_ATTEMPTS', '3')),
    'TRANSITION_RETRY_BACKOFF_SECONDS': float(os.getenv('ELD_TRANSITION_RETRY_BACKOFF_SECONDS', '0.05')),
    'INTERVAL_QUERY_DEFAULT_DAYS': 7,
    'ANALYTICS_WINDOW_DAYS': 30,
}


# Logging Configuration
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{levelname} {asctime} {module} {message}',
            'style': '{',
        },
        'audit': {
            'format': '{levelname} {asctime} AUDIT {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
        'audit_console': {
            'class': 'logging.StreamHandler',
            'formatter': 'audit',
        },
    },
    'loggers': {
        'django': {
            'handlers': ['console'],
            'level': 'INFO',
        },
        'eld_devices': {
            'handlers': ['console'],
            'level': os.getenv('ELD_LOG_LEVEL', 'INFO'),
        },
        'eld_logs': {
            'handlers': ['console'],
            'level': os.getenv('ELD_LOG_LEVEL', 'INFO'),
        },
        'eld_logs.audit': {
            'handlers': ['audit_console'],
            'level': 'INFO',
            'propagate': False,
        },
        'hos_compliance': {
            'handlers': ['console'],
            'level': os.getenv('ELD_LOG_LEVEL', 'INFO'),
        },
    },
}
