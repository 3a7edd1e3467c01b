"""
Django settings for bracketeer.

Values that differ between deployments are read from the environment:

    BRACKETEER_SECRET_KEY   secret key (a development default is used when unset)
    BRACKETEER_DEBUG        "1"/"true" enables debug mode
    BRACKETEER_DB_PATH      sqlite database file
    BRACKETEER_LOG_LEVEL    level of the bracketeer loggers (default INFO)
    BRACKETEER_LOCK_TIMEOUT seconds to wait for a busy tournament (default 5)
"""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


SECRET_KEY = os.environ.get('BRACKETEER_SECRET_KEY', 'bracketeer-development-key')
DEBUG = env_bool('BRACKETEER_DEBUG', default=True)
ALLOWED_HOSTS = os.environ.get('BRACKETEER_ALLOWED_HOSTS', 'localhost,127.0.0.1').split(',')

INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'django.contrib.auth',
    'reversion',
    'bracketeer.bracket_core',
    'bracketeer.tournament',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
]

ROOT_URLCONF = 'bracketeer.urls'

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': os.environ.get('BRACKETEER_DB_PATH', str(BASE_DIR / 'bracketeer.sqlite3')),
    }
}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

# Engine configuration
BRACKETEER_SCORING = {
    'win_points': 3,
    'draw_points': 1,
    'loss_points': 0,
    'bye_points': 3,
}
BRACKETEER_LOCK_TIMEOUT = float(os.environ.get('BRACKETEER_LOCK_TIMEOUT', '5'))

LOG_LEVEL = os.environ.get('BRACKETEER_LOG_LEVEL', 'INFO')

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '%(asctime)s %(levelname)s %(name)s: %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'loggers': {
        'django': {
            'handlers': ['console'],
            'level': 'WARNING',
        },
        'bracketeer': {
            'handlers': ['console'],
            'level': LOG_LEVEL,
            'propagate': True,
        },
    },
}
