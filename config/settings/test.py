# config/settings/test.py

from .base import *

DEBUG = False

ALLOWED_HOSTS = ['testserver', 'localhost']

SECRET_KEY = 'sprintboard-test-secret'
SPRINTBOARD_JWT_SECRET = 'sprintboard-test-jwt-secret'

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'sprintboard-test-cache',
    }
}

CHANNEL_LAYERS = {
    'default': {
        'BACKEND': 'channels.layers.InMemoryChannelLayer'
    }
}

PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.MD5PasswordHasher',
]

STORAGES['staticfiles'] = {
    'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
}

TIME_ZONE = 'UTC'

# Keep test output quiet
LOGGING['handlers'] = {
    'null': {
        'class': 'logging.NullHandler',
    },
}
LOGGING['root']['handlers'] = ['null']
LOGGING['loggers'] = {}
