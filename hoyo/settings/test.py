"""
Settings for the pytest suite: in-memory SQLite, locmem email, sandbox processor.
"""
import os

os.environ.setdefault('SECRET_KEY', 'test-secret-key')

from .base import *  # noqa: E402

DEBUG = False

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']
EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'
STORAGES['staticfiles'] = {'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage'}

AXES_ENABLED = False

BASE_URL = 'https://hoyo.test/'
MERCADOPAGO_ENVIRONMENT = 'sandbox'
MP_ACCESS_TOKEN_TEST = 'TEST-0000-token'
MP_ACCESS_TOKEN_PROD = ''
PENDING_PURCHASE_TTL_MINUTES = 60
