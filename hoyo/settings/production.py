from .base import *

DEBUG = False

# Production always talks to the live processor unless told otherwise
MERCADOPAGO_ENVIRONMENT = config('MP_ENVIRONMENT', default='production')

# Render specific settings
ALLOWED_HOSTS += config('RENDER_EXTERNAL_HOSTNAME', default='', cast=Csv())
SECURE_PROXY_SSL_HEADER = ('HTTP_X_FORWARDED_PROTO', 'https')
USE_X_FORWARDED_HOST = True

# Render handles SSL at the proxy level
SECURE_SSL_REDIRECT = False
SECURE_HSTS_SECONDS = 31536000
SECURE_HSTS_INCLUDE_SUBDOMAINS = True
SECURE_HSTS_PRELOAD = True

SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True
X_FRAME_OPTIONS = 'DENY'
SECURE_CONTENT_TYPE_NOSNIFF = True
