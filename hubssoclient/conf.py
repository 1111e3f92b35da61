import os
import urllib.parse

from django.conf import settings
from django.shortcuts import resolve_url

# Container images ship this value until the entrypoint substitutes the real secret.
PLACEHOLDER_PREFIX = 'build-time-placeholder'


# Read on every call so that a secret supplied after process start is honored.
def get_secret():
    secret = getattr(settings, 'HUB_SSO_SECRET', None) or os.environ.get('HUB_SSO_SECRET')
    if not secret or not secret.strip():
        return None
    if secret.startswith(PLACEHOLDER_PREFIX):
        return None
    return secret


def base_url():
    return settings.SSO_CLIENT_BASE_URL.rstrip('/')


def login_url():
    return resolve_url(settings.LOGIN_URL)


def redirect_url():
    return resolve_url(getattr(settings, 'HUB_SSO_REDIRECT_URL', None) or settings.LOGIN_REDIRECT_URL)


def failure_url(error):
    return f'{login_url()}?{urllib.parse.urlencode({"error": error})}'
