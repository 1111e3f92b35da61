SECRET_KEY = 'hubssoclient-tests'
DEBUG = False
ALLOWED_HOSTS = ['testserver', 'example.org']

INSTALLED_APPS = [
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.sites',
    'allauth',
    'allauth.account',
    'hubssoclient',
]

MIDDLEWARE = [
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'allauth.account.middleware.AccountMiddleware',
    'hubssoclient.client.HubSsoClientMiddleware',
]

AUTHENTICATION_BACKENDS = [
    'django.contrib.auth.backends.ModelBackend',
    'hubssoclient.backends.HubSsoBackend',
]

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
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

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    },
}

ROOT_URLCONF = 'hubssoclient.tests.urls'
SITE_ID = 1
DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'
USE_TZ = True

LOGIN_URL = '/login'
LOGIN_REDIRECT_URL = '/bookings'
SSO_CLIENT_BASE_URL = 'https://example.org'
HUB_SSO_SECRET = 'test-secret'

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'handlers': {'console': {'class': 'logging.StreamHandler'}},
    'loggers': {'hubssoclient': {'handlers': ['console'], 'level': 'WARNING'}},
}
