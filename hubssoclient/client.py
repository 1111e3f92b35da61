import json
import logging
import urllib.parse

from django.contrib import auth
from django.http import HttpResponseRedirect, JsonResponse
from django.middleware.csrf import get_token
from django.shortcuts import render
from django.utils.http import url_has_allowed_host_and_scheme
from django.views.decorators.csrf import csrf_protect

from hubssoclient import conf, signing
from hubssoclient.exceptions import (AuthenticationError, ConfigurationError, HubSsoError,
                                     PersistenceConflict, ValidationError)

log = logging.getLogger(__name__)

ASSERTION_FIELDS = ('email', 'name', 'timestamp', 'signature')
REQUIRED_FIELDS = ('email', 'timestamp', 'signature')

IDENTITY_SESSION_KEY = 'hub_sso_identity'


class HubSsoClientMiddleware:
    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if request.path == '/sso/login':
            return self.sso_login(request)
        elif request.path == '/sso/callback':
            return self.sso_callback(request)
        elif request.path == '/sso/csrf':
            return self.sso_csrf(request)
        elif request.path == '/sso/authorize':
            # Intercepted before URL resolution, so CsrfViewMiddleware never sees it.
            return csrf_protect(self.sso_authorize)(request)
        else:
            return self.get_response(request)

    # Called server to server by the Hub. Answers with the URL the browser should open.
    def sso_login(self, request):
        secret = conf.get_secret()
        log.info('Hub SSO request received has_secret=%s', secret is not None)

        if request.method != 'POST':
            return self.method_not_allowed('POST')

        try:
            if secret is None:
                log.error('Hub SSO secret is not configured')
                raise ConfigurationError()

            params = self.read_params(request)
            self.check_presence(params)
            signing.verify(params['email'], params['timestamp'], params['signature'], secret)
        except AuthenticationError as e:
            if e.reason == AuthenticationError.EXPIRED:
                log.warning('Hub SSO request expired email=%s timestamp=%s',
                            params['email'], params['timestamp'])
            else:
                log.warning('Hub SSO invalid signature email=%s reason=%s', params['email'], e.reason)
            return self.error_response(e)
        except HubSsoError as e:
            return self.error_response(e)

        email = params['email']
        query = urllib.parse.urlencode({
            'email': email,
            'name': params['name'] or email.split('@')[0],
            'timestamp': params['timestamp'],
            'signature': params['signature'],
        })
        log.info('Hub SSO login URL generated email=%s', email)
        return JsonResponse({'url': f'{conf.base_url()}/sso/callback?{query}'})

    # Opened by the browser. Posts the assertion on to /sso/authorize without checking it.
    def sso_callback(self, request):
        if request.method != 'GET':
            return self.method_not_allowed('GET')

        params = {key: request.GET.get(key, '') for key in ASSERTION_FIELDS}
        try:
            self.check_presence(params)
        except ValidationError as e:
            return self.error_response(e)

        context = dict(params,
                       next=request.GET.get('next', ''),
                       authorize_url='/sso/authorize',
                       csrf_url='/sso/csrf',
                       failure_url=conf.failure_url('sso_failed'))
        return render(request, 'hubssoclient/callback.html', context)

    def sso_csrf(self, request):
        if request.method != 'GET':
            return self.method_not_allowed('GET')
        return JsonResponse({'csrfToken': get_token(request)})

    def sso_authorize(self, request):
        if request.method != 'POST':
            return self.method_not_allowed('POST')

        credentials = {key: request.POST.get(key, '') for key in ASSERTION_FIELDS}
        try:
            user = auth.authenticate(request, **credentials)
        except PersistenceConflict:
            log.warning('Hub SSO login hit a creation conflict email=%s', credentials['email'])
            return HttpResponseRedirect(conf.failure_url('sso_retry'))

        if user is None:
            log.info('Hub SSO login failed email=%s', credentials['email'])
            return HttpResponseRedirect(conf.failure_url('sso_failed'))

        auth.login(request, user)
        request.session[IDENTITY_SESSION_KEY] = user.hub_sso_identity.as_dict()
        log.info('Hub SSO login succeeded user_id=%s email=%s', user.pk, user.email)

        # If a safe next was passed, redirect there, else to the configured landing page.
        next_url = request.POST.get('next')
        if next_url and url_has_allowed_host_and_scheme(next_url,
                                                        allowed_hosts={request.get_host()},
                                                        require_https=request.is_secure()):
            return HttpResponseRedirect(next_url)
        return HttpResponseRedirect(conf.redirect_url())

    def read_params(self, request):
        if request.content_type == 'application/json':
            try:
                body = json.loads(request.body or b'{}')
            except ValueError:
                raise ValidationError('Malformed request body') from None
            if not isinstance(body, dict):
                raise ValidationError('Malformed request body')
        else:
            body = request.POST
        return {key: self.as_text(body.get(key)) for key in ASSERTION_FIELDS}

    def as_text(self, value):
        if value is None:
            return ''
        # Hubs may send the timestamp as a JSON number.
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        if not isinstance(value, str):
            raise ValidationError('Malformed request body')
        return value

    def check_presence(self, params):
        if any(not params.get(key) for key in REQUIRED_FIELDS):
            raise ValidationError()

    def error_response(self, error):
        return JsonResponse({'error': error.message}, status=error.status)

    def method_not_allowed(self, method):
        response = JsonResponse({'error': 'Method not allowed'}, status=405)
        response['Allow'] = method
        return response
