from django.core.exceptions import PermissionDenied


class HubSsoError(Exception):
    status = 500
    message = 'Hub SSO error'

    def __init__(self, message=None):
        super().__init__(message or self.message)
        if message is not None:
            self.message = message


class ConfigurationError(HubSsoError):
    status = 503
    message = 'Hub SSO not configured'


class ValidationError(HubSsoError):
    status = 400
    message = 'Missing required parameters'


class AuthenticationError(HubSsoError):
    status = 401
    message = 'Invalid signature'

    # Reasons kept for logs. Clients only ever see the public message.
    MISSING_SECRET = 'missing-secret'
    BAD_TIMESTAMP = 'bad-timestamp'
    EXPIRED = 'expired'
    BAD_SIGNATURE = 'bad-signature'

    def __init__(self, reason):
        super().__init__('Request expired' if reason == self.EXPIRED else None)
        self.reason = reason


class PersistenceConflict(HubSsoError):
    status = 503
    message = 'User creation conflict, please retry'


# The authorize hook reports failures to django.contrib.auth, which treats
# PermissionDenied as "stop here, login failed".
class MissingCredentials(PermissionDenied):
    pass


class InvalidSignature(PermissionDenied):
    def __init__(self, reason):
        super().__init__('Invalid signature')
        self.reason = reason
