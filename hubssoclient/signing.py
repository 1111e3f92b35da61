import hashlib
import hmac
import time

from hubssoclient.exceptions import AuthenticationError

# Replay window, inclusive on both sides.
MAX_SKEW_MS = 5 * 60 * 1000


# Generates the hex signature the Hub sends for an email and timestamp.
def sign(secret, email, timestamp):
    message = f'{email}:{timestamp}'
    return hmac.new(secret.encode(encoding='utf-8'),
                    message.encode(encoding='utf-8'),
                    digestmod=hashlib.sha256).hexdigest()


def verify(email, timestamp, signature, secret, now=None):
    """Raise AuthenticationError unless signature and timestamp are acceptable.

    ``now`` is in milliseconds since the epoch and defaults to the current time.
    The error's ``reason`` says which check failed.
    """
    if not secret:
        raise AuthenticationError(AuthenticationError.MISSING_SECRET)

    try:
        request_time = int(str(timestamp).strip()) * 1000
    except ValueError:
        raise AuthenticationError(AuthenticationError.BAD_TIMESTAMP) from None

    if now is None:
        now = int(time.time() * 1000)
    if abs(now - request_time) > MAX_SKEW_MS:
        raise AuthenticationError(AuthenticationError.EXPIRED)

    if not _digests_match(sign(secret, email, timestamp), signature):
        raise AuthenticationError(AuthenticationError.BAD_SIGNATURE)


def validate(email, timestamp, signature, secret, now=None):
    try:
        verify(email, timestamp, signature, secret, now=now)
    except AuthenticationError:
        return False
    return True


# Both sides are hashed to a fixed length first so a length mismatch takes
# the same time as any other mismatch.
def _digests_match(expected, supplied):
    try:
        supplied = supplied.encode(encoding='ascii')
    except (AttributeError, UnicodeEncodeError):
        return False
    return hmac.compare_digest(hashlib.sha256(expected.encode(encoding='ascii')).digest(),
                               hashlib.sha256(supplied).digest())
