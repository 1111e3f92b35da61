import logging

from allauth.account.models import EmailAddress
from django.contrib.auth import get_user_model
from django.contrib.auth.backends import ModelBackend
from django.core.exceptions import PermissionDenied
from django.db import IntegrityError, transaction
from django.utils.crypto import get_random_string
from django.utils.text import slugify

from hubssoclient import conf, signing
from hubssoclient.exceptions import (AuthenticationError, InvalidSignature,
                                     MissingCredentials, PersistenceConflict)
from hubssoclient.identity import SessionIdentity
from hubssoclient.models import HubAccount

log = logging.getLogger(__name__)

USERNAME_SUFFIX_CHARS = 'abcdefghijklmnopqrstuvwxyz0123456789'


def resolve_profiles(user):
    """Return the profiles of ``user``, its own Hub account first.

    Accounts that were merged into ``user`` follow, oldest first.
    """
    accounts = []
    try:
        accounts.append(user.hub_account)
    except HubAccount.DoesNotExist:
        pass
    merged = user.merged_hub_accounts.select_related('user').order_by('created_on', 'pk')
    accounts.extend(merged)
    return [account.as_profile() for account in accounts]


class HubSsoBackend(ModelBackend):
    """Authenticates signed assertions from the Hub, creating users on first sight."""

    provider_id = 'hub-sso'

    def authenticate(self, request, email=None, name=None, timestamp=None, signature=None):
        # Not a Hub login; let the other backends have a go.
        if timestamp is None and signature is None:
            return None

        user = self.authorize_user({'email': email, 'name': name,
                                    'timestamp': timestamp, 'signature': signature})
        user.hub_sso_identity = self.build_identity(user)
        return user

    def authorize(self, credentials):
        return self.build_identity(self.authorize_user(credentials))

    def authorize_user(self, credentials):
        email = credentials.get('email')
        timestamp = credentials.get('timestamp')
        signature = credentials.get('signature')
        log.debug('Hub SSO authorize called email=%s', email)

        if not email or not timestamp or not signature:
            log.warning('Hub SSO missing required credentials email=%s', email)
            raise MissingCredentials('Missing required credentials')

        try:
            signing.verify(email, timestamp, signature, conf.get_secret())
        except AuthenticationError as e:
            log.warning('Hub SSO invalid signature email=%s reason=%s', email, e.reason)
            raise InvalidSignature(e.reason) from None

        name = credentials.get('name') or email.split('@')[0]
        user = self.find_or_create_user(email, name)

        if not self.user_can_authenticate(user):
            log.warning('Hub SSO refused inactive user user_id=%s email=%s', user.pk, email)
            raise PermissionDenied('Inactive user')
        return user

    def build_identity(self, user):
        account = user.hub_account
        profiles = resolve_profiles(user)
        profile = profiles[0] if profiles else None
        return SessionIdentity(
            id=user.pk,
            email=user.email,
            name=account.name or user.get_full_name(),
            username=user.get_username(),
            role=account.role,
            locale=account.locale or None,
            profile=profile,
        )

    def find_or_create_user(self, email, name):
        email = email.lower()
        try:
            return self.lookup_user(email)
        except HubAccount.DoesNotExist:
            pass

        # A concurrent login for the same email, or a username collision,
        # surfaces here as an IntegrityError. Re-read once before giving up.
        try:
            with transaction.atomic():
                user = self.create_user(email, name)
        except IntegrityError:
            log.warning('Hub SSO user creation conflict email=%s, re-reading', email)
            try:
                return self.lookup_user(email)
            except HubAccount.DoesNotExist:
                raise PersistenceConflict() from None

        log.info('Hub SSO created hub account user_id=%s email=%s username=%s',
                 user.pk, email, user.get_username())
        return user

    def lookup_user(self, email):
        account = HubAccount.objects.select_related('user').get(identity_provider_id=email)
        log.debug('Hub SSO found existing user user_id=%s email=%s', account.user_id, email)
        return account.user

    def create_user(self, email, name):
        User = get_user_model()

        # Link an account that was created some other way before creating a new one.
        user = User.objects.filter(email__iexact=email, hub_account__isnull=True).order_by('pk').first()
        if user is None:
            first_name, _, last_name = name.partition(' ')
            user = User.objects.create_user(username=self.generate_username(name),
                                            email=email,
                                            first_name=first_name[:150],
                                            last_name=last_name[:150])

        HubAccount.objects.create(user=user,
                                  name=name,
                                  completed_onboarding=True,
                                  identity_provider=HubAccount.PROVIDER_INTERNAL,
                                  identity_provider_id=email)
        self.mark_email_verified(user, email)
        return user

    def generate_username(self, name):
        slug = slugify(name)[:140] or 'user'
        return f'{slug}-{get_random_string(6, USERNAME_SUFFIX_CHARS)}'

    def mark_email_verified(self, user, email):
        try:
            address = EmailAddress.objects.get(user=user, email__iexact=email)
            address.verified = True
            address.save()
        except EmailAddress.DoesNotExist:
            EmailAddress.objects.create(user=user, email=email, verified=True,
                                        primary=not EmailAddress.objects.filter(user=user).exists())
