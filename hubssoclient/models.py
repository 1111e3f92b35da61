from django.conf import settings
from django.db import models


# Models the local record of a user who signs in through the Hub.
class HubAccount(models.Model):
    ROLE_USER = 'USER'
    ROLE_ADMIN = 'ADMIN'
    ROLE_CHOICES = [(ROLE_USER, 'User'), (ROLE_ADMIN, 'Admin')]

    PROVIDER_INTERNAL = 'internal'

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE,
                                related_name='hub_account')
    name = models.CharField(max_length=255, blank=True)
    role = models.CharField(max_length=16, choices=ROLE_CHOICES, default=ROLE_USER)
    locale = models.CharField(max_length=35, blank=True)

    # Accounts created through the Hub never see the onboarding flow.
    completed_onboarding = models.BooleanField(default=False)

    identity_provider = models.CharField(max_length=32, default=PROVIDER_INTERNAL)

    # The lowercased email. Unique so that racing first logins cannot
    # produce two accounts for the same address.
    identity_provider_id = models.CharField(max_length=254, unique=True)

    # Set when this account has been folded into another user.
    merged_into = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL,
                                    null=True, blank=True, related_name='merged_hub_accounts')

    created_on = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.identity_provider_id

    def as_profile(self):
        return {
            'id': self.pk,
            'username': self.user.username,
            'email': self.identity_provider_id,
            'identity_provider': self.identity_provider,
        }
