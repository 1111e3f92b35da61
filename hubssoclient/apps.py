from django.apps import AppConfig


class HubSsoClientConfig(AppConfig):
    name = 'hubssoclient'
    default_auto_field = 'django.db.models.BigAutoField'
