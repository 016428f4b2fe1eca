# keybank/apps.py

from django.apps import AppConfig


class KeybankConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "keybank"
    verbose_name = "Display IDs & Encryption Keys"
