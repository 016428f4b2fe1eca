# keybank/urls.py

from django.urls import path

from keybank.views import (
    DisplayIdGenerateView,
    DisplayIdListView,
    EncryptionKeyGenerateView,
    EncryptionKeyListView,
    MyKeysView,
)

app_name = "keybank"

urlpatterns = [
    path("display-ids/", DisplayIdListView.as_view(), name="display-id-list"),
    path("display-ids/generate/", DisplayIdGenerateView.as_view(), name="display-id-generate"),
    path("keys/", EncryptionKeyListView.as_view(), name="key-list"),
    path("keys/generate/", EncryptionKeyGenerateView.as_view(), name="key-generate"),
    path("keys/mine/", MyKeysView.as_view(), name="my-keys"),
]
