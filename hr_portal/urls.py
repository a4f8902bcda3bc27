"""Root URL configuration; mounts the portal under ``PORTAL_BASE_PATH``."""
from django.conf import settings
from django.urls import include, path

_prefix = f"{settings.PORTAL_BASE_PATH}/" if settings.PORTAL_BASE_PATH else ""

urlpatterns = [
    path(_prefix, include("portal.urls")),
]

handler404 = "portal.views.page_not_found"
