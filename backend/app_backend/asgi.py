"""ASGI entrypoint. Only HTTP is routed; lifecycle events go out through the channel layer."""

import os

from channels.routing import ProtocolTypeRouter
from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "app_backend.settings.settings")

application = ProtocolTypeRouter({
    "http": get_asgi_application(),
})
