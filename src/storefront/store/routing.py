"""WebSocket URL routing for live store updates."""

from django.urls import path

from . import consumers

websocket_urlpatterns = [
    path("ws/store/", consumers.StoreConsumer.as_asgi()),
]
