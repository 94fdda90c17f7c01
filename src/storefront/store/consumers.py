"""WebSocket consumer for live store updates.

Clients connect to /ws/store/ and subscribe to topics. Whenever a store
handler changes data under a topic, subscribers receive an `invalidate`
message and re-read the matching endpoint.

Client messages:
    {"type": "subscribe", "topics": ["catalog", "cart"]}
    {"type": "unsubscribe", "topic": "catalog"}

Topics:
    catalog, categories, product.<id>, reviews.<id>   anyone
    cart, orders                                       signed-in users (own data)
    order.<id>                                         order owner or staff
"""

import json
import logging
import uuid

from asgiref.sync import async_to_sync
from channels.generic.websocket import WebsocketConsumer
from django.core.exceptions import ValidationError

from .models import Order
from .services.broadcast import group_name, topics

logger = logging.getLogger(__name__)


class TopicDenied(Exception):
    pass


class StoreConsumer(WebsocketConsumer):
    """Relays store invalidation notices to subscribed clients."""

    def connect(self):
        # group name -> topic as the client named it
        self.subscriptions = {}
        self.accept()

        user = self.scope.get("user")
        self.send_json({
            "type": "connection_established",
            "authenticated": bool(user and user.is_authenticated),
        })

    def disconnect(self, close_code):
        for group in list(getattr(self, "subscriptions", {})):
            async_to_sync(self.channel_layer.group_discard)(group, self.channel_name)
        logger.debug(f"Store WebSocket disconnected ({close_code})")

    def receive(self, text_data=None, bytes_data=None):
        try:
            data = json.loads(text_data or "")
        except json.JSONDecodeError:
            logger.warning("Invalid JSON in store WebSocket message")
            self.send_error("Invalid JSON")
            return
        if not isinstance(data, dict):
            self.send_error("Expected a JSON object")
            return

        message_type = data.get("type")
        if message_type == "subscribe":
            handler = self.handle_subscribe
        elif message_type == "unsubscribe":
            handler = self.handle_unsubscribe
        else:
            self.send_error(f"Unknown message type: {message_type}")
            return

        requested = data.get("topics", [data.get("topic")])
        if not isinstance(requested, list) or not requested:
            self.send_error("topic is required")
            return

        for topic in requested:
            if not isinstance(topic, str) or not topic:
                self.send_error("topic is required")
                continue
            handler(topic)

    def handle_subscribe(self, topic):
        try:
            resolved = self.resolve_topic(topic)
        except TopicDenied as e:
            self.send_error(str(e), topic=topic)
            return

        group = group_name(resolved)
        if group not in self.subscriptions:
            async_to_sync(self.channel_layer.group_add)(group, self.channel_name)
            self.subscriptions[group] = topic
        self.send_json({"type": "subscribed", "topic": topic})

    def handle_unsubscribe(self, topic):
        try:
            resolved = self.resolve_topic(topic)
        except TopicDenied as e:
            self.send_error(str(e), topic=topic)
            return

        group = group_name(resolved)
        if self.subscriptions.pop(group, None) is not None:
            async_to_sync(self.channel_layer.group_discard)(group, self.channel_name)
        self.send_json({"type": "unsubscribed", "topic": topic})

    def resolve_topic(self, topic):
        """Map a client topic to its broadcast topic, checking access."""
        if topic in (topics.CATALOG, topics.CATEGORIES):
            return topic
        if topic.startswith("product."):
            return topics.product(self.parse_id(topic))
        if topic.startswith("reviews."):
            return topics.reviews(self.parse_id(topic))

        user = self.scope.get("user")
        if not user or not user.is_authenticated:
            raise TopicDenied("Must be logged in")

        if topic == "cart":
            return topics.cart(user.pk)
        if topic == "orders":
            return topics.orders(user.pk)
        if topic.startswith("order."):
            order_id = self.parse_id(topic)
            if not self.can_view_order(user, order_id):
                raise TopicDenied("Not authorized to view this order")
            return topics.order(order_id)

        raise TopicDenied(f"Unknown topic: {topic}")

    def parse_id(self, topic):
        """Return the UUID after the topic prefix."""
        try:
            return uuid.UUID(topic.split(".", 1)[1])
        except ValueError:
            raise TopicDenied(f"Unknown topic: {topic}") from None

    def can_view_order(self, user, order_id):
        try:
            owner_id = Order.objects.values_list("user_id", flat=True).get(pk=order_id)
        except (Order.DoesNotExist, ValueError, ValidationError):
            return False
        return owner_id == user.pk or user.is_staff

    def store_invalidate(self, event):
        """Forward a store invalidation notice to the client."""
        group = group_name(event["topic"])
        self.send_json({
            "type": "invalidate",
            "topic": self.subscriptions.get(group, event["topic"]),
            "event": event.get("event"),
            "ids": event.get("ids", []),
            "sentAt": event.get("sent_at"),
        })

    def send_json(self, content):
        self.send(text_data=json.dumps(content))

    def send_error(self, message, topic=None):
        payload = {"type": "error", "message": message}
        if topic is not None:
            payload["topic"] = topic
        self.send_json(payload)
