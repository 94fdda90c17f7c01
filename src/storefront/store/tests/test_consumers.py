"""Tests for the live-update WebSocket consumer."""

import uuid

import pytest
from channels.layers import get_channel_layer
from channels.testing import WebsocketCommunicator
from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser

from storefront.store.consumers import StoreConsumer

User = get_user_model()


async def connect(user=None):
    communicator = WebsocketCommunicator(StoreConsumer.as_asgi(), "/ws/store/")
    communicator.scope["user"] = user or AnonymousUser()
    connected, _ = await communicator.connect()
    assert connected
    welcome = await communicator.receive_json_from()
    assert welcome["type"] == "connection_established"
    return communicator


def signed_in_user():
    # Unsaved instance: authenticated, no database access needed
    return User(id=uuid.uuid4(), email="socket@example.com")


@pytest.mark.asyncio
class TestStoreConsumer:
    async def test_subscribe_to_public_topic(self):
        communicator = await connect()

        await communicator.send_json_to({"type": "subscribe", "topic": "catalog"})

        assert await communicator.receive_json_from() == {"type": "subscribed", "topic": "catalog"}
        await communicator.disconnect()

    async def test_subscribe_to_several_topics(self):
        communicator = await connect()

        await communicator.send_json_to({"type": "subscribe", "topics": ["catalog", "orders"]})

        assert await communicator.receive_json_from() == {"type": "subscribed", "topic": "catalog"}
        assert (await communicator.receive_json_from())["type"] == "error"
        await communicator.disconnect()

    async def test_invalidation_is_forwarded(self):
        communicator = await connect()
        await communicator.send_json_to({"type": "subscribe", "topic": "catalog"})
        await communicator.receive_json_from()

        await get_channel_layer().group_send("store.catalog", {
            "type": "store.invalidate",
            "topic": "catalog",
            "event": "product.created",
            "ids": ["p1"],
            "sent_at": "2024-01-01T00:00:00+00:00",
        })

        message = await communicator.receive_json_from()
        assert message["type"] == "invalidate"
        assert message["topic"] == "catalog"
        assert message["event"] == "product.created"
        assert message["ids"] == ["p1"]
        await communicator.disconnect()

    async def test_unsubscribed_topic_is_not_forwarded(self):
        communicator = await connect()
        await communicator.send_json_to({"type": "subscribe", "topic": "categories"})
        await communicator.receive_json_from()
        await communicator.send_json_to({"type": "unsubscribe", "topic": "categories"})
        assert await communicator.receive_json_from() == {"type": "unsubscribed", "topic": "categories"}

        await get_channel_layer().group_send("store.categories", {
            "type": "store.invalidate",
            "topic": "categories",
            "event": "category.created",
            "ids": [],
        })

        assert await communicator.receive_nothing()
        await communicator.disconnect()

    async def test_anonymous_cannot_subscribe_to_cart(self):
        communicator = await connect()

        await communicator.send_json_to({"type": "subscribe", "topic": "cart"})

        message = await communicator.receive_json_from()
        assert message["type"] == "error"
        assert message["message"] == "Must be logged in"
        await communicator.disconnect()

    async def test_cart_topic_is_scoped_to_user(self):
        user = signed_in_user()
        communicator = await connect(user)
        await communicator.send_json_to({"type": "subscribe", "topic": "cart"})
        await communicator.receive_json_from()

        await get_channel_layer().group_send(f"store.cart.{user.pk}", {
            "type": "store.invalidate",
            "topic": f"cart.{user.pk}",
            "event": "cart.item_added",
            "ids": ["c1"],
        })

        message = await communicator.receive_json_from()
        assert message["topic"] == "cart"
        assert message["event"] == "cart.item_added"
        await communicator.disconnect()

    async def test_unknown_topic(self):
        communicator = await connect(signed_in_user())

        await communicator.send_json_to({"type": "subscribe", "topic": "everything"})

        message = await communicator.receive_json_from()
        assert message == {"type": "error", "message": "Unknown topic: everything", "topic": "everything"}
        await communicator.disconnect()

    @pytest.mark.parametrize("topic", ["product.has space!", "reviews.not-a-uuid", "product."])
    async def test_malformed_product_topic_rejected(self, topic):
        communicator = await connect()

        await communicator.send_json_to({"type": "subscribe", "topic": topic})

        message = await communicator.receive_json_from()
        assert message == {"type": "error", "message": f"Unknown topic: {topic}", "topic": topic}
        await communicator.disconnect()

    async def test_product_topic_is_forwarded(self):
        product_id = uuid.uuid4()
        communicator = await connect()
        await communicator.send_json_to({"type": "subscribe", "topic": f"product.{product_id}"})
        assert await communicator.receive_json_from() == {
            "type": "subscribed",
            "topic": f"product.{product_id}",
        }

        await get_channel_layer().group_send(f"store.product.{product_id}", {
            "type": "store.invalidate",
            "topic": f"product.{product_id}",
            "event": "product.updated",
            "ids": [str(product_id)],
        })

        message = await communicator.receive_json_from()
        assert message["topic"] == f"product.{product_id}"
        assert message["ids"] == [str(product_id)]
        await communicator.disconnect()

    async def test_invalid_message(self):
        communicator = await connect()

        await communicator.send_to(text_data="not json")

        assert await communicator.receive_json_from() == {"type": "error", "message": "Invalid JSON"}
        await communicator.disconnect()
