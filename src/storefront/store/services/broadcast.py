"""Live-update broadcast services.

Store handlers publish a small invalidation notice whenever they change
records that clients may be displaying. Subscribers (see
`storefront.store.consumers`) receive the notice and re-read the affected
endpoint. Notices carry identifiers only, never record contents.

All broadcast calls should use this service to ensure:

1. Consistent payload structure
2. Broadcasts happen AFTER transaction commit
3. Broadcast failures never fail the store operation

Usage:
    from storefront.store.services.broadcast import BroadcastService, topics

    with transaction.atomic():
        order = Order.objects.create(...)
        BroadcastService.publish_on_commit(
            [topics.orders(user.pk), topics.cart(user.pk)],
            event="order.created",
            ids=[order.pk],
        )
"""

import logging

from django.db import transaction
from django.utils import timezone

from ..conf import get_setting

logger = logging.getLogger(__name__)

GROUP_PREFIX = "store"


class topics:
    """Topic names keyed by the records they describe."""

    CATALOG = "catalog"
    CATEGORIES = "categories"

    @staticmethod
    def product(product_id) -> str:
        return f"product.{product_id}"

    @staticmethod
    def reviews(product_id) -> str:
        return f"reviews.{product_id}"

    @staticmethod
    def cart(user_id) -> str:
        return f"cart.{user_id}"

    @staticmethod
    def orders(user_id) -> str:
        return f"orders.{user_id}"

    @staticmethod
    def order(order_id) -> str:
        return f"order.{order_id}"


def group_name(topic: str) -> str:
    """Channel layer group for a topic."""
    return f"{GROUP_PREFIX}.{topic}"


class BroadcastService:
    """Publishes invalidation notices to channel layer groups."""

    @staticmethod
    def publish(topic_names, *, event: str, ids=None):
        """Send an invalidation notice to every topic now.

        Args:
            topic_names: Topics to notify (see `topics`)
            event: Short description such as "cart.updated"
            ids: Identifiers of the records that changed
        """
        if not get_setting("BROADCAST_ENABLED"):
            return

        try:
            from asgiref.sync import async_to_sync
            from channels.layers import get_channel_layer

            channel_layer = get_channel_layer()
            if not channel_layer:
                logger.warning("No channel layer configured, skipping store broadcast")
                return

            ids = [str(i) for i in (ids or [])]
            sent_at = timezone.now().isoformat()

            for topic in topic_names:
                async_to_sync(channel_layer.group_send)(
                    group_name(topic),
                    {
                        "type": "store.invalidate",
                        "topic": topic,
                        "event": event,
                        "ids": ids,
                        "sent_at": sent_at,
                    },
                )

            logger.debug(
                "Broadcast store invalidation",
                extra={"topics": list(topic_names), "store_event": event, "ids": ids},
            )

        except Exception as e:
            # Never fail the main operation if broadcast fails
            logger.exception(f"Failed to broadcast store event {event}: {e}")

    @staticmethod
    def publish_on_commit(topic_names, *, event: str, ids=None):
        """Send the notice after the current transaction commits.

        Clients never hear about writes that were rolled back.
        """
        topic_names = list(topic_names)
        ids = [str(i) for i in (ids or [])]

        def do_publish():
            BroadcastService.publish(topic_names, event=event, ids=ids)

        transaction.on_commit(do_publish)
