"""Order service layer.

Checkout turns the caller's cart into an order in a single transaction:
the product rows are locked, every line is validated against current
stock, order lines capture the unit price of the moment, stock is
decremented with a conditional update and the cart is emptied. Any
failure rolls the whole checkout back.
"""

import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import F, Prefetch

from ..conf import get_setting
from ..exceptions import NotFound, Unauthorized, ValidationFailed
from ..models import CartItem, Order, OrderItem, OrderStatus, Product
from ..pagination import Page, empty_page, paginate
from ..permissions import is_signed_in, require_user
from ..pricing import order_total
from .broadcast import BroadcastService, topics

logger = logging.getLogger(__name__)

SHIPPING_FIELDS = ("street", "city", "state", "zipCode", "country")


def _order_items_prefetch():
    return Prefetch(
        "items",
        queryset=OrderItem.objects.select_related("product", "product__image").order_by("created_at", "pk"),
    )


@transaction.atomic
def create_order(*, user, shipping_address: dict, payment_method: str) -> Order:
    """Check out the user's cart.

    Args:
        user: Signed-in customer
        shipping_address: Mapping with street, city, state, zipCode, country
        payment_method: Free-form payment method label

    Returns:
        The created Order

    Raises:
        Unauthenticated: Anonymous caller
        ValidationFailed: Empty cart, incomplete address, insufficient stock
        NotFound: A cart line references a missing product
    """
    require_user(user, "Must be logged in to create orders")

    address = {name: str((shipping_address or {}).get(name) or "").strip() for name in SHIPPING_FIELDS}
    missing = [name for name in SHIPPING_FIELDS if not address[name]]
    if missing:
        raise ValidationFailed(f"Shipping address is missing: {', '.join(missing)}")
    payment_method = (payment_method or "").strip()
    if not payment_method:
        raise ValidationFailed("Payment method is required")

    cart_items = list(
        CartItem.objects.select_for_update().filter(user=user).order_by("created_at", "pk")
    )
    if not cart_items:
        raise ValidationFailed("Cart is empty")

    product_ids = sorted({item.product_id for item in cart_items}, key=str)
    products = {
        product.pk: product
        for product in Product.objects.select_for_update().filter(pk__in=product_ids).order_by("pk")
    }

    lines = []
    for cart_item in cart_items:
        product = products.get(cart_item.product_id)
        if product is None:
            raise NotFound(f"Product {cart_item.product_id} not found")
        if product.stock < cart_item.quantity:
            raise ValidationFailed(f"Insufficient stock for {product.name}")
        lines.append((product, cart_item.quantity, product.price))

    order = Order.objects.create(
        user=user,
        status=OrderStatus.PENDING,
        total_amount=order_total((price, quantity) for _, quantity, price in lines),
        street=address["street"],
        city=address["city"],
        state=address["state"],
        zip_code=address["zipCode"],
        country=address["country"],
        payment_method=payment_method,
    )

    for product, quantity, price in lines:
        OrderItem.objects.create(
            order=order,
            product=product,
            quantity=quantity,
            price_at_time=price,
        )
        updated = Product.objects.filter(pk=product.pk, stock__gte=quantity).update(
            stock=F("stock") - quantity
        )
        if updated != 1:
            raise ValidationFailed(f"Insufficient stock for {product.name}")

    CartItem.objects.filter(pk__in=[item.pk for item in cart_items]).delete()

    BroadcastService.publish_on_commit(
        [topics.orders(user.pk), topics.cart(user.pk)],
        event="order.created",
        ids=[order.pk],
    )
    BroadcastService.publish_on_commit(
        [topics.product(pid) for pid in product_ids] + [topics.CATALOG],
        event="product.stock_changed",
        ids=product_ids,
    )

    logger.info(
        f"Created order {order.pk} for user {user.pk}: "
        f"{len(lines)} line(s), total {order.total_amount}"
    )
    return order


def list_orders(*, user, num_items=None, cursor=None) -> Page:
    """Page through the user's orders, newest first; empty for anonymous callers."""
    if not is_signed_in(user):
        return empty_page()

    queryset = Order.objects.filter(user=user).prefetch_related(_order_items_prefetch())
    return paginate(queryset, num_items=num_items, cursor=cursor)


def get_order(*, user, order_id) -> Order | None:
    """The order with its lines, or None unless the caller owns it."""
    if not is_signed_in(user):
        return None
    try:
        return (
            Order.objects.prefetch_related(_order_items_prefetch())
            .get(pk=order_id, user=user)
        )
    except (Order.DoesNotExist, ValueError, ValidationError):
        return None


def check_transition(current: str, new: str) -> None:
    """Enforce STORE["ORDER_STATUS_TRANSITIONS"] when one is configured."""
    transitions = get_setting("ORDER_STATUS_TRANSITIONS")
    if transitions is None or current == new:
        return
    if new not in transitions.get(current, ()):
        raise ValidationFailed(f"Cannot change order status from {current} to {new}")


@transaction.atomic
def update_order_status(*, user, order_id, status: str) -> Order:
    """Change the status of an order.

    Owners may update their own orders and staff may update any order.
    Without a configured transition table, any status may follow any
    other.

    Raises:
        Unauthenticated: Anonymous caller
        ValidationFailed: Unknown status or disallowed transition
        NotFound: Unknown order
        Unauthorized: Caller neither owns the order nor is staff
    """
    require_user(user)

    if status not in OrderStatus.values:
        raise ValidationFailed(f"Invalid order status: {status}")

    try:
        order = Order.objects.select_for_update().get(pk=order_id)
    except (Order.DoesNotExist, ValueError, ValidationError):
        raise NotFound("Order not found")

    if order.user_id != user.pk and not user.is_staff:
        raise Unauthorized("Not authorized to update this order")

    check_transition(order.status, status)

    previous = order.status
    order.status = status
    order.save(update_fields=["status", "updated_at"])

    BroadcastService.publish_on_commit(
        [topics.order(order.pk), topics.orders(order.user_id)],
        event="order.status_changed",
        ids=[order.pk],
    )
    logger.info(f"Order {order.pk} status {previous} -> {status} by user {user.pk}")
    return order
