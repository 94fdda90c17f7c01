"""Cart service layer.

Each user has at most one cart line per product; quantities are always
positive. Every write locks the product row first, so stock checks and
merges for the same product never interleave.
"""

import logging

from django.core.exceptions import ValidationError
from django.db import transaction

from ..exceptions import NotFound, ValidationFailed
from ..models import CartItem, Product
from ..permissions import is_signed_in, require_user
from .broadcast import BroadcastService, topics

logger = logging.getLogger(__name__)


def list_cart(user):
    """Cart lines of the user with their products; empty for anonymous callers."""
    if not is_signed_in(user):
        return []
    return list(
        CartItem.objects.filter(user=user)
        .select_related("product", "product__image")
        .order_by("created_at", "pk")
    )


def _locked_product(product_id) -> Product:
    try:
        return Product.objects.select_for_update().get(pk=product_id)
    except (Product.DoesNotExist, ValueError, ValidationError):
        raise NotFound("Product not found")


def _owned_cart_item(user, cart_item_id, *, lock=False) -> CartItem:
    queryset = CartItem.objects.filter(user=user)
    if lock:
        queryset = queryset.select_for_update()
    try:
        return queryset.get(pk=cart_item_id)
    except (CartItem.DoesNotExist, ValueError, ValidationError):
        raise NotFound("Cart item not found")


def _publish_cart_change(user, event, ids):
    BroadcastService.publish_on_commit([topics.cart(user.pk)], event=event, ids=ids)


@transaction.atomic
def add_item(*, user, product_id, quantity: int) -> CartItem:
    """Add a product to the cart, merging with an existing line.

    Raises:
        Unauthenticated: Anonymous caller
        ValidationFailed: Non-positive quantity, or stock below the merged quantity
        NotFound: Unknown product
    """
    require_user(user, "Must be logged in to add items to cart")

    quantity = int(quantity)
    if quantity < 1:
        raise ValidationFailed("Quantity must be at least 1")

    product = _locked_product(product_id)
    if product.stock < quantity:
        raise ValidationFailed("Insufficient stock")

    item = (
        CartItem.objects.select_for_update()
        .filter(user=user, product=product)
        .first()
    )
    if item:
        new_quantity = item.quantity + quantity
        if product.stock < new_quantity:
            raise ValidationFailed("Insufficient stock")
        item.quantity = new_quantity
        item.save(update_fields=["quantity"])
    else:
        item = CartItem.objects.create(user=user, product=product, quantity=quantity)

    _publish_cart_change(user, "cart.item_added", [item.pk])
    return item


@transaction.atomic
def update_quantity(*, user, cart_item_id, quantity: int) -> CartItem | None:
    """Set the quantity of a cart line; zero or less removes it.

    Returns:
        The updated CartItem, or None when the line was removed
    """
    require_user(user)

    item = _owned_cart_item(user, cart_item_id, lock=True)
    quantity = int(quantity)

    if quantity <= 0:
        item_id = item.pk
        item.delete()
        _publish_cart_change(user, "cart.item_removed", [item_id])
        return None

    product = _locked_product(item.product_id)
    if product.stock < quantity:
        raise ValidationFailed("Insufficient stock")

    item.quantity = quantity
    item.product = product
    item.save(update_fields=["quantity"])

    _publish_cart_change(user, "cart.item_updated", [item.pk])
    return item


@transaction.atomic
def remove_item(*, user, cart_item_id) -> None:
    require_user(user)

    item = _owned_cart_item(user, cart_item_id)
    item_id = item.pk
    item.delete()

    _publish_cart_change(user, "cart.item_removed", [item_id])


@transaction.atomic
def clear_cart(*, user) -> int:
    """Remove every line of the user's cart; returns the number removed."""
    require_user(user)

    item_ids = list(CartItem.objects.filter(user=user).values_list("pk", flat=True))
    CartItem.objects.filter(pk__in=item_ids).delete()

    if item_ids:
        _publish_cart_change(user, "cart.cleared", item_ids)
    return len(item_ids)


def cart_item_count(user) -> int:
    """Total units in the user's cart."""
    if not is_signed_in(user):
        return 0
    return sum(CartItem.objects.filter(user=user).values_list("quantity", flat=True))
