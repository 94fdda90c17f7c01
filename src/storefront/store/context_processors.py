"""Context processors for the store."""

from .services.cart import cart_item_count


def cart_context(request):
    """Add the number of units in the user's cart to templates."""
    user = getattr(request, "user", None)
    return {"cart_item_count": cart_item_count(user) if user is not None else 0}
