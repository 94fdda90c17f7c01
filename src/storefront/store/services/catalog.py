"""Catalog service layer: categories and products.

Views should call these functions instead of manipulating models directly.
"""

import logging
import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Avg, Count

from ..exceptions import NotFound, ValidationFailed
from ..models import Category, Product
from ..pagination import Page, paginate
from ..permissions import require_catalog_editor
from .broadcast import BroadcastService, topics
from .storage import get_stored_file

logger = logging.getLogger(__name__)


def list_categories():
    """All categories, oldest first, with their images."""
    return Category.objects.select_related("image").order_by("created_at", "pk")


@transaction.atomic
def create_category(*, user, name: str, description: str = "", image_id=None) -> Category:
    """Create a category.

    Raises:
        Unauthenticated: Anonymous caller
        ValidationFailed: Blank name
        NotFound: Unknown image identifier
    """
    require_catalog_editor(user, "Must be logged in to create categories")

    name = (name or "").strip()
    if not name:
        raise ValidationFailed("Category name is required")

    category = Category.objects.create(
        name=name,
        description=description or "",
        image=get_stored_file(image_id),
    )

    BroadcastService.publish_on_commit([topics.CATEGORIES], event="category.created", ids=[category.pk])
    logger.info(f"Created category {category.pk} ({category.name})")
    return category


def _get_category(category_id) -> Category:
    try:
        return Category.objects.get(pk=category_id)
    except (Category.DoesNotExist, ValueError, ValidationError):
        raise NotFound("Category not found")


def list_products(*, category_id=None, search: str | None = None, num_items=None, cursor=None) -> Page:
    """Page through active products, newest first.

    Args:
        category_id: Only products in this category; an unknown id gives an empty page
        search: Case-insensitive match on the product name
        num_items: Page size
        cursor: Continuation cursor from the previous page
    """
    queryset = Product.objects.filter(is_active=True).select_related(
        "image", "category", "category__image"
    )

    if category_id:
        try:
            queryset = queryset.filter(category_id=uuid.UUID(str(category_id)))
        except ValueError:
            queryset = queryset.none()

    search = (search or "").strip()
    if search:
        queryset = queryset.filter(name__icontains=search)

    return paginate(queryset, num_items=num_items, cursor=cursor)


def get_product(product_id) -> Product:
    """Product with its category, image and review aggregate.

    The returned product carries `average_rating` (0 when unreviewed) and
    `review_count` attributes.
    """
    try:
        product = (
            Product.objects.select_related("image", "category", "category__image")
            .annotate(
                average_rating=Avg("reviews__rating"),
                review_count=Count("reviews"),
            )
            .get(pk=product_id)
        )
    except (Product.DoesNotExist, ValueError, ValidationError):
        raise NotFound("Product not found")

    if product.average_rating is None:
        product.average_rating = 0
    return product


@transaction.atomic
def create_product(
    *,
    user,
    name: str,
    description: str = "",
    price: Decimal,
    category_id,
    stock: int = 0,
    tags=None,
    image_id=None,
) -> Product:
    """Create an active product.

    Raises:
        Unauthenticated: Anonymous caller
        ValidationFailed: Blank name, negative price or stock
        NotFound: Unknown category or image
    """
    require_catalog_editor(user, "Must be logged in to create products")

    name = (name or "").strip()
    if not name:
        raise ValidationFailed("Product name is required")
    if price is None or Decimal(price) < 0:
        raise ValidationFailed("Price must not be negative")
    if stock is None or int(stock) < 0:
        raise ValidationFailed("Stock must not be negative")

    product = Product.objects.create(
        name=name,
        description=description or "",
        price=Decimal(price),
        category=_get_category(category_id),
        stock=int(stock),
        tags=[str(tag).strip() for tag in (tags or []) if str(tag).strip()],
        image=get_stored_file(image_id),
        is_active=True,
    )

    BroadcastService.publish_on_commit([topics.CATALOG], event="product.created", ids=[product.pk])
    logger.info(f"Created product {product.pk} ({product.name})")
    return product


@transaction.atomic
def update_stock(*, user, product_id, quantity: int) -> Product:
    """Adjust stock by a signed delta.

    Raises:
        Unauthenticated: Anonymous caller
        NotFound: Unknown product
        ValidationFailed: Stock would drop below zero
    """
    require_catalog_editor(user)

    try:
        product = Product.objects.select_for_update().get(pk=product_id)
    except (Product.DoesNotExist, ValueError, ValidationError):
        raise NotFound("Product not found")

    new_stock = product.stock + int(quantity)
    if new_stock < 0:
        raise ValidationFailed("Insufficient stock")

    product.stock = new_stock
    product.save(update_fields=["stock"])

    BroadcastService.publish_on_commit(
        [topics.product(product.pk), topics.CATALOG],
        event="product.stock_changed",
        ids=[product.pk],
    )
    logger.info(f"Adjusted stock of product {product.pk} by {quantity} to {new_stock}")
    return product
