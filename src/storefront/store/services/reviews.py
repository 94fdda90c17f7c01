"""Review service layer."""

import logging

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction

from ..exceptions import Conflict, NotFound, ValidationFailed
from ..models import Product, Review
from ..permissions import require_user
from .broadcast import BroadcastService, topics

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


def list_reviews(product_id):
    """Reviews of a product, newest first, with their authors."""
    return (
        Review.objects.filter(product_id=product_id)
        .select_related("user")
        .order_by("-created_at", "-pk")
    )


def reviewer_name(review: Review) -> str:
    if review.user is None:
        return "Anonymous"
    return review.user.get_display_name() or "Anonymous"


def create_review(*, user, product_id, rating, comment: str = "") -> Review:
    """Leave a review; each user may review a product once.

    The one-review-per-product rule is enforced by a unique constraint,
    so concurrent submissions cannot both succeed.

    Raises:
        Unauthenticated: Anonymous caller
        ValidationFailed: Rating outside 1-5
        NotFound: Unknown product
        Conflict: The user already reviewed this product
    """
    require_user(user, "Must be logged in to leave reviews")

    try:
        rating = int(rating)
    except (TypeError, ValueError):
        raise ValidationFailed(f"Rating must be between {MIN_RATING} and {MAX_RATING}")
    if rating < MIN_RATING or rating > MAX_RATING:
        raise ValidationFailed(f"Rating must be between {MIN_RATING} and {MAX_RATING}")

    try:
        product = Product.objects.get(pk=product_id)
    except (Product.DoesNotExist, ValueError, ValidationError):
        raise NotFound("Product not found")

    try:
        with transaction.atomic():
            review = Review.objects.create(
                user=user,
                product=product,
                rating=rating,
                comment=comment or "",
            )
            BroadcastService.publish_on_commit(
                [topics.reviews(product.pk), topics.product(product.pk)],
                event="review.created",
                ids=[review.pk],
            )
    except IntegrityError:
        raise Conflict("You have already reviewed this product")

    logger.info(f"User {user.pk} reviewed product {product.pk} ({rating}/5)")
    return review
