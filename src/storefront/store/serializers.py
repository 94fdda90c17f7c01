"""JSON representations of store records.

Keys are camelCase; money is rendered as decimal strings.
"""

from .services.reviews import reviewer_name
from .services.storage import file_url


def _money(value):
    return None if value is None else str(value)


def serialize_category(category):
    return {
        "id": str(category.pk),
        "createdAt": category.created_at.isoformat(),
        "name": category.name,
        "description": category.description,
        "imageId": str(category.image_id) if category.image_id else None,
        "imageUrl": file_url(category.image),
    }


def serialize_product(product, *, include_category=True):
    data = {
        "id": str(product.pk),
        "createdAt": product.created_at.isoformat(),
        "name": product.name,
        "description": product.description,
        "price": _money(product.price),
        "categoryId": str(product.category_id),
        "imageId": str(product.image_id) if product.image_id else None,
        "imageUrl": file_url(product.image),
        "stock": product.stock,
        "isActive": product.is_active,
        "tags": list(product.tags or []),
    }
    if include_category:
        data["category"] = serialize_category(product.category)
    return data


def serialize_product_detail(product):
    data = serialize_product(product)
    data["averageRating"] = float(product.average_rating or 0)
    data["reviewCount"] = product.review_count
    return data


def serialize_cart_item(item):
    return {
        "id": str(item.pk),
        "createdAt": item.created_at.isoformat(),
        "productId": str(item.product_id),
        "quantity": item.quantity,
        "product": serialize_product(item.product, include_category=False),
        "subtotal": _money(item.subtotal),
    }


def serialize_order_item(item):
    return {
        "id": str(item.pk),
        "productId": str(item.product_id),
        "quantity": item.quantity,
        "priceAtTime": _money(item.price_at_time),
        "subtotal": _money(item.subtotal),
        "product": serialize_product(item.product, include_category=False) if item.product else None,
    }


def serialize_order(order):
    return {
        "id": str(order.pk),
        "createdAt": order.created_at.isoformat(),
        "userId": str(order.user_id),
        "status": order.status,
        "totalAmount": _money(order.total_amount),
        "shippingAddress": order.shipping_address,
        "paymentMethod": order.payment_method,
        "items": [serialize_order_item(item) for item in order.items.all()],
    }


def serialize_review(review):
    return {
        "id": str(review.pk),
        "createdAt": review.created_at.isoformat(),
        "productId": str(review.product_id),
        "userId": str(review.user_id),
        "userName": reviewer_name(review),
        "rating": review.rating,
        "comment": review.comment,
    }
