"""Store JSON API views.

These endpoints expose the store handlers to browser and app clients:
- Catalog: categories, products, stock, reviews
- Cart and checkout
- Order history and status updates
- Image uploads
- Sample data seeding

Requests authenticate with a session cookie or `Authorization: Bearer
<token>`. Handler failures are returned as `{"error": ..., "code": ...}`
with the status code of their kind.
"""

import json
import logging

from django.http import JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from storefront.core.authentication import token_auth
from storefront.core.forms import first_error

from . import forms
from .exceptions import NotFound, StoreError, ValidationFailed
from .permissions import require_staff
from .pricing import order_total
from .serializers import (
    serialize_cart_item,
    serialize_category,
    serialize_order,
    serialize_product,
    serialize_product_detail,
    serialize_review,
)
from .services import cart, catalog, orders, reviews, seed, storage

logger = logging.getLogger(__name__)


def error_response(error: StoreError) -> JsonResponse:
    return JsonResponse({"error": error.message, "code": error.code}, status=error.status_code)


def load_json(request) -> dict:
    """Parse the request body as a JSON object."""
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ValidationFailed("Invalid JSON")
    if not isinstance(data, dict):
        raise ValidationFailed("Expected a JSON object")
    return data


def validate(form_class, data) -> dict:
    """Validate data with a form, raising ValidationFailed on the first error."""
    form = form_class(data)
    if not form.is_valid():
        raise ValidationFailed(first_error(form))
    return form.cleaned_data


@method_decorator(csrf_exempt, name="dispatch")
@method_decorator(token_auth, name="dispatch")
class StoreAPIView(View):
    """Base view translating store errors into JSON responses."""

    def dispatch(self, request, *args, **kwargs):
        try:
            return super().dispatch(request, *args, **kwargs)
        except StoreError as e:
            logger.debug(f"{request.method} {request.path} rejected: {e.code}: {e.message}")
            return error_response(e)


# =============================================================================
# Catalog
# =============================================================================


class CategoryListView(StoreAPIView):
    """GET /api/categories/ and POST /api/categories/

    POST body:
    {
        "name": "Books",
        "description": "Books and magazines",
        "imageId": "<storage id>"
    }
    """

    def get(self, request):
        categories = catalog.list_categories()
        return JsonResponse({"categories": [serialize_category(c) for c in categories]})

    def post(self, request):
        data = validate(forms.CategoryForm, load_json(request))
        category = catalog.create_category(
            user=request.user,
            name=data["name"],
            description=data["description"],
            image_id=data["imageId"],
        )
        return JsonResponse({"category": serialize_category(category)}, status=201)


class ProductListView(StoreAPIView):
    """GET /api/products/?categoryId=&search=&numItems=&cursor=

    Returns {"page": [...], "isDone": bool, "continueCursor": str|null}.
    """

    def get(self, request):
        params = validate(forms.ProductListForm, request.GET)
        page = catalog.list_products(
            category_id=params["categoryId"],
            search=params["search"],
            num_items=params["numItems"],
            cursor=params["cursor"] or None,
        )
        return JsonResponse(page.as_dict(serialize_product))

    def post(self, request):
        data = validate(forms.ProductForm, load_json(request))
        product = catalog.create_product(
            user=request.user,
            name=data["name"],
            description=data["description"],
            price=data["price"],
            category_id=data["categoryId"],
            stock=data["stock"],
            tags=data["tags"],
            image_id=data["imageId"],
        )
        return JsonResponse({"product": serialize_product(product)}, status=201)


class ProductDetailView(StoreAPIView):
    def get(self, request, product_id):
        product = catalog.get_product(product_id)
        return JsonResponse({"product": serialize_product_detail(product)})


class ProductStockView(StoreAPIView):
    """POST /api/products/<id>/stock/ {"quantity": -3}"""

    def post(self, request, product_id):
        data = validate(forms.StockAdjustmentForm, load_json(request))
        product = catalog.update_stock(
            user=request.user,
            product_id=product_id,
            quantity=data["quantity"],
        )
        return JsonResponse({"product": serialize_product(product)})


class ProductReviewsView(StoreAPIView):
    """GET and POST /api/products/<id>/reviews/

    POST body: {"rating": 5, "comment": "Great"}
    """

    def get(self, request, product_id):
        return JsonResponse({"reviews": [serialize_review(r) for r in reviews.list_reviews(product_id)]})

    def post(self, request, product_id):
        data = validate(forms.ReviewForm, load_json(request))
        review = reviews.create_review(
            user=request.user,
            product_id=product_id,
            rating=data["rating"],
            comment=data["comment"],
        )
        return JsonResponse({"review": serialize_review(review)}, status=201)


# =============================================================================
# Cart
# =============================================================================


class CartView(StoreAPIView):
    """GET, POST and DELETE /api/cart/

    POST body: {"productId": "<id>", "quantity": 2}
    """

    def get(self, request):
        items = cart.list_cart(request.user)
        total = order_total((item.product.price, item.quantity) for item in items)
        return JsonResponse({
            "items": [serialize_cart_item(item) for item in items],
            "total": str(total),
            "itemCount": sum(item.quantity for item in items),
        })

    def post(self, request):
        data = validate(forms.AddToCartForm, load_json(request))
        item = cart.add_item(
            user=request.user,
            product_id=data["productId"],
            quantity=data["quantity"],
        )
        return JsonResponse({"item": serialize_cart_item(item)})

    def delete(self, request):
        removed = cart.clear_cart(user=request.user)
        return JsonResponse({"removed": removed})


class CartItemView(StoreAPIView):
    """PATCH and DELETE /api/cart/<id>/

    PATCH body: {"quantity": 3}; zero or less removes the line.
    """

    def patch(self, request, cart_item_id):
        data = validate(forms.CartQuantityForm, load_json(request))
        item = cart.update_quantity(
            user=request.user,
            cart_item_id=cart_item_id,
            quantity=data["quantity"],
        )
        return JsonResponse({"item": serialize_cart_item(item) if item else None})

    def delete(self, request, cart_item_id):
        cart.remove_item(user=request.user, cart_item_id=cart_item_id)
        return JsonResponse({"ok": True})


# =============================================================================
# Orders
# =============================================================================


class OrderListView(StoreAPIView):
    """GET /api/orders/?numItems=&cursor= and POST /api/orders/

    POST body:
    {
        "shippingAddress": {
            "street": "1 Main St",
            "city": "Springfield",
            "state": "IL",
            "zipCode": "62701",
            "country": "US"
        },
        "paymentMethod": "card"
    }
    """

    def get(self, request):
        params = validate(forms.PageForm, request.GET)
        page = orders.list_orders(
            user=request.user,
            num_items=params["numItems"],
            cursor=params["cursor"] or None,
        )
        return JsonResponse(page.as_dict(serialize_order))

    def post(self, request):
        data = load_json(request)
        checkout = validate(forms.CheckoutForm, data)
        address = data.get("shippingAddress")
        if not isinstance(address, dict):
            raise ValidationFailed("shippingAddress: This field is required.")
        address = validate(forms.ShippingAddressForm, address)

        order = orders.create_order(
            user=request.user,
            shipping_address=address,
            payment_method=checkout["paymentMethod"],
        )
        order = orders.get_order(user=request.user, order_id=order.pk)

        response = JsonResponse({"orderId": str(order.pk), "order": serialize_order(order)}, status=201)
        response["Location"] = f"/api/orders/{order.pk}/"
        return response


class OrderDetailView(StoreAPIView):
    def get(self, request, order_id):
        order = orders.get_order(user=request.user, order_id=order_id)
        if order is None:
            raise NotFound("Order not found")
        return JsonResponse({"order": serialize_order(order)})


class OrderStatusView(StoreAPIView):
    """POST /api/orders/<id>/status/ {"status": "shipped"}"""

    def post(self, request, order_id):
        data = validate(forms.OrderStatusForm, load_json(request))
        orders.update_order_status(user=request.user, order_id=order_id, status=data["status"])
        order = orders.get_order(user=request.user, order_id=order_id)
        if order is None:
            # Staff updating someone else's order
            return JsonResponse({"ok": True, "status": data["status"]})
        return JsonResponse({"ok": True, "status": order.status, "order": serialize_order(order)})


# =============================================================================
# Uploads
# =============================================================================


class UploadURLView(StoreAPIView):
    """POST /api/uploads/ -> {"uploadUrl": "..."}"""

    def post(self, request):
        path = storage.generate_upload_url(user=request.user)
        return JsonResponse({"uploadUrl": request.build_absolute_uri(path)})


class UploadContentView(StoreAPIView):
    """PUT or POST raw bytes (or one multipart file) to an upload URL.

    Returns {"storageId": "..."} to attach to a category or product.
    """

    def put(self, request, token):
        return self._store(request, token)

    def post(self, request, token):
        return self._store(request, token)

    def _store(self, request, token):
        if request.content_type == "multipart/form-data":
            upload = next(iter(request.FILES.values()), None)
            if upload is None:
                raise ValidationFailed("Upload is empty")
            content = upload.read()
            content_type = upload.content_type or ""
        else:
            content = request.body
            content_type = request.META.get("CONTENT_TYPE", "")

        stored = storage.store_upload(token=token, content=content, content_type=content_type)
        return JsonResponse({"storageId": str(stored.pk)}, status=201)


class FileURLView(StoreAPIView):
    def get(self, request, storage_id):
        url = storage.get_file_url(storage_id)
        if url is None:
            raise NotFound("File not found")
        return JsonResponse({"storageId": str(storage_id), "url": request.build_absolute_uri(url)})


# =============================================================================
# Seed data
# =============================================================================


class SeedView(StoreAPIView):
    """POST /api/seed/ (staff only)"""

    def post(self, request):
        require_staff(request.user)
        return JsonResponse({"message": seed.seed_database()})
