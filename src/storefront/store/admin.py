"""Admin panel for the store catalog, carts, orders and reviews."""

from django.contrib import admin

from .models import CartItem, Category, Order, OrderItem, Product, Review, StoredFile
from .services.broadcast import BroadcastService, topics


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "created_at")
    search_fields = ("name", "description")
    raw_id_fields = ("image",)

    def save_model(self, request, obj, form, change):
        super().save_model(request, obj, form, change)
        BroadcastService.publish_on_commit(
            [topics.CATEGORIES, topics.CATALOG],
            event="category.updated" if change else "category.created",
            ids=[obj.pk],
        )


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "category", "price", "stock", "is_active", "created_at")
    list_editable = ("price", "stock", "is_active")
    list_filter = ("is_active", "category")
    search_fields = ("name", "description")
    raw_id_fields = ("image",)

    def save_model(self, request, obj, form, change):
        super().save_model(request, obj, form, change)
        BroadcastService.publish_on_commit(
            [topics.product(obj.pk), topics.CATALOG],
            event="product.updated" if change else "product.created",
            ids=[obj.pk],
        )


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    can_delete = False
    fields = ("product", "quantity", "price_at_time")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "status", "total_amount", "payment_method", "created_at")
    list_filter = ("status",)
    search_fields = ("id", "user__email", "city", "zip_code")
    readonly_fields = ("user", "total_amount", "payment_method", "created_at", "updated_at")
    inlines = [OrderItemInline]

    def save_model(self, request, obj, form, change):
        super().save_model(request, obj, form, change)
        if change and "status" in form.changed_data:
            BroadcastService.publish_on_commit(
                [topics.order(obj.pk), topics.orders(obj.user_id)],
                event="order.status_changed",
                ids=[obj.pk],
            )


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ("product", "user", "rating", "created_at")
    list_filter = ("rating",)
    search_fields = ("product__name", "user__email", "comment")
    raw_id_fields = ("product", "user")


@admin.register(CartItem)
class CartItemAdmin(admin.ModelAdmin):
    list_display = ("user", "product", "quantity", "created_at")
    search_fields = ("user__email", "product__name")
    raw_id_fields = ("product", "user")


@admin.register(StoredFile)
class StoredFileAdmin(admin.ModelAdmin):
    list_display = ("id", "content_type", "size", "uploaded_by", "created_at")
    readonly_fields = ("upload_key", "size", "content_type", "uploaded_by", "created_at")
