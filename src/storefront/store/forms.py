"""Forms validating store API payloads."""

from django import forms


class TagListField(forms.Field):
    """Accepts a JSON list of strings or a comma-separated string."""

    def to_python(self, value):
        if value in self.empty_values:
            return []
        if isinstance(value, str):
            value = value.split(",")
        if not isinstance(value, (list, tuple)):
            raise forms.ValidationError("Enter a list of tags.")
        return [str(tag).strip() for tag in value if str(tag).strip()]


class CategoryForm(forms.Form):
    name = forms.CharField(max_length=200)
    description = forms.CharField(required=False)
    imageId = forms.UUIDField(required=False)


class ProductForm(forms.Form):
    name = forms.CharField(max_length=255)
    description = forms.CharField(required=False)
    price = forms.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    categoryId = forms.UUIDField()
    stock = forms.IntegerField(min_value=0)
    tags = TagListField(required=False)
    imageId = forms.UUIDField(required=False)


class ProductListForm(forms.Form):
    categoryId = forms.UUIDField(required=False)
    search = forms.CharField(required=False)
    numItems = forms.IntegerField(required=False, min_value=1)
    cursor = forms.CharField(required=False)


class PageForm(forms.Form):
    numItems = forms.IntegerField(required=False, min_value=1)
    cursor = forms.CharField(required=False)


class StockAdjustmentForm(forms.Form):
    quantity = forms.IntegerField()


class AddToCartForm(forms.Form):
    productId = forms.UUIDField()
    quantity = forms.IntegerField(required=False, initial=1)

    def clean_quantity(self):
        quantity = self.cleaned_data.get("quantity")
        return 1 if quantity is None else quantity


class CartQuantityForm(forms.Form):
    quantity = forms.IntegerField()


class ShippingAddressForm(forms.Form):
    street = forms.CharField(max_length=255)
    city = forms.CharField(max_length=100)
    state = forms.CharField(max_length=100)
    zipCode = forms.CharField(max_length=20)
    country = forms.CharField(max_length=100)


class CheckoutForm(forms.Form):
    paymentMethod = forms.CharField(max_length=50)


class OrderStatusForm(forms.Form):
    status = forms.CharField(max_length=20)


class ReviewForm(forms.Form):
    rating = forms.IntegerField()
    comment = forms.CharField(required=False)

