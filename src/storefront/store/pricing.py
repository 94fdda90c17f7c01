"""Money arithmetic for carts and orders."""

from decimal import ROUND_HALF_EVEN, Decimal


def round_money(amount: Decimal, places: int = 2) -> Decimal:
    """Round to specified decimal places using banker's rounding."""
    quantize_str = "0." + "0" * places
    return amount.quantize(Decimal(quantize_str), rounding=ROUND_HALF_EVEN)


def line_total(unit_price: Decimal, quantity: int) -> Decimal:
    """Price of one cart or order line."""
    return round_money(Decimal(unit_price) * quantity)


def order_total(lines) -> Decimal:
    """Sum of (unit_price, quantity) line totals."""
    total = Decimal("0.00")
    for unit_price, quantity in lines:
        total += line_total(unit_price, quantity)
    return round_money(total)
