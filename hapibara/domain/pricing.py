# hapibara/domain/pricing.py
import uuid
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Tuple

from hapibara.utils.settings import SHIPPING_FLAT_RATE, TAX_RATE, ORDER_NUMBER_PREFIX

CENT = Decimal("0.01")

SHIPPING = Decimal(SHIPPING_FLAT_RATE)
TAX = Decimal(TAX_RATE)


def quantize_money(value) -> Decimal:
    """Round to two decimal places, half up. Accepts Decimal, int or str, never float."""
    if isinstance(value, float):
        raise TypeError("Money must not be a float")
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class OrderTotals:
    subtotal: Decimal
    shipping: Decimal
    tax: Decimal
    total: Decimal


def line_subtotal(lines: Iterable[Tuple[Decimal, int]]) -> Decimal:
    # lines: (cena snapshot, ilosc)
    return quantize_money(sum((Decimal(price) * quantity for price, quantity in lines), Decimal("0.00")))


def compute_totals(
    lines: Iterable[Tuple[Decimal, int]],
    shipping: Decimal = SHIPPING,
    tax_rate: Decimal = TAX,
) -> OrderTotals:
    subtotal = line_subtotal(lines)
    shipping = quantize_money(shipping)
    tax = quantize_money(subtotal * tax_rate)
    total = quantize_money(subtotal + shipping + tax)
    return OrderTotals(subtotal=subtotal, shipping=shipping, tax=tax, total=total)


def generate_order_number(prefix: str = ORDER_NUMBER_PREFIX) -> str:
    # uuid4 zamiast timestamp+random, unikalnosc pilnuje jeszcze constraint w bazie
    return f"{prefix}{uuid.uuid4().hex.upper()}"
