#   Copyright 2026 UCP Authors
#
#   Licensed under the Apache License, Version 2.0 (the "License");
#   you may not use this file except in compliance with the License.
#   You may obtain a copy of the License at
#
#       http://www.apache.org/licenses/LICENSE-2.0
#
#   Unless required by applicable law or agreed to in writing, software
#   distributed under the License is distributed on an "AS IS" BASIS,
#   WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#   See the License for the specific language governing permissions and
#   limitations under the License.

"""Pricing for the checkout.

This module computes the shipping, tax and total of an order from the cart
subtotal and the selected shipping method. All amounts are integer minor units;
tax is computed in `Decimal` and rounded half-up to whole cents so the total is
an exact sum.
"""

from decimal import Decimal
from decimal import InvalidOperation
from decimal import ROUND_HALF_UP
from typing import Any, List

from .constants import EXPRESS_SHIPPING_FEE
from .constants import FREE_SHIPPING_THRESHOLD
from .constants import STANDARD_SHIPPING_FEE
from .constants import TAX_RATE
from .enums import ShippingMethod
from .exceptions import InvalidAmount
from .models import format_amount
from .models import OrderTotals
from .models import ShippingOption

__all__ = [
    "compute_totals",
    "format_amount",
    "shipping_options",
    "standard_shipping_fee",
    "to_minor_units",
]

_CENTS = Decimal(100)


def to_minor_units(value: Any) -> int:
  """Converts a currency value in major units to cents.

  Args:
    value: A `Decimal`, `int` or numeric string, e.g. `Decimal("12.345")`.

  Returns:
    The amount in cents, rounded half-up.

  Raises:
    InvalidAmount: If the value is not numeric or not finite.
  """
  if isinstance(value, bool) or not isinstance(value, (Decimal, int, str)):
    raise InvalidAmount()
  try:
    amount = Decimal(str(value).strip())
  except InvalidOperation as e:
    raise InvalidAmount() from e
  if not amount.is_finite():
    raise InvalidAmount()
  return int((amount * _CENTS).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def standard_shipping_fee(subtotal: int) -> int:
  if subtotal > FREE_SHIPPING_THRESHOLD:
    return 0
  return STANDARD_SHIPPING_FEE


def compute_totals(
    subtotal: int, is_express: bool, *, tax_rate: Decimal = TAX_RATE
) -> OrderTotals:
  """Computes the totals of an order.

  Args:
    subtotal: The cart subtotal in cents.
    is_express: Whether express shipping is selected.
    tax_rate: The tax rate applied to the subtotal.

  Returns:
    The order totals, where total = subtotal + shipping + tax.

  Raises:
    ValueError: If the subtotal is negative.
  """
  if subtotal < 0:
    raise ValueError(f"Subtotal must not be negative, got {subtotal}")

  if is_express:
    shipping = EXPRESS_SHIPPING_FEE
  else:
    shipping = standard_shipping_fee(subtotal)

  tax = int(
      (Decimal(subtotal) * tax_rate).quantize(
          Decimal(1), rounding=ROUND_HALF_UP
      )
  )
  return OrderTotals(
      subtotal=subtotal,
      shipping=shipping,
      tax=tax,
      total=subtotal + shipping + tax,
  )


def shipping_options(subtotal: int) -> List[ShippingOption]:
  """Returns the shipping methods offered for a cart subtotal."""
  standard_fee = standard_shipping_fee(subtotal)
  standard_title = "Standard Shipping"
  if standard_fee == 0:
    standard_title += " (Free)"

  return [
      ShippingOption(
          method=ShippingMethod.STANDARD,
          title=standard_title,
          description="Estimated delivery in 5-7 business days",
          price=standard_fee,
      ),
      ShippingOption(
          method=ShippingMethod.EXPRESS,
          title="Express Shipping",
          description="Guaranteed delivery in 1-2 business days",
          price=EXPRESS_SHIPPING_FEE,
      ),
  ]
