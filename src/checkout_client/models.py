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

"""Data models of the checkout client.

Amounts are integer minor units (cents) everywhere except `CartLineItem` and
`OrderItem`, which keep the catalogue's decimal unit price.
"""

import datetime
from decimal import Decimal
from typing import ClassVar, Optional
import uuid

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import PositiveInt

from .constants import DEFAULT_COUNTRY
from .enums import CheckoutStep
from .enums import OrderStatus
from .enums import PaymentMethod
from .enums import ShippingMethod
from .enums import SubmissionState


class User(BaseModel):
  id: str
  name: str = ""
  email: Optional[str] = None


class CartLineItem(BaseModel):
  """A line of the cart, as exposed by the cart collaborator."""

  model_config = ConfigDict(frozen=True)

  product_id: str
  name: str
  unit_price: Decimal = Field(ge=0, decimal_places=2)
  quantity: PositiveInt
  image: Optional[str] = None

  @property
  def line_total(self) -> Decimal:
    return self.unit_price * self.quantity


class ShippingForm(BaseModel):
  """Shipping address entered on the first checkout step."""

  name: str = ""
  street: str = ""
  city: str = ""
  state: str = ""
  zip: str = ""
  country: str = DEFAULT_COUNTRY

  REQUIRED_FIELDS: ClassVar[tuple[str, ...]] = (
      "name",
      "street",
      "city",
      "state",
      "zip",
  )

  def missing_fields(self) -> list[str]:
    return [f for f in self.REQUIRED_FIELDS if not getattr(self, f).strip()]


class PaymentForm(BaseModel):
  """Card details entered on the payment step.

  Only lives as long as the checkout session. The fields are kept out of
  `repr` so they never end up in logs; orders only keep `last4`.
  """

  card_number: str = Field(default="", repr=False)
  name_on_card: str = ""
  expiration: str = Field(default="", repr=False)
  cvv: str = Field(default="", repr=False)

  REQUIRED_FIELDS: ClassVar[tuple[str, ...]] = (
      "card_number",
      "name_on_card",
      "expiration",
      "cvv",
  )

  def missing_fields(self) -> list[str]:
    return [f for f in self.REQUIRED_FIELDS if not getattr(self, f).strip()]

  @property
  def last4(self) -> str:
    digits = "".join(c for c in self.card_number if c.isdigit())
    return digits[-4:]


def format_amount(cents: int) -> str:
  """Formats minor units for display, e.g. 1234 -> "$12.34"."""
  sign = "-" if cents < 0 else ""
  return f"{sign}${abs(cents) // 100:,}.{abs(cents) % 100:02d}"


class OrderTotals(BaseModel):
  """Derived amounts of an order, in minor units."""

  model_config = ConfigDict(frozen=True)

  subtotal: int
  shipping: int
  tax: int
  total: int

  def summary_rows(self) -> list[tuple[str, str]]:
    """Label and display value of each row of the order summary."""
    shipping = "Free" if self.shipping == 0 else format_amount(self.shipping)
    return [
        ("Subtotal", format_amount(self.subtotal)),
        ("Shipping", shipping),
        ("Tax", format_amount(self.tax)),
        ("Total", format_amount(self.total)),
    ]


class ShippingOption(BaseModel):
  model_config = ConfigDict(frozen=True)

  method: ShippingMethod
  title: str
  description: str
  price: int


class CheckoutState(BaseModel):
  """State of one checkout session, from opening to exit."""

  session_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
  user_id: Optional[str] = None
  active_step: CheckoutStep = CheckoutStep.SHIPPING
  selected_payment_method: PaymentMethod = PaymentMethod.CARD
  is_express_shipping: bool = False
  submission: SubmissionState = SubmissionState.IDLE
  payment_intent_id: Optional[str] = None
  wallet_supported: bool = False
  closed: bool = False

  @property
  def processing(self) -> bool:
    return self.submission == SubmissionState.SUBMITTING

  @property
  def shipping_method(self) -> ShippingMethod:
    if self.is_express_shipping:
      return ShippingMethod.EXPRESS
    return ShippingMethod.STANDARD


class OrderDraft(BaseModel):
  """What an order submission works from, copied when it starts.

  Form edits made while the payment is in flight never reach the order.
  """

  model_config = ConfigDict(frozen=True)

  state: CheckoutState
  items: tuple[CartLineItem, ...]
  totals: OrderTotals
  shipping_form: ShippingForm
  payment_form: PaymentForm

  @property
  def payment_method(self) -> PaymentMethod:
    return self.state.selected_payment_method


class OrderItem(BaseModel):
  model_config = ConfigDict(frozen=True)

  product_id: str
  name: str
  price: Decimal
  quantity: int
  image: Optional[str] = None


class Order(BaseModel):
  """An order placed by a successful checkout. Immutable once created."""

  model_config = ConfigDict(frozen=True)

  id: str
  user_id: Optional[str]
  status: OrderStatus = OrderStatus.PROCESSING
  items: tuple[OrderItem, ...]
  subtotal: int
  shipping: int
  tax: int
  total: int
  shipping_address: ShippingForm
  shipping_method: ShippingMethod
  payment_method: str
  payment_intent_id: Optional[str] = None
  created_at: datetime.datetime = Field(
      default_factory=lambda: datetime.datetime.now(datetime.timezone.utc)
  )


class PaymentIntentSecret(BaseModel):
  """What the backend hands out for a new payment intent."""

  client_secret: str = Field(repr=False)
  payment_intent_id: str


class RefundResult(BaseModel):
  success: bool
  message: str
  refund_id: Optional[str] = None
  status: Optional[str] = None
  amount: Optional[int] = None
