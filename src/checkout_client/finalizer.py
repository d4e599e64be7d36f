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

"""Turns an authorized checkout into an order.

Once the payment is confirmed the finalizer creates the order record, clears
the cart, leaves the checkout screen and tells the user. The cart and the
screen are only touched after the order store accepted the order.
"""

import logging
from typing import Sequence
import uuid

from .collaborators import CartStore
from .collaborators import Navigator
from .collaborators import Notifier
from .collaborators import OrderStore
from .constants import CARD_DISPLAY_TEMPLATE
from .constants import SUCCESS_ROUTE
from .constants import WALLET_DISPLAY_NAME
from .enums import PaymentMethod
from .exceptions import OrderCreationFailed
from .models import CartLineItem
from .models import CheckoutState
from .models import Order
from .models import OrderItem
from .models import OrderTotals
from .models import PaymentForm
from .models import ShippingForm

logger = logging.getLogger(__name__)


def describe_payment_method(
    method: PaymentMethod, payment_form: PaymentForm
) -> str:
  """Returns the payment method as shown on the order."""
  if method == PaymentMethod.WALLET:
    return WALLET_DISPLAY_NAME
  return CARD_DISPLAY_TEMPLATE.format(last4=payment_form.last4)


class OrderFinalizer:
  """Creates the order for a successful checkout."""

  def __init__(
      self,
      order_store: OrderStore,
      cart: CartStore,
      navigator: Navigator,
      notifier: Notifier,
      success_route: str = SUCCESS_ROUTE,
  ):
    self.order_store = order_store
    self.cart = cart
    self.navigator = navigator
    self.notifier = notifier
    self.success_route = success_route

  def build_order(
      self,
      state: CheckoutState,
      items: Sequence[CartLineItem],
      totals: OrderTotals,
      shipping_form: ShippingForm,
      payment_method: str,
  ) -> Order:
    return Order(
        id=str(uuid.uuid4()),
        user_id=state.user_id,
        items=tuple(
            OrderItem(
                product_id=item.product_id,
                name=item.name,
                price=item.unit_price,
                quantity=item.quantity,
                image=item.image,
            )
            for item in items
        ),
        subtotal=totals.subtotal,
        shipping=totals.shipping,
        tax=totals.tax,
        total=totals.total,
        shipping_address=shipping_form.model_copy(),
        shipping_method=state.shipping_method,
        payment_method=payment_method,
        payment_intent_id=state.payment_intent_id,
    )

  def finalize(
      self,
      state: CheckoutState,
      items: Sequence[CartLineItem],
      totals: OrderTotals,
      shipping_form: ShippingForm,
      payment_method: str,
  ) -> Order:
    """Creates the order, clears the cart and navigates away.

    Args:
      state: The checkout session state, carrying the user and payment intent.
      items: Snapshot of the cart line items.
      totals: The totals the payment was authorized for.
      shipping_form: The shipping address.
      payment_method: Display descriptor of the payment method.

    Returns:
      The stored order.

    Raises:
      OrderCreationFailed: If the order store rejects the order. The cart is
        left untouched in that case.
    """
    order = self.build_order(
        state, items, totals, shipping_form, payment_method
    )
    try:
      order = self.order_store.create_order(order)
    except Exception as e:  # pylint: disable=broad-exception-caught
      logger.error("Failed to create order %s: %s", order.id, e)
      raise OrderCreationFailed(f"Failed to create order: {e}") from e

    self.cart.clear()
    self.navigator.replace(self.success_route)
    self.notifier.alert(
        "Order Placed Successfully",
        f"Your order #{order.id} has been placed and is being processed.",
    )
    logger.info("Order %s placed for user %s", order.id, order.user_id)
    return order
