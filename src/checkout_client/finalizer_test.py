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

"""Tests for the order finalizer."""

from decimal import Decimal

from absl.testing import absltest

from checkout_client import pricing
from checkout_client.collaborators import InMemoryCart
from checkout_client.collaborators import InMemoryOrderStore
from checkout_client.collaborators import LoggingNotifier
from checkout_client.collaborators import OrderStore
from checkout_client.collaborators import RecordingNavigator
from checkout_client.enums import OrderStatus
from checkout_client.enums import PaymentMethod
from checkout_client.enums import ShippingMethod
from checkout_client.exceptions import OrderCreationFailed
from checkout_client.finalizer import describe_payment_method
from checkout_client.finalizer import OrderFinalizer
from checkout_client.models import CartLineItem
from checkout_client.models import CheckoutState
from checkout_client.models import PaymentForm
from checkout_client.models import ShippingForm


class RejectingOrderStore(OrderStore):

  def create_order(self, order):
    raise ValueError("quota exceeded")


class OrderFinalizerTest(absltest.TestCase):

  def setUp(self):
    super().setUp()
    self.items = [
        CartLineItem(
            product_id="rose",
            name="Red Rose",
            unit_price=Decimal("2.50"),
            quantity=4,
            image="rose.png",
        ),
        CartLineItem(
            product_id="vase",
            name="Glass Vase",
            unit_price=Decimal("30.00"),
            quantity=1,
        ),
    ]
    self.cart = InMemoryCart(self.items)
    self.orders = InMemoryOrderStore()
    self.navigator = RecordingNavigator()
    self.notifier = LoggingNotifier()
    self.state = CheckoutState(
        user_id="user_1",
        is_express_shipping=True,
        payment_intent_id="pi_42",
    )
    self.shipping = ShippingForm(
        name="Jane Doe",
        street="1 Main St",
        city="Springfield",
        state="IL",
        zip="62701",
    )
    self.totals = pricing.compute_totals(self.cart.get_total(), True)

  def _finalizer(self, order_store=None):
    return OrderFinalizer(
        order_store or self.orders, self.cart, self.navigator, self.notifier
    )

  def test_finalize(self):
    order = self._finalizer().finalize(
        self.state, self.items, self.totals, self.shipping, "Google Pay"
    )

    self.assertEqual(order.status, OrderStatus.PROCESSING)
    self.assertEqual(order.subtotal, 4000)
    self.assertEqual(order.shipping, 8000)
    self.assertEqual(order.tax, 320)
    self.assertEqual(order.total, 12320)
    self.assertEqual(order.shipping_method, ShippingMethod.EXPRESS)
    self.assertEqual(order.payment_intent_id, "pi_42")
    self.assertEqual(order.items[0].price, Decimal("2.50"))
    self.assertEqual(order.items[0].image, "rose.png")
    self.assertEqual(order.shipping_address, self.shipping)
    self.assertEqual(self.orders.orders, [order])
    self.assertEmpty(self.cart.get_items())
    self.assertEqual(self.navigator.history, ["/"])
    self.assertEqual(self.notifier.last_alert[0], "Order Placed Successfully")

  def test_order_keeps_shipping_snapshot(self):
    order = self._finalizer().finalize(
        self.state, self.items, self.totals, self.shipping, "Google Pay"
    )
    self.shipping.city = "Chicago"

    self.assertEqual(order.shipping_address.city, "Springfield")

  def test_failed_order_leaves_cart(self):
    with self.assertRaises(OrderCreationFailed):
      self._finalizer(RejectingOrderStore()).finalize(
          self.state, self.items, self.totals, self.shipping, "Google Pay"
      )

    self.assertLen(self.cart.get_items(), 2)
    self.assertEmpty(self.navigator.history)
    self.assertEmpty(self.notifier.alerts)

  def test_describe_payment_method(self):
    card = PaymentForm(card_number="5555 5555 5555 4444")

    self.assertEqual(
        describe_payment_method(PaymentMethod.CARD, card),
        "Credit Card (ending in 4444)",
    )
    self.assertEqual(
        describe_payment_method(PaymentMethod.WALLET, card), "Google Pay"
    )

  def test_card_details_stay_out_of_repr(self):
    card = PaymentForm(card_number="4242424242424242", cvv="987")

    self.assertNotIn("4242424242424242", repr(card))
    self.assertNotIn("987", repr(card))


if __name__ == "__main__":
  absltest.main()
