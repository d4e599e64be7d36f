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

"""Command line checkout against a running payment server.

Plays the part of the checkout screen: fills a demo cart, walks through the
shipping and payment steps with a simulated device and places the order.

Usage:
  checkout-demo --server_url=http://localhost:5000 [--express] [--wallet]
"""

import asyncio
from decimal import Decimal
import functools
import logging
import sys

import click
from dotenv import load_dotenv

from .collaborators import InMemoryCart
from .collaborators import InMemoryOrderStore
from .collaborators import LoggingNotifier
from .collaborators import RecordingNavigator
from .collaborators import StaticAuth
from .constants import BACKEND_URL_ENV
from .constants import DEFAULT_BACKEND_URL
from .constants import HTTP_TIMEOUT
from .constants import PAYMENT_TIMEOUT
from .device import SimulatedDevice
from .enums import PaymentMethod
from .exceptions import CheckoutError
from .finalizer import OrderFinalizer
from .gateway import PaymentGatewayClient
from .models import CartLineItem
from .models import format_amount
from .models import User
from .session import CheckoutSession

load_dotenv()

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

DEMO_ITEMS = (
    CartLineItem(
        product_id="bouquet_roses",
        name="Bouquet of Red Roses",
        unit_price=Decimal("35.00"),
        quantity=2,
    ),
    CartLineItem(
        product_id="pot_ceramic",
        name="Ceramic Pot",
        unit_price=Decimal("15.00"),
        quantity=1,
    ),
)

DEMO_USER = User(id="user_demo", name="Jane Doe", email="jane@example.com")

DEMO_ADDRESS = {
    "street": "1600 Amphitheatre Pkwy",
    "city": "Mountain View",
    "state": "CA",
    "zip": "94043",
}


def make_sync(func):
  @functools.wraps(func)
  def wrapper(*args, **kwargs):
    return asyncio.run(func(*args, **kwargs))

  return wrapper


@click.command()
@click.option(
    "--server_url",
    envvar=BACKEND_URL_ENV,
    default=DEFAULT_BACKEND_URL,
    show_default=True,
    help="Base URL of the payment server.",
)
@click.option("--express", is_flag=True, help="Use express shipping.")
@click.option(
    "--payment_method",
    type=click.Choice([m.value for m in PaymentMethod]),
    default=PaymentMethod.CARD.value,
    show_default=True,
)
@click.option(
    "--wallet_supported/--no_wallet_supported",
    default=True,
    help="Whether the simulated device supports the wallet.",
)
@click.option("--card_number", default="4242424242424242")
@click.option(
    "--refund", is_flag=True, help="Refund the payment after the order."
)
@click.option("--timeout", default=PAYMENT_TIMEOUT, show_default=True)
@make_sync
async def run(
    server_url,
    express,
    payment_method,
    wallet_supported,
    card_number,
    refund,
    timeout,
):
  cart = InMemoryCart(DEMO_ITEMS)
  orders = InMemoryOrderStore()
  navigator = RecordingNavigator()
  notifier = LoggingNotifier()

  async with PaymentGatewayClient(server_url, timeout=HTTP_TIMEOUT) as gateway:
    session = CheckoutSession(
        cart=cart,
        auth=StaticAuth(DEMO_USER),
        gateway=gateway,
        confirmer=SimulatedDevice(wallet_supported=wallet_supported),
        finalizer=OrderFinalizer(orders, cart, navigator, notifier),
        navigator=navigator,
        notifier=notifier,
        payment_timeout=timeout,
    )
    await session.open()

    for field, value in DEMO_ADDRESS.items():
      session.update_shipping(field, value)
    session.set_express_shipping(express)
    for title, value in session.totals.summary_rows():
      logger.info("%-8s %s", title, value)

    try:
      session.continue_to_payment()
      method = session.select_payment_method(payment_method)
      if method == PaymentMethod.CARD:
        session.update_payment("card_number", card_number)
        session.update_payment("expiration", "12/30")
        session.update_payment("cvv", "123")
      order = await session.place_order()
    except CheckoutError as e:
      logger.error("Checkout failed: %s", e.message)
      sys.exit(1)

    if order is None:
      title, message = notifier.last_alert or ("Error", "Unknown failure")
      logger.error("%s: %s", title, message)
      sys.exit(1)

    logger.info(
        "Order %s: %s paid with %s (intent %s)",
        order.id,
        format_amount(order.total),
        order.payment_method,
        order.payment_intent_id,
    )

    if refund:
      try:
        result = await gateway.refund_payment(order.payment_intent_id or "")
      except CheckoutError as e:
        logger.error("Refund failed: %s", e.message)
        sys.exit(1)
      logger.info("%s (%s)", result.message, result.refund_id)


if __name__ == "__main__":
  run()
