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

"""Checkout session: the two-step shipping and payment flow.

Key responsibilities include:
- Holding the shipping and payment forms and the session state.
- Validating the move from the shipping step to the payment step.
- Running a single order submission at a time: amount, payment intent,
  device confirmation and order creation, strictly in that order.
- Reporting every failure to the user and staying on the payment step, with
  a refund when the order cannot be stored after the payment went through.
"""

import asyncio
import logging
from typing import List, Optional, Union

from .collaborators import AuthContext
from .collaborators import CartStore
from .collaborators import Navigator
from .collaborators import Notifier
from .constants import DEFAULT_CURRENCY
from .constants import PAYMENT_TIMEOUT
from .device import PaymentConfirmer
from .device import WalletParams
from .enums import CheckoutStep
from .enums import PaymentMethod
from .enums import SubmissionState
from .exceptions import CheckoutError
from .exceptions import GatewayTimeout
from .exceptions import InvalidAmount
from .exceptions import InvalidTransition
from .exceptions import OrderCreationFailed
from .exceptions import PaymentDeclined
from .exceptions import ValidationFailed
from .finalizer import describe_payment_method
from .finalizer import OrderFinalizer
from .gateway import PaymentGatewayClient
from .models import CheckoutState
from .models import Order
from .models import OrderDraft
from .models import OrderTotals
from .models import PaymentForm
from .models import ShippingForm
from .models import ShippingOption
from . import pricing

logger = logging.getLogger(__name__)

MISSING_INFORMATION = "Missing Information"
MISSING_SHIPPING_DETAILS = "Please fill in all shipping details."
MISSING_PAYMENT_DETAILS = "Please fill in all payment details."
UNEXPECTED_PAYMENT_ERROR = "An unexpected error occurred during payment."
TIMEOUT_REFUNDED = "Any charge for this attempt has been refunded."


class CheckoutSession:
  """One user's pass through the checkout screen.

  The session starts on the shipping step. `place_order` is the only
  asynchronous operation that changes state; while it runs the session is
  processing and ignores every other call that would change it.
  """

  def __init__(
      self,
      cart: CartStore,
      auth: AuthContext,
      gateway: PaymentGatewayClient,
      confirmer: PaymentConfirmer,
      finalizer: OrderFinalizer,
      navigator: Navigator,
      notifier: Notifier,
      *,
      currency: str = DEFAULT_CURRENCY,
      payment_timeout: float = PAYMENT_TIMEOUT,
  ):
    self.cart = cart
    self.gateway = gateway
    self.confirmer = confirmer
    self.finalizer = finalizer
    self.navigator = navigator
    self.notifier = notifier
    self.currency = currency
    self.payment_timeout = payment_timeout
    self._attempt = 0
    self._created_intent_id: Optional[str] = None

    user = auth.current_user()
    display_name = user.name if user else ""
    self.state = CheckoutState(user_id=user.id if user else None)
    self.shipping_form = ShippingForm(name=display_name)
    self.payment_form = PaymentForm(name_on_card=display_name)

  @property
  def processing(self) -> bool:
    return self.state.processing

  @property
  def totals(self) -> OrderTotals:
    return pricing.compute_totals(
        self.cart.get_total(), self.state.is_express_shipping
    )

  @property
  def shipping_options(self) -> List[ShippingOption]:
    return pricing.shipping_options(self.cart.get_total())

  def _ensure_open(self) -> None:
    if self.state.closed:
      raise InvalidTransition("The checkout session is closed.")

  def _ignored_while_processing(self, action: str) -> bool:
    if self.state.processing:
      logger.info("Ignoring %s while the order is being placed", action)
      return True
    return False

  async def open(self) -> bool:
    """Checks whether the device can pay with the platform wallet."""
    self._ensure_open()
    try:
      supported = await self.confirmer.is_wallet_supported()
    except Exception as e:  # pylint: disable=broad-exception-caught
      logger.warning("Wallet support check failed: %s", e)
      supported = False
    self.state.wallet_supported = bool(supported)
    logger.info(
        "Checkout %s opened (wallet supported: %s)",
        self.state.session_id,
        self.state.wallet_supported,
    )
    return self.state.wallet_supported

  def update_shipping(self, field: str, value: str) -> None:
    if self._ignored_while_processing("shipping update"):
      return
    self._ensure_open()
    if field not in ShippingForm.REQUIRED_FIELDS:
      raise ValueError(f"Unknown shipping field: {field}")
    setattr(self.shipping_form, field, value)

  def update_payment(self, field: str, value: str) -> None:
    if self._ignored_while_processing("payment update"):
      return
    self._ensure_open()
    if field not in PaymentForm.REQUIRED_FIELDS:
      raise ValueError(f"Unknown payment field: {field}")
    setattr(self.payment_form, field, value)

  def set_express_shipping(self, is_express: bool) -> None:
    if self._ignored_while_processing("shipping method change"):
      return
    self._ensure_open()
    self.state.is_express_shipping = bool(is_express)

  def select_payment_method(
      self, method: Union[PaymentMethod, str]
  ) -> PaymentMethod:
    """Selects the payment method and returns the one actually in effect.

    The wallet can only be selected when the device supports it; otherwise the
    selection stays on card. While an order is being placed the selection is
    left as it is.
    """
    if self._ignored_while_processing("payment method change"):
      return self.state.selected_payment_method
    self._ensure_open()
    method = PaymentMethod(method)
    if method == PaymentMethod.WALLET and not self.state.wallet_supported:
      logger.info("Wallet not supported on this device, keeping card")
      method = PaymentMethod.CARD
    self.state.selected_payment_method = method
    return method

  def continue_to_payment(self) -> None:
    """Moves from the shipping step to the payment step.

    Raises:
      ValidationFailed: If a required shipping field is empty. The session
        stays on the shipping step.
      InvalidTransition: If the session is not on the shipping step.
    """
    if self._ignored_while_processing("continue"):
      return
    self._ensure_open()
    if self.state.active_step != CheckoutStep.SHIPPING:
      raise InvalidTransition("Already on the payment step.")

    missing = self.shipping_form.missing_fields()
    if missing:
      self.notifier.alert(MISSING_INFORMATION, MISSING_SHIPPING_DETAILS)
      raise ValidationFailed(MISSING_SHIPPING_DETAILS, missing)

    self.state.active_step = CheckoutStep.PAYMENT
    logger.info("Checkout %s moved to payment", self.state.session_id)

  def back(self) -> None:
    """Returns to the shipping step, or leaves checkout from shipping."""
    if self._ignored_while_processing("back"):
      return
    self._ensure_open()
    if self.state.active_step == CheckoutStep.PAYMENT:
      self.state.active_step = CheckoutStep.SHIPPING
      logger.info("Checkout %s moved back to shipping", self.state.session_id)
      return
    self.cancel()

  def cancel(self) -> None:
    if self._ignored_while_processing("cancel"):
      return
    self._ensure_open()
    self.navigator.back()
    self.state.closed = True
    logger.info("Checkout %s cancelled", self.state.session_id)

  def idempotency_key(self, amount: int) -> str:
    key = f"{self.state.session_id}-{amount}-{self.currency}"
    if self._attempt:
      key += f"-{self._attempt}"
    return key

  def _draft(self) -> OrderDraft:
    return OrderDraft(
        state=self.state.model_copy(),
        items=tuple(self.cart.get_items()),
        totals=self.totals,
        shipping_form=self.shipping_form.model_copy(),
        payment_form=self.payment_form.model_copy(),
    )

  async def place_order(self) -> Optional[Order]:
    """Authorizes the payment and creates the order.

    The payment method, both forms, the shipping method and the cart are
    copied before anything is awaited; the order is built from that copy.

    Returns:
      The created order, or None if the submission was ignored or failed. A
      failure has already been reported to the user.

    Raises:
      ValidationFailed: If the card method is selected and a payment field is
        empty.
      InvalidTransition: If the session is closed or not on the payment step.
    """
    if self._ignored_while_processing("place order"):
      return None
    self._ensure_open()
    if self.state.active_step != CheckoutStep.PAYMENT:
      raise InvalidTransition("Shipping details must be completed first.")

    if self.state.selected_payment_method == PaymentMethod.CARD:
      missing = self.payment_form.missing_fields()
      if missing:
        self.notifier.alert(MISSING_INFORMATION, MISSING_PAYMENT_DETAILS)
        raise ValidationFailed(MISSING_PAYMENT_DETAILS, missing)

    self.state.submission = SubmissionState.SUBMITTING
    try:
      order = await self._submit(self._draft())
    except CheckoutError as e:
      logger.warning("Checkout %s failed: %s", self.state.session_id, e)
      self.state.submission = SubmissionState.FAILED
      self.notifier.alert(e.title, e.message)
      return None
    except Exception:  # pylint: disable=broad-exception-caught
      logger.exception("Unexpected error placing order")
      self.state.submission = SubmissionState.FAILED
      self.notifier.alert("Error", UNEXPECTED_PAYMENT_ERROR)
      return None

    self.state.submission = SubmissionState.SUCCEEDED
    self.state.closed = True
    return order

  async def _submit(self, draft: OrderDraft) -> Order:
    if draft.totals.total <= 0:
      raise InvalidAmount()

    self._created_intent_id = None
    try:
      intent_id = await asyncio.wait_for(
          self._authorize(draft), timeout=self.payment_timeout
      )
    except asyncio.TimeoutError as e:
      raise await self._timed_out() from e
    self.state.payment_intent_id = intent_id

    descriptor = describe_payment_method(
        draft.payment_method, draft.payment_form
    )
    try:
      return self.finalizer.finalize(
          draft.state.model_copy(update={"payment_intent_id": intent_id}),
          draft.items,
          draft.totals,
          draft.shipping_form,
          descriptor,
      )
    except OrderCreationFailed as e:
      note = await self._refund(intent_id)
      raise OrderCreationFailed(f"{e.message} {note}") from e

  async def _authorize(self, draft: OrderDraft) -> str:
    """Creates the payment intent and confirms it on the device."""
    amount = draft.totals.total
    secret = await self.gateway.create_payment_intent(
        amount, self.currency, idempotency_key=self.idempotency_key(amount)
    )
    self._created_intent_id = secret.payment_intent_id

    if draft.payment_method == PaymentMethod.WALLET:
      result = await self.confirmer.confirm_wallet_payment(
          secret.client_secret,
          WalletParams(currency_code=self.currency.upper()),
      )
    else:
      result = await self.confirmer.confirm_card_payment(
          secret.client_secret, draft.payment_form
      )

    if result.error_message:
      raise PaymentDeclined(result.error_message)
    if not result.payment_intent_id:
      raise PaymentDeclined()
    logger.info("Payment intent %s confirmed", result.payment_intent_id)
    return result.payment_intent_id

  async def _timed_out(self) -> GatewayTimeout:
    """Builds the timeout error, refunding an intent that may have been paid.

    The device confirmation may have gone through even though its answer never
    arrived, so an intent that was already created is refunded. A refused
    refund means nothing was charged; the intent is then kept so that a retry
    confirms it instead of creating a second one.
    """
    error = GatewayTimeout()
    intent_id = self._created_intent_id
    if intent_id is None:
      return error
    try:
      await self.gateway.refund_payment(intent_id)
    except CheckoutError as e:
      logger.info("Timed out intent %s was not refunded: %s", intent_id, e)
      return error
    self._attempt += 1
    logger.info("Refunded timed out payment intent %s", intent_id)
    return GatewayTimeout(f"{error.message} {TIMEOUT_REFUNDED}")

  async def _refund(self, payment_intent_id: str) -> str:
    """Refunds a confirmed payment whose order could not be stored."""
    try:
      await self.gateway.refund_payment(payment_intent_id)
    except CheckoutError as e:
      logger.error("Refund of %s failed: %s", payment_intent_id, e)
      return "Your payment could not be refunded automatically."
    self._attempt += 1
    logger.info("Refunded payment intent %s", payment_intent_id)
    return "Your payment has been refunded."
