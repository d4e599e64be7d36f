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

"""Payment processor adapters.

The payment service only talks to a processor through `PaymentProcessor`.
`StripeProcessor` is the production adapter; `MockProcessor` keeps payment
intents in memory and is used for local runs (`--processor=mock`) and tests.
"""

from abc import ABC
from abc import abstractmethod
import logging
from typing import Optional, Sequence
import uuid

import stripe

from ..enums import CaptureMethod
from ..enums import PaymentIntentStatus
from ..enums import ProcessorName
from ..enums import RefundStatus
from ..models import ProcessorIntent
from ..models import ProcessorRefund

logger = logging.getLogger(__name__)

DEFAULT_PAYMENT_METHOD_TYPES = ("card",)


class ProcessorError(Exception):
  """Raised when the processor rejects or fails a request."""

  def __init__(self, message: str):
    self.message = message
    super().__init__(message)


class ProcessorIdempotencyError(ProcessorError):
  """Raised when an idempotency key is replayed with different parameters."""


class PaymentProcessor(ABC):
  """Interface of a third-party payment processor."""

  name: ProcessorName

  @abstractmethod
  async def create_payment_intent(
      self,
      amount: int,
      currency: str,
      idempotency_key: Optional[str] = None,
  ) -> ProcessorIntent:
    """Creates an automatically captured intent for `amount` minor units."""

  @abstractmethod
  async def refund_payment(self, payment_intent_id: str) -> ProcessorRefund:
    """Fully refunds the payment intent."""


class StripeProcessor(PaymentProcessor):
  """Payment processor backed by the Stripe API."""

  name = ProcessorName.STRIPE

  def __init__(
      self,
      api_key: str,
      payment_method_types: Sequence[str] = DEFAULT_PAYMENT_METHOD_TYPES,
      client: Optional[stripe.StripeClient] = None,
  ):
    if not api_key and client is None:
      raise ValueError("STRIPE_SECRET_KEY is not set")
    self.payment_method_types = list(payment_method_types)
    self.client = client or stripe.StripeClient(api_key)

  async def create_payment_intent(
      self,
      amount: int,
      currency: str,
      idempotency_key: Optional[str] = None,
  ) -> ProcessorIntent:
    options = {"idempotency_key": idempotency_key} if idempotency_key else {}
    try:
      intent = await self.client.payment_intents.create_async(
          params={
              "amount": amount,
              "currency": currency,
              "payment_method_types": self.payment_method_types,
              "capture_method": CaptureMethod.AUTOMATIC.value,
          },
          options=options,
      )
    except stripe.IdempotencyError as e:
      raise ProcessorIdempotencyError(e.user_message or str(e)) from e
    except stripe.StripeError as e:
      logger.error("Stripe failed to create payment intent: %s", e)
      raise ProcessorError(e.user_message or str(e)) from e

    return ProcessorIntent(
        id=intent.id,
        client_secret=intent.client_secret,
        amount=intent.amount,
        currency=intent.currency,
        status=intent.status,
        capture_method=intent.capture_method,
        payment_method_types=list(intent.payment_method_types or []),
    )

  async def refund_payment(self, payment_intent_id: str) -> ProcessorRefund:
    try:
      refund = await self.client.refunds.create_async(
          params={"payment_intent": payment_intent_id}
      )
    except stripe.StripeError as e:
      logger.error(
          "Stripe failed to refund payment intent %s: %s", payment_intent_id, e
      )
      raise ProcessorError(e.user_message or str(e)) from e

    return ProcessorRefund(
        id=refund.id,
        payment_intent_id=refund.payment_intent,
        amount=refund.amount,
        currency=refund.currency,
        status=refund.status,
    )


class MockProcessor(PaymentProcessor):
  """In-memory processor simulating Stripe payment intents and refunds.

  Intents are created in `requires_payment_method` and treated as captured for
  refund purposes. Setting `fail_with` makes every subsequent call fail with
  that message, the way a processor outage would.
  """

  name = ProcessorName.MOCK

  def __init__(
      self,
      payment_method_types: Sequence[str] = DEFAULT_PAYMENT_METHOD_TYPES,
      fail_with: Optional[str] = None,
  ):
    self.payment_method_types = list(payment_method_types)
    self.fail_with = fail_with
    self.create_calls = 0
    self.refund_calls = 0
    self._intents: dict[str, ProcessorIntent] = {}
    self._refunds: dict[str, ProcessorRefund] = {}
    self._idempotency: dict[str, tuple[tuple[int, str], str]] = {}

  @property
  def intents(self) -> list[ProcessorIntent]:
    return list(self._intents.values())

  async def create_payment_intent(
      self,
      amount: int,
      currency: str,
      idempotency_key: Optional[str] = None,
  ) -> ProcessorIntent:
    self.create_calls += 1
    if self.fail_with:
      raise ProcessorError(self.fail_with)

    params = (amount, currency)
    if idempotency_key and idempotency_key in self._idempotency:
      stored_params, intent_id = self._idempotency[idempotency_key]
      if stored_params != params:
        raise ProcessorIdempotencyError(
            "Keys for idempotent requests can only be used with the same"
            " parameters they were first used with."
        )
      return self._intents[intent_id]

    intent_id = f"pi_{uuid.uuid4().hex[:24]}"
    intent = ProcessorIntent(
        id=intent_id,
        client_secret=f"{intent_id}_secret_{uuid.uuid4().hex[:24]}",
        amount=amount,
        currency=currency,
        status=PaymentIntentStatus.REQUIRES_PAYMENT_METHOD.value,
        capture_method=CaptureMethod.AUTOMATIC.value,
        payment_method_types=self.payment_method_types,
    )
    self._intents[intent_id] = intent
    if idempotency_key:
      self._idempotency[idempotency_key] = (params, intent_id)
    return intent

  async def refund_payment(self, payment_intent_id: str) -> ProcessorRefund:
    self.refund_calls += 1
    if self.fail_with:
      raise ProcessorError(self.fail_with)

    intent = self._intents.get(payment_intent_id)
    if not intent:
      raise ProcessorError(f"No such payment_intent: '{payment_intent_id}'")
    if payment_intent_id in self._refunds:
      raise ProcessorError(
          f"Charge for payment intent {payment_intent_id} has already been"
          " refunded."
      )

    refund = ProcessorRefund(
        id=f"re_{uuid.uuid4().hex[:24]}",
        payment_intent_id=payment_intent_id,
        amount=intent.amount,
        currency=intent.currency,
        status=RefundStatus.SUCCEEDED.value,
    )
    self._refunds[payment_intent_id] = refund
    return refund


def build_processor(
    name: str,
    stripe_secret_key: Optional[str] = None,
    payment_method_types: Sequence[str] = DEFAULT_PAYMENT_METHOD_TYPES,
) -> PaymentProcessor:
  """Builds the processor selected by configuration."""
  processor_name = ProcessorName(name)
  if processor_name == ProcessorName.MOCK:
    logger.warning("Using the in-memory mock payment processor")
    return MockProcessor(payment_method_types)
  return StripeProcessor(stripe_secret_key or "", payment_method_types)
