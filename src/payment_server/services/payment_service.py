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

"""Payment service for managing the lifecycle of payment intents.

This module provides the `PaymentService` class, which encapsulates the
business logic behind the payment endpoints. The server holds no payment state
of its own: it validates what the client sends, delegates to the configured
processor and relays the outcome.

Key responsibilities include:
- Validating amounts and currencies before any processor call is made.
- Creating automatically captured payment intents, forwarding the client's
  idempotency key so retries never produce a second intent.
- Requesting full refunds against an existing payment intent.
- Recording every request in the request log when a transactions DB is
  configured.
"""

import decimal
import logging
import re
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from .. import db
from ..exceptions import IdempotencyConflictError
from ..exceptions import InvalidAmountError
from ..exceptions import InvalidRequestError
from ..exceptions import MissingIntentIdError
from ..exceptions import PaymentProcessorError
from ..models import CreatePaymentIntentRequest
from ..models import CreatePaymentIntentResponse
from ..models import RefundPaymentRequest
from ..models import RefundPaymentResponse
from .processors import PaymentProcessor
from .processors import ProcessorError
from .processors import ProcessorIdempotencyError

logger = logging.getLogger(__name__)

_CURRENCY_RE = re.compile(r"^[a-z]{3}$")


def parse_amount(amount: Any) -> int:
  """Validates a requested amount and rounds it to whole minor units.

  Numbers and numeric strings are accepted; the value is rounded half-up and
  must be at least one minor unit.

  Args:
    amount: The raw `amount` value from the request body.

  Returns:
    The amount in minor units.

  Raises:
    InvalidAmountError: If the amount is missing, non-numeric, not finite or
      not positive.
  """
  if amount is None or isinstance(amount, bool):
    raise InvalidAmountError()
  if not isinstance(amount, (int, float, str, decimal.Decimal)):
    raise InvalidAmountError()

  try:
    value = decimal.Decimal(str(amount).strip())
    if not value.is_finite() or value <= 0:
      raise InvalidAmountError()
    minor_units = int(
        value.quantize(decimal.Decimal(1), decimal.ROUND_HALF_UP)
    )
  except decimal.InvalidOperation as e:
    raise InvalidAmountError() from e

  if minor_units < 1:
    raise InvalidAmountError()
  return minor_units


def parse_currency(currency: Optional[str]) -> str:
  """Normalizes an ISO 4217 currency code to the processor's lower case."""
  normalized = (currency or "usd").strip().lower()
  if not _CURRENCY_RE.match(normalized):
    raise InvalidRequestError(f"Unsupported currency: {currency}")
  return normalized


class PaymentService:
  """Service for creating and refunding payment intents."""

  def __init__(
      self,
      processor: PaymentProcessor,
      transactions_session: Optional[AsyncSession] = None,
  ):
    self.processor = processor
    self.transactions_session = transactions_session

  async def _log(
      self,
      url: str,
      payload: dict[str, Any],
      payment_intent_id: Optional[str] = None,
  ) -> Optional[db.RequestLog]:
    if self.transactions_session is None:
      return None
    entry = await db.log_request(
        self.transactions_session,
        method="POST",
        url=url,
        payment_intent_id=payment_intent_id,
        payload=payload,
    )
    await self.transactions_session.commit()
    return entry

  async def _attach_intent(
      self, entry: Optional[db.RequestLog], payment_intent_id: str
  ) -> None:
    """Records the intent a logged request ended up creating."""
    if entry is None:
      return
    entry.payment_intent_id = payment_intent_id
    await self.transactions_session.commit()

  async def create_payment_intent(
      self,
      request: CreatePaymentIntentRequest,
      idempotency_key: Optional[str] = None,
  ) -> CreatePaymentIntentResponse:
    """Creates a payment intent and returns its client secret."""
    entry = await self._log(
        "/create-payment-intent",
        {"amount": str(request.amount), "currency": request.currency},
    )

    amount = parse_amount(request.amount)
    currency = parse_currency(request.currency)
    logger.info("Creating payment intent for %d %s", amount, currency)

    try:
      intent = await self.processor.create_payment_intent(
          amount=amount, currency=currency, idempotency_key=idempotency_key
      )
    except ProcessorIdempotencyError as e:
      raise IdempotencyConflictError(e.message) from e
    except ProcessorError as e:
      logger.error("Error creating payment intent: %s", e.message)
      raise PaymentProcessorError(e.message) from e

    logger.info("Created payment intent %s", intent.id)
    await self._attach_intent(entry, intent.id)
    return CreatePaymentIntentResponse(
        client_secret=intent.client_secret, payment_intent_id=intent.id
    )

  async def refund_payment(
      self, request: RefundPaymentRequest
  ) -> RefundPaymentResponse:
    """Requests a full refund of a payment intent."""
    payment_intent_id = (request.payment_intent_id or "").strip()
    await self._log(
        "/refund-payment",
        {"paymentIntentId": payment_intent_id},
        payment_intent_id=payment_intent_id or None,
    )

    if not payment_intent_id:
      raise MissingIntentIdError()

    logger.info("Refunding payment intent %s", payment_intent_id)
    try:
      refund = await self.processor.refund_payment(payment_intent_id)
    except ProcessorError as e:
      logger.error("Error processing refund: %s", e.message)
      raise PaymentProcessorError(e.message) from e

    return RefundPaymentResponse(refund=refund)
