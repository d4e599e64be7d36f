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

"""HTTP client for the storefront payment server.

Key responsibilities include:
- Requesting a payment intent (client secret and intent id) for an amount.
- Requesting a full refund of a payment intent.
- Translating transport failures and error responses into checkout errors,
  keeping the server's error message verbatim.
"""

import logging
from typing import Any, Optional

import httpx

from .constants import DEFAULT_CURRENCY
from .constants import HTTP_TIMEOUT
from .exceptions import GatewayTimeout
from .exceptions import GatewayUnavailable
from .exceptions import MissingIntentId
from .models import PaymentIntentSecret
from .models import RefundResult

logger = logging.getLogger(__name__)


class PaymentGatewayClient:
  """Async client for the payment server endpoints."""

  def __init__(
      self,
      base_url: str,
      *,
      timeout: float = HTTP_TIMEOUT,
      transport: Optional[httpx.AsyncBaseTransport] = None,
  ):
    self.base_url = base_url.rstrip("/")
    self._client = httpx.AsyncClient(
        base_url=self.base_url, timeout=timeout, transport=transport
    )

  async def __aenter__(self) -> "PaymentGatewayClient":
    return self

  async def __aexit__(self, exc_type, exc, tb) -> None:
    await self.aclose()

  async def aclose(self) -> None:
    await self._client.aclose()

  async def _post(
      self,
      path: str,
      payload: dict[str, Any],
      fallback_error: str,
      headers: Optional[dict[str, str]] = None,
  ) -> dict[str, Any]:
    """Posts JSON and returns the decoded success body.

    Raises:
      GatewayTimeout: If the server does not answer within the timeout.
      GatewayUnavailable: If the server cannot be reached or answers with an
        error status or a body that is not a JSON object.
    """
    try:
      response = await self._client.post(path, json=payload, headers=headers)
    except httpx.TimeoutException as e:
      logger.warning("Timed out calling %s: %s", path, e)
      raise GatewayTimeout() from e
    except httpx.RequestError as e:
      logger.warning("Could not reach %s: %s", path, e)
      raise GatewayUnavailable(fallback_error) from e

    try:
      data = response.json()
    except ValueError:
      data = None

    if response.is_error:
      message = fallback_error
      if isinstance(data, dict) and data.get("error"):
        message = str(data["error"])
      logger.warning(
          "%s failed with status %d: %s", path, response.status_code, message
      )
      raise GatewayUnavailable(message, status_code=response.status_code)

    if not isinstance(data, dict):
      raise GatewayUnavailable(fallback_error, status_code=response.status_code)
    return data

  async def create_payment_intent(
      self,
      amount: int,
      currency: str = DEFAULT_CURRENCY,
      idempotency_key: Optional[str] = None,
  ) -> PaymentIntentSecret:
    """Asks the server for a new payment intent.

    Args:
      amount: The amount to charge, in minor units.
      currency: ISO currency code.
      idempotency_key: Sent as the `Idempotency-Key` header when given; the
        server returns the same intent for repeated requests with the key.

    Returns:
      The client secret and id of the payment intent.
    """
    headers = {"Idempotency-Key": idempotency_key} if idempotency_key else None
    logger.info("Requesting payment intent for %d %s", amount, currency)
    data = await self._post(
        "/create-payment-intent",
        {"amount": amount, "currency": currency},
        "Failed to create payment intent",
        headers=headers,
    )

    client_secret = data.get("clientSecret")
    if not client_secret:
      raise GatewayUnavailable("Failed to get client secret.")
    return PaymentIntentSecret(
        client_secret=client_secret,
        payment_intent_id=data.get("paymentIntentId") or "",
    )

  async def refund_payment(self, payment_intent_id: str) -> RefundResult:
    """Asks the server to fully refund a payment intent."""
    if not payment_intent_id or not payment_intent_id.strip():
      raise MissingIntentId()

    logger.info("Requesting refund of %s", payment_intent_id)
    data = await self._post(
        "/refund-payment",
        {"paymentIntentId": payment_intent_id},
        "Failed to refund payment",
    )

    refund = data.get("refund") or {}
    return RefundResult(
        success=bool(data.get("success", True)),
        message=data.get("message") or "Refund successful",
        refund_id=refund.get("id"),
        status=refund.get("status"),
        amount=refund.get("amount"),
    )
