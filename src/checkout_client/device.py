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

"""Device-side payment confirmation.

On a phone, a payment intent is confirmed by the processor's native SDK, either
through the platform wallet sheet or with the entered card details. This module
defines that boundary and a simulated device that stands in for the SDK.
"""

from abc import ABC
from abc import abstractmethod
import asyncio
import logging
from typing import Optional

from pydantic import BaseModel

from .constants import DEFAULT_CURRENCY
from .constants import MERCHANT_COUNTRY_CODE
from .constants import MERCHANT_NAME
from .models import PaymentForm

logger = logging.getLogger(__name__)

DECLINED_TEST_CARD = "4000000000000002"


class BillingAddressConfig(BaseModel):
  format: str = "FULL"
  is_phone_number_required: bool = True
  is_required: bool = True


class WalletParams(BaseModel):
  """Merchant metadata handed to the wallet sheet."""

  merchant_name: str = MERCHANT_NAME
  merchant_country_code: str = MERCHANT_COUNTRY_CODE
  currency_code: str = DEFAULT_CURRENCY.upper()
  billing_address_config: BillingAddressConfig = BillingAddressConfig()
  is_email_required: bool = True
  existing_payment_method_required: bool = False
  test_env: bool = True


class ConfirmationResult(BaseModel):
  payment_intent_id: Optional[str] = None
  error_message: Optional[str] = None

  @property
  def succeeded(self) -> bool:
    return self.error_message is None and self.payment_intent_id is not None


class PaymentConfirmer(ABC):
  """Confirms payment intents with the processor from the device."""

  @abstractmethod
  async def is_wallet_supported(self) -> bool:
    """Returns whether the platform wallet can be used on this device."""

  @abstractmethod
  async def confirm_wallet_payment(
      self, client_secret: str, params: WalletParams
  ) -> ConfirmationResult:
    """Presents the wallet sheet and confirms the intent."""

  @abstractmethod
  async def confirm_card_payment(
      self, client_secret: str, card: PaymentForm
  ) -> ConfirmationResult:
    """Confirms the intent with the entered card details."""


def intent_id_from_secret(client_secret: str) -> Optional[str]:
  """Extracts the intent id from a `pi_..._secret_...` client secret."""
  intent_id, sep, _ = client_secret.partition("_secret_")
  if not sep or not intent_id:
    return None
  return intent_id


class SimulatedDevice(PaymentConfirmer):
  """In-process stand-in for the processor's mobile SDK.

  Wallet confirmations succeed unless `decline_wallet` is set. Card
  confirmations are declined for `DECLINED_TEST_CARD` and succeed otherwise.
  `delay` seconds are awaited before every confirmation.
  """

  def __init__(
      self,
      wallet_supported: bool = True,
      decline_wallet: bool = False,
      delay: float = 0.0,
  ):
    self.wallet_supported = wallet_supported
    self.decline_wallet = decline_wallet
    self.delay = delay
    self.confirm_calls = 0

  async def is_wallet_supported(self) -> bool:
    return self.wallet_supported

  async def _confirm(
      self, client_secret: str, declined: bool
  ) -> ConfirmationResult:
    self.confirm_calls += 1
    if self.delay:
      await asyncio.sleep(self.delay)

    intent_id = intent_id_from_secret(client_secret)
    if intent_id is None:
      return ConfirmationResult(error_message="Invalid client secret.")
    if declined:
      return ConfirmationResult(error_message="Your card was declined.")
    return ConfirmationResult(payment_intent_id=intent_id)

  async def confirm_wallet_payment(
      self, client_secret: str, params: WalletParams
  ) -> ConfirmationResult:
    if not self.wallet_supported:
      return ConfirmationResult(
          error_message="Google Pay is not supported on this device."
      )
    logger.info(
        "Presenting wallet sheet for %s (%s)",
        params.merchant_name,
        params.currency_code,
    )
    return await self._confirm(client_secret, self.decline_wallet)

  async def confirm_card_payment(
      self, client_secret: str, card: PaymentForm
  ) -> ConfirmationResult:
    logger.info("Confirming card ending in %s", card.last4)
    number = "".join(c for c in card.card_number if c.isdigit())
    return await self._confirm(client_secret, number == DECLINED_TEST_CARD)
