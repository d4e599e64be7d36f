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

"""Exceptions raised by the checkout client.

Every error carries a machine readable `code` and the `title` of the alert the
user sees when the session reports it.
"""

from typing import Optional, Sequence


class CheckoutError(Exception):
  """Base class for all checkout exceptions."""

  def __init__(
      self, message: str, code: str = "CHECKOUT_ERROR", title: str = "Error"
  ):
    self.message = message
    self.code = code
    self.title = title
    super().__init__(self.message)


class ValidationFailed(CheckoutError):
  """Raised when required form fields are missing."""

  def __init__(self, message: str, missing_fields: Sequence[str] = ()):
    super().__init__(
        message, code="VALIDATION_FAILED", title="Missing Information"
    )
    self.missing_fields = list(missing_fields)


class InvalidAmount(CheckoutError):
  """Raised when the amount to charge is non-numeric or not positive."""

  def __init__(self, message: str = "Please enter a valid amount."):
    super().__init__(message, code="INVALID_AMOUNT", title="Invalid Amount")


class GatewayUnavailable(CheckoutError):
  """Raised when the payment backend cannot be reached or reports a failure."""

  def __init__(self, message: str, status_code: Optional[int] = None):
    super().__init__(message, code="GATEWAY_UNAVAILABLE", title="Error")
    self.status_code = status_code


class GatewayTimeout(CheckoutError):
  """Raised when the payment backend or device does not answer in time."""

  def __init__(
      self, message: str = "The payment service did not respond in time."
  ):
    super().__init__(message, code="GATEWAY_TIMEOUT", title="Error")


class PaymentDeclined(CheckoutError):
  """Raised when the processor rejects the payment confirmation."""

  def __init__(
      self, message: str = "Something went wrong with the payment."
  ):
    super().__init__(message, code="PAYMENT_DECLINED", title="Payment Error")


class MissingIntentId(CheckoutError):
  """Raised when a refund is requested without a payment intent id."""

  def __init__(self, message: str = "Payment Intent ID is required"):
    super().__init__(message, code="MISSING_INTENT_ID", title="Error")


class OrderCreationFailed(CheckoutError):
  """Raised when the order store rejects a new order."""

  def __init__(self, message: str):
    super().__init__(message, code="ORDER_CREATION_FAILED", title="Order Error")


class InvalidTransition(CheckoutError):
  """Raised when an action is not allowed in the session's current step."""

  def __init__(self, message: str):
    super().__init__(message, code="INVALID_TRANSITION", title="Error")
