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

"""Custom exceptions for the payment server."""


class PaymentServiceError(Exception):
  """Base class for all payment service exceptions."""

  def __init__(
      self, message: str, code: str = "INTERNAL_ERROR", status_code: int = 500
  ):
    self.message = message
    self.code = code
    self.status_code = status_code
    super().__init__(self.message)


class InvalidAmountError(PaymentServiceError):
  """Raised when the requested amount is non-numeric or not positive."""

  def __init__(self, message: str = "Invalid amount provided"):
    super().__init__(message, code="INVALID_AMOUNT", status_code=400)


class MissingIntentIdError(PaymentServiceError):
  """Raised when a refund is requested without a payment intent id."""

  def __init__(self, message: str = "Payment Intent ID is required"):
    super().__init__(message, code="MISSING_INTENT_ID", status_code=400)


class InvalidRequestError(PaymentServiceError):
  """Raised when the request is invalid (e.g. malformed body or currency)."""

  def __init__(self, message: str):
    super().__init__(message, code="INVALID_REQUEST", status_code=400)


class IdempotencyConflictError(PaymentServiceError):
  """Raised when an idempotency key is reused with different parameters."""

  def __init__(self, message: str):
    super().__init__(message, code="IDEMPOTENCY_CONFLICT", status_code=409)


class PaymentProcessorError(PaymentServiceError):
  """Raised when the payment processor rejects or fails a request."""

  def __init__(self, message: str):
    super().__init__(message, code="PROCESSOR_ERROR", status_code=500)
