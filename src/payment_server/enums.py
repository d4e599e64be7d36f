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

"""Enumerations for the payment server.

This module defines the processor backends the server can be configured with
and the states a payment intent or refund reported by a processor can be in.
"""

import enum


class ProcessorName(str, enum.Enum):
  STRIPE = "stripe"
  MOCK = "mock"


class CaptureMethod(str, enum.Enum):
  AUTOMATIC = "automatic"
  MANUAL = "manual"


class PaymentIntentStatus(str, enum.Enum):
  REQUIRES_PAYMENT_METHOD = "requires_payment_method"
  REQUIRES_CONFIRMATION = "requires_confirmation"
  PROCESSING = "processing"
  SUCCEEDED = "succeeded"
  CANCELED = "canceled"


class RefundStatus(str, enum.Enum):
  PENDING = "pending"
  SUCCEEDED = "succeeded"
  FAILED = "failed"
