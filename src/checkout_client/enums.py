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

"""Enumerations for the checkout client.

This module defines the enums used to represent the state of a checkout
session and the choices recorded on the resulting order.
"""

import enum


class CheckoutStep(str, enum.Enum):
  SHIPPING = "shipping"
  PAYMENT = "payment"


class PaymentMethod(str, enum.Enum):
  CARD = "card"
  WALLET = "wallet"


class SubmissionState(str, enum.Enum):
  IDLE = "idle"
  SUBMITTING = "submitting"
  SUCCEEDED = "succeeded"
  FAILED = "failed"


class ShippingMethod(str, enum.Enum):
  STANDARD = "Standard"
  EXPRESS = "Express"


class OrderStatus(str, enum.Enum):
  PROCESSING = "Processing"
