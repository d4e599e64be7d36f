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

"""Request and response models for the payment server.

The wire format uses camelCase keys (`clientSecret`, `paymentIntentId`) to match
what the mobile client sends and expects, so every model is configured with a
camelCase alias generator and still accepts snake_case field names.
"""

from typing import Any, Optional

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic.alias_generators import to_camel


class _WireModel(BaseModel):
  model_config = ConfigDict(
      alias_generator=to_camel, populate_by_name=True, extra="ignore"
  )


class CreatePaymentIntentRequest(_WireModel):
  """Body of `POST /create-payment-intent`.

  `amount` is untyped: numeric strings are accepted and every
  other shape is rejected by the service with `INVALID_AMOUNT` rather than by
  request validation.
  """

  amount: Any = None
  currency: str = "usd"


class CreatePaymentIntentResponse(_WireModel):
  client_secret: str
  payment_intent_id: str


class RefundPaymentRequest(_WireModel):
  payment_intent_id: Optional[str] = None


class ProcessorIntent(_WireModel):
  """A payment intent as reported back by a processor."""

  id: str
  client_secret: str
  amount: int
  currency: str
  status: str
  capture_method: str = "automatic"
  payment_method_types: list[str] = []


class ProcessorRefund(_WireModel):
  """A refund as reported back by a processor."""

  id: str
  payment_intent_id: str
  amount: int
  currency: str
  status: str


class RefundPaymentResponse(_WireModel):
  success: bool = True
  message: str = "Refund successful"
  refund: ProcessorRefund
