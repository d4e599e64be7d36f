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

"""Payment intent routes for the payment server."""

from typing import Any, Optional

from fastapi import APIRouter
from fastapi import Body
from fastapi import Depends

from .. import dependencies
from ..models import CreatePaymentIntentRequest
from ..models import RefundPaymentRequest
from ..services.payment_service import PaymentService

router = APIRouter()


@router.post(
    "/create-payment-intent",
    response_model=dict[str, Any],
    operation_id="create_payment_intent",
)
async def create_payment_intent(
    body: CreatePaymentIntentRequest = Body(...),
    idempotency_key: Optional[str] = Depends(dependencies.idempotency_header),
    payment_service: PaymentService = Depends(
        dependencies.get_payment_service
    ),
) -> dict[str, Any]:
  """Create a payment intent and return its client secret."""
  response = await payment_service.create_payment_intent(
      body, idempotency_key=idempotency_key
  )
  return response.model_dump(mode="json", by_alias=True)


@router.post(
    "/refund-payment",
    response_model=dict[str, Any],
    operation_id="refund_payment",
)
async def refund_payment(
    body: RefundPaymentRequest = Body(...),
    payment_service: PaymentService = Depends(
        dependencies.get_payment_service
    ),
) -> dict[str, Any]:
  """Fully refund a payment intent."""
  response = await payment_service.refund_payment(body)
  return response.model_dump(mode="json", by_alias=True)
