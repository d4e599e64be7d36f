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

"""FastAPI dependencies for the payment server.

This module contains dependency injection logic for FastAPI endpoints,
including:
- Header extraction (Idempotency-Key).
- Processor lookup (built once by the application lifespan).
- Database session management (request log DB).
- Service instantiation (PaymentService).
"""

from typing import AsyncGenerator, Optional

from fastapi import Depends
from fastapi import Header
from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from . import db
from .exceptions import PaymentServiceError
from .services.payment_service import PaymentService
from .services.processors import PaymentProcessor


async def idempotency_header(
    idempotency_key: Optional[str] = Header(None),
) -> Optional[str]:
  """Extracts the optional Idempotency-Key header."""
  return idempotency_key or None


def get_processor(request: Request) -> PaymentProcessor:
  """Dependency provider for the configured payment processor."""
  processor = getattr(request.app.state, "processor", None)
  if processor is None:
    raise PaymentServiceError(
        "Payment processor is not configured",
        code="PROCESSOR_UNAVAILABLE",
        status_code=503,
    )
  return processor


async def get_transactions_db() -> AsyncGenerator[Optional[AsyncSession], None]:
  """Dependency provider for the request log DB session, if configured."""
  if not db.store.initialized:
    yield None
    return
  async with db.store.session_factory() as session:
    yield session


def get_payment_service(
    processor: PaymentProcessor = Depends(get_processor),
    transactions_session: Optional[AsyncSession] = Depends(
        get_transactions_db
    ),
) -> PaymentService:
  """Dependency provider for PaymentService."""
  return PaymentService(processor, transactions_session)
