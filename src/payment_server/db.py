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

"""Request log persistence for the payment server.

The payment server keeps no payment state of its own; the processor is the
source of truth. What it does keep, when a request log DB is configured, is an
append-only record of the requests it served, for auditing and for
`payment-log-dump`. Storage is SQLite through SQLAlchemy's asyncio extension
and aiosqlite.

Key features include:
- `RequestLogStore`: owns the async engine and the session factory.
- WAL journal, so the dump script can read while the server writes.
- `log_request` and `list_request_logs` helpers.
"""

import datetime
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import Column
from sqlalchemy import Integer
from sqlalchemy import JSON
from sqlalchemy import select
from sqlalchemy import String
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.orm import sessionmaker

logger = logging.getLogger(__name__)

RequestLogBase = declarative_base()


def sqlite_url(path: str) -> str:
  return f"sqlite+aiosqlite:///{path}"


class RequestLogStore:
  """Holds the engine of the request log DB once it has been opened."""

  def __init__(self) -> None:
    self.engine: Optional[AsyncEngine] = None
    self.session_factory: Optional[sessionmaker] = None

  @property
  def initialized(self) -> bool:
    return self.session_factory is not None

  async def open(self, path: str) -> None:
    """Opens (creating if needed) the SQLite DB at `path`."""
    self.engine = create_async_engine(sqlite_url(path))

    async with self.engine.connect() as conn:
      await conn.execute(text("PRAGMA journal_mode=WAL"))
    async with self.engine.begin() as conn:
      await conn.run_sync(RequestLogBase.metadata.create_all)

    self.session_factory = sessionmaker(
        self.engine, class_=AsyncSession, expire_on_commit=False
    )
    logger.info("Request log opened at %s", path)

  async def close(self) -> None:
    if self.engine is not None:
      await self.engine.dispose()
    self.engine = None
    self.session_factory = None


# Opened by the application lifespan or by `payment-log-dump`.
store = RequestLogStore()


class RequestLog(RequestLogBase):
  __tablename__ = "request_logs"

  id = Column(Integer, primary_key=True, autoincrement=True)
  timestamp = Column(String, nullable=False)
  method = Column(String, nullable=False)
  url = Column(String, nullable=False)
  payment_intent_id = Column(String, nullable=True, index=True)
  payload = Column(JSON, nullable=True)


async def log_request(
    session: AsyncSession,
    method: str,
    url: str,
    payment_intent_id: Optional[str] = None,
    payload: Optional[Dict[str, Any]] = None,
) -> RequestLog:
  """Adds a request log row to the session; the caller commits."""
  entry = RequestLog(
      timestamp=datetime.datetime.now(datetime.timezone.utc).isoformat(),
      method=method,
      url=url,
      payment_intent_id=payment_intent_id,
      payload=payload,
  )
  session.add(entry)
  return entry


async def list_request_logs(
    session: AsyncSession, payment_intent_id: Optional[str] = None
) -> List[RequestLog]:
  """Returns request log rows, oldest first.

  Args:
    session: Session on the request log DB.
    payment_intent_id: When given, only rows for this intent are returned.
  """
  query = select(RequestLog).order_by(RequestLog.id)
  if payment_intent_id:
    query = query.where(RequestLog.payment_intent_id == payment_intent_id)
  rows = await session.scalars(query)
  return list(rows.all())
