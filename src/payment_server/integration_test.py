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

"""Integration tests for the payment server."""

import asyncio
import os
import shutil
import tempfile
from typing import AsyncGenerator

from absl.testing import absltest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession

from payment_server import db
from payment_server import dependencies
from payment_server.server import app
from payment_server.services.processors import MockProcessor


class IntegrationTest(absltest.TestCase):
  """Integration tests for the payment endpoints."""

  def setUp(self) -> None:
    """Sets up a temporary request log DB and a mock processor."""
    super().setUp()
    self.test_dir = tempfile.mkdtemp()
    self.log_store = db.RequestLogStore()
    asyncio.run(
        self.log_store.open(os.path.join(self.test_dir, "requests.db"))
    )

    self.processor = MockProcessor()

    async def override_get_transactions_db() -> (
        AsyncGenerator[AsyncSession, None]
    ):
      async with self.log_store.session_factory() as session:
        yield session

    app.dependency_overrides[dependencies.get_processor] = (
        lambda: self.processor
    )
    app.dependency_overrides[dependencies.get_transactions_db] = (
        override_get_transactions_db
    )

    self.client = TestClient(app)

  def tearDown(self) -> None:
    """Cleans up the test environment."""
    app.dependency_overrides.clear()

    asyncio.run(self.log_store.close())

    shutil.rmtree(self.test_dir)
    super().tearDown()

  def _create_intent(self, amount=1000, currency="usd", idempotency_key=None):
    headers = {"Idempotency-Key": idempotency_key} if idempotency_key else {}
    return self.client.post(
        "/create-payment-intent",
        json={"amount": amount, "currency": currency},
        headers=headers,
    )

  def _request_logs(self, payment_intent_id=None):
    async def fetch():
      async with self.log_store.session_factory() as session:
        return await db.list_request_logs(session, payment_intent_id)

    return asyncio.run(fetch())

  def test_root(self):
    response = self.client.get("/")
    self.assertEqual(response.status_code, 200)
    self.assertEqual(
        response.json(), {"message": "Payment server is running"}
    )

  def test_create_payment_intent(self):
    response = self._create_intent(12960)

    self.assertEqual(response.status_code, 200, response.text)
    data = response.json()
    self.assertStartsWith(data["paymentIntentId"], "pi_")
    self.assertStartsWith(data["clientSecret"], data["paymentIntentId"])
    self.assertEqual(self.processor.create_calls, 1)

    intent = self.processor.intents[0]
    self.assertEqual(intent.amount, 12960)
    self.assertEqual(intent.currency, "usd")
    self.assertEqual(intent.capture_method, "automatic")
    self.assertEqual(intent.payment_method_types, ["card"])

  def test_create_payment_intent_normalizes_amount_and_currency(self):
    response = self._create_intent("1000.5", currency="USD")

    self.assertEqual(response.status_code, 200, response.text)
    intent = self.processor.intents[0]
    self.assertEqual(intent.amount, 1001)
    self.assertEqual(intent.currency, "usd")

  def test_invalid_amounts_are_rejected_without_processor_call(self):
    for amount in (0, -5, "abc", None, True, "NaN", "Infinity", 0.4):
      with self.subTest(amount=amount):
        response = self._create_intent(amount)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(
            response.json(),
            {"error": "Invalid amount provided", "code": "INVALID_AMOUNT"},
        )
    self.assertEqual(self.processor.create_calls, 0)

  def test_unsupported_currency(self):
    response = self._create_intent(1000, currency="dollars")

    self.assertEqual(response.status_code, 400)
    self.assertEqual(response.json()["code"], "INVALID_REQUEST")
    self.assertEqual(self.processor.create_calls, 0)

  def test_malformed_body(self):
    response = self.client.post(
        "/create-payment-intent",
        content="not json",
        headers={"Content-Type": "application/json"},
    )

    self.assertEqual(response.status_code, 400)
    self.assertEqual(response.json()["code"], "INVALID_REQUEST")

  def test_processor_failure(self):
    self.processor.fail_with = "Your account cannot currently make charges."

    response = self._create_intent(1000)

    self.assertEqual(response.status_code, 500)
    self.assertEqual(
        response.json(),
        {
            "error": "Your account cannot currently make charges.",
            "code": "PROCESSOR_ERROR",
        },
    )
    self.assertEqual(self.processor.create_calls, 1)

  def test_idempotent_replay_returns_same_intent(self):
    first = self._create_intent(1000, idempotency_key="session-1000-usd")
    second = self._create_intent(1000, idempotency_key="session-1000-usd")

    self.assertEqual(first.status_code, 200)
    self.assertEqual(second.status_code, 200)
    self.assertEqual(first.json(), second.json())
    self.assertLen(self.processor.intents, 1)

  def test_idempotency_conflict(self):
    self._create_intent(1000, idempotency_key="reused-key")

    response = self._create_intent(2000, idempotency_key="reused-key")

    self.assertEqual(response.status_code, 409)
    self.assertEqual(response.json()["code"], "IDEMPOTENCY_CONFLICT")
    self.assertLen(self.processor.intents, 1)

  def test_refund_payment(self):
    intent_id = self._create_intent(2500).json()["paymentIntentId"]

    response = self.client.post(
        "/refund-payment", json={"paymentIntentId": intent_id}
    )

    self.assertEqual(response.status_code, 200, response.text)
    data = response.json()
    self.assertTrue(data["success"])
    self.assertEqual(data["message"], "Refund successful")
    self.assertEqual(data["refund"]["paymentIntentId"], intent_id)
    self.assertEqual(data["refund"]["amount"], 2500)
    self.assertEqual(data["refund"]["status"], "succeeded")

  def test_refund_requires_intent_id(self):
    for body in ({}, {"paymentIntentId": ""}, {"paymentIntentId": "   "}):
      with self.subTest(body=body):
        response = self.client.post("/refund-payment", json=body)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(
            response.json(),
            {
                "error": "Payment Intent ID is required",
                "code": "MISSING_INTENT_ID",
            },
        )
    self.assertEqual(self.processor.refund_calls, 0)

  def test_refund_unknown_intent(self):
    response = self.client.post(
        "/refund-payment", json={"paymentIntentId": "pi_missing"}
    )

    self.assertEqual(response.status_code, 500)
    self.assertEqual(response.json()["code"], "PROCESSOR_ERROR")
    self.assertIn("pi_missing", response.json()["error"])

  def test_refund_twice(self):
    intent_id = self._create_intent(2500).json()["paymentIntentId"]
    self.client.post("/refund-payment", json={"paymentIntentId": intent_id})

    response = self.client.post(
        "/refund-payment", json={"paymentIntentId": intent_id}
    )

    self.assertEqual(response.status_code, 500)
    self.assertIn("already been refunded", response.json()["error"])

  def test_requests_are_logged(self):
    intent_id = self._create_intent(2500).json()["paymentIntentId"]
    self.client.post("/refund-payment", json={"paymentIntentId": intent_id})

    logs = self._request_logs()
    self.assertLen(logs, 2)
    self.assertEqual(logs[0].url, "/create-payment-intent")
    self.assertEqual(logs[0].payload, {"amount": "2500", "currency": "usd"})
    self.assertEqual(logs[0].payment_intent_id, intent_id)
    self.assertEqual(logs[1].url, "/refund-payment")
    self.assertEqual(logs[1].payment_intent_id, intent_id)

    intent_logs = self._request_logs(intent_id)
    self.assertEqual(
        [log.url for log in intent_logs],
        ["/create-payment-intent", "/refund-payment"],
    )
    self.assertEqual(intent_logs[0].method, "POST")

  def test_failed_create_is_logged_without_intent(self):
    self.processor.fail_with = "Your account cannot currently make charges."

    self._create_intent(1000)

    (log,) = self._request_logs()
    self.assertEqual(log.url, "/create-payment-intent")
    self.assertIsNone(log.payment_intent_id)

  def test_unconfigured_processor(self):
    del app.dependency_overrides[dependencies.get_processor]

    response = self._create_intent(1000)

    self.assertEqual(response.status_code, 503)
    self.assertEqual(response.json()["code"], "PROCESSOR_UNAVAILABLE")


if __name__ == "__main__":
  absltest.main()
