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

"""Tests for the payment service and processor adapters."""

import asyncio
import decimal
from types import SimpleNamespace
from unittest import mock

from absl.testing import absltest
import stripe

from payment_server.exceptions import IdempotencyConflictError
from payment_server.exceptions import InvalidAmountError
from payment_server.exceptions import InvalidRequestError
from payment_server.exceptions import MissingIntentIdError
from payment_server.exceptions import PaymentProcessorError
from payment_server.models import CreatePaymentIntentRequest
from payment_server.models import RefundPaymentRequest
from payment_server.services import payment_service
from payment_server.services import processors


class ParseAmountTest(absltest.TestCase):

  def test_accepts_numbers_and_numeric_strings(self):
    self.assertEqual(payment_service.parse_amount(1000), 1000)
    self.assertEqual(payment_service.parse_amount(12.5), 13)
    self.assertEqual(payment_service.parse_amount(" 42 "), 42)
    self.assertEqual(payment_service.parse_amount(decimal.Decimal("7.49")), 7)
    self.assertEqual(payment_service.parse_amount(0.5), 1)

  def test_rejects_invalid_amounts(self):
    for amount in (None, True, False, 0, -1, "-3", "abc", "", [100], 0.49):
      with self.subTest(amount=amount):
        with self.assertRaises(InvalidAmountError):
          payment_service.parse_amount(amount)

  def test_rejects_non_finite_amounts(self):
    for amount in (float("nan"), float("inf"), "NaN", "-Infinity"):
      with self.subTest(amount=amount):
        with self.assertRaises(InvalidAmountError):
          payment_service.parse_amount(amount)


class ParseCurrencyTest(absltest.TestCase):

  def test_normalizes(self):
    self.assertEqual(payment_service.parse_currency("USD"), "usd")
    self.assertEqual(payment_service.parse_currency(None), "usd")
    self.assertEqual(payment_service.parse_currency(" eur "), "eur")

  def test_rejects_unknown_shapes(self):
    for currency in ("us", "dollars", "12a"):
      with self.subTest(currency=currency):
        with self.assertRaises(InvalidRequestError):
          payment_service.parse_currency(currency)


class PaymentServiceTest(absltest.TestCase):

  def setUp(self):
    super().setUp()
    self.processor = processors.MockProcessor()
    self.service = payment_service.PaymentService(self.processor)

  def test_create_payment_intent(self):
    response = asyncio.run(
        self.service.create_payment_intent(
            CreatePaymentIntentRequest(amount=5000, currency="usd")
        )
    )

    self.assertStartsWith(response.payment_intent_id, "pi_")
    self.assertIn("_secret_", response.client_secret)
    self.assertEqual(
        response.model_dump(by_alias=True),
        {
            "clientSecret": response.client_secret,
            "paymentIntentId": response.payment_intent_id,
        },
    )

  def test_invalid_amount_skips_processor(self):
    with self.assertRaises(InvalidAmountError):
      asyncio.run(
          self.service.create_payment_intent(
              CreatePaymentIntentRequest(amount=0)
          )
      )
    self.assertEqual(self.processor.create_calls, 0)

  def test_processor_error_is_wrapped(self):
    self.processor.fail_with = "Processor outage"

    with self.assertRaises(PaymentProcessorError) as cm:
      asyncio.run(
          self.service.create_payment_intent(
              CreatePaymentIntentRequest(amount=100)
          )
      )
    self.assertEqual(cm.exception.message, "Processor outage")
    self.assertEqual(cm.exception.status_code, 500)

  def test_idempotency_conflict(self):
    asyncio.run(
        self.service.create_payment_intent(
            CreatePaymentIntentRequest(amount=100), idempotency_key="k"
        )
    )

    with self.assertRaises(IdempotencyConflictError):
      asyncio.run(
          self.service.create_payment_intent(
              CreatePaymentIntentRequest(amount=200), idempotency_key="k"
          )
      )

  def test_refund_payment(self):
    created = asyncio.run(
        self.service.create_payment_intent(
            CreatePaymentIntentRequest(amount=750)
        )
    )

    response = asyncio.run(
        self.service.refund_payment(
            RefundPaymentRequest(payment_intent_id=created.payment_intent_id)
        )
    )

    self.assertTrue(response.success)
    self.assertEqual(response.refund.amount, 750)
    self.assertEqual(
        response.refund.payment_intent_id, created.payment_intent_id
    )

  def test_refund_requires_intent_id(self):
    with self.assertRaises(MissingIntentIdError):
      asyncio.run(self.service.refund_payment(RefundPaymentRequest()))
    self.assertEqual(self.processor.refund_calls, 0)


class BuildProcessorTest(absltest.TestCase):

  def test_builds_mock(self):
    processor = processors.build_processor(
        "mock", payment_method_types=["card"]
    )
    self.assertIsInstance(processor, processors.MockProcessor)

  def test_stripe_requires_key(self):
    with self.assertRaises(ValueError):
      processors.build_processor("stripe")

  def test_unknown_processor(self):
    with self.assertRaises(ValueError):
      processors.build_processor("paypal")


class StripeProcessorTest(absltest.TestCase):

  def setUp(self):
    super().setUp()
    self.client = mock.MagicMock()
    self.client.payment_intents.create_async = mock.AsyncMock(
        return_value=SimpleNamespace(
            id="pi_123",
            client_secret="pi_123_secret_abc",
            amount=1000,
            currency="usd",
            status="requires_payment_method",
            capture_method="automatic",
            payment_method_types=["card"],
        )
    )
    self.client.refunds.create_async = mock.AsyncMock(
        return_value=SimpleNamespace(
            id="re_123",
            payment_intent="pi_123",
            amount=1000,
            currency="usd",
            status="succeeded",
        )
    )
    self.processor = processors.StripeProcessor(
        api_key="", payment_method_types=["card"], client=self.client
    )

  def test_create_payment_intent_forwards_idempotency_key(self):
    intent = asyncio.run(
        self.processor.create_payment_intent(1000, "usd", "session-1000-usd")
    )

    self.assertEqual(intent.id, "pi_123")
    self.client.payment_intents.create_async.assert_awaited_once_with(
        params={
            "amount": 1000,
            "currency": "usd",
            "payment_method_types": ["card"],
            "capture_method": "automatic",
        },
        options={"idempotency_key": "session-1000-usd"},
    )

  def test_create_payment_intent_error(self):
    self.client.payment_intents.create_async.side_effect = (
        stripe.InvalidRequestError("Amount must be at least 50 cents", "amount")
    )

    with self.assertRaises(processors.ProcessorError) as cm:
      asyncio.run(self.processor.create_payment_intent(10, "usd"))
    self.assertEqual(cm.exception.message, "Amount must be at least 50 cents")

  def test_idempotency_error(self):
    self.client.payment_intents.create_async.side_effect = (
        stripe.IdempotencyError("Keys for idempotent requests can only be used")
    )

    with self.assertRaises(processors.ProcessorIdempotencyError):
      asyncio.run(self.processor.create_payment_intent(10, "usd", "key"))

  def test_refund_payment(self):
    refund = asyncio.run(self.processor.refund_payment("pi_123"))

    self.assertEqual(refund.id, "re_123")
    self.assertEqual(refund.payment_intent_id, "pi_123")
    self.client.refunds.create_async.assert_awaited_once_with(
        params={"payment_intent": "pi_123"}
    )


if __name__ == "__main__":
  absltest.main()
