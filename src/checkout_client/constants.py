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

"""Checkout constants. Amounts are in minor units (cents)."""

from decimal import Decimal

TAX_RATE = Decimal("0.08")
FREE_SHIPPING_THRESHOLD = 10000
STANDARD_SHIPPING_FEE = 1000
EXPRESS_SHIPPING_FEE = 8000

DEFAULT_CURRENCY = "usd"
DEFAULT_COUNTRY = "United States"

MERCHANT_NAME = "Your Store Name"
MERCHANT_COUNTRY_CODE = "US"

WALLET_DISPLAY_NAME = "Google Pay"
CARD_DISPLAY_TEMPLATE = "Credit Card (ending in {last4})"

SUCCESS_ROUTE = "/"

BACKEND_URL_ENV = "CHECKOUT_BACKEND_URL"
DEFAULT_BACKEND_URL = "http://localhost:5000"

# Seconds.
HTTP_TIMEOUT = 15.0
PAYMENT_TIMEOUT = 30.0
