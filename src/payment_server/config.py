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

"""Shared configuration and startup logic for the payment server.

Flags default to environment variables (a `.env` file in the working directory
is loaded first), so the server can be configured either way.
"""

import contextlib
from importlib import metadata
import os

from absl import flags
from dotenv import load_dotenv
from fastapi import FastAPI

from . import db
from .enums import ProcessorName
from .services import processors

load_dotenv()

FLAGS = flags.FLAGS

DISTRIBUTION_NAME = "storefront-checkout"

_SERVER_VERSION_CACHE = None


def get_server_version() -> str:
  """Reads and caches the server version from the installed distribution."""
  global _SERVER_VERSION_CACHE
  if _SERVER_VERSION_CACHE:
    return _SERVER_VERSION_CACHE

  try:
    _SERVER_VERSION_CACHE = metadata.version(DISTRIBUTION_NAME)
  except metadata.PackageNotFoundError:
    # Running from a source checkout that was never installed.
    _SERVER_VERSION_CACHE = "0.0.0"
  return _SERVER_VERSION_CACHE


# Define flags only if they haven't been defined yet (to avoid duplicates
# during tests or re-imports)
try:
  flags.DEFINE_string("host", "0.0.0.0", "Interface to bind the server to")
  flags.DEFINE_integer(
      "port", int(os.environ.get("PORT", "5000")), "Port to run the server on"
  )
  flags.DEFINE_enum(
      "processor",
      os.environ.get("PAYMENT_PROCESSOR", ProcessorName.STRIPE.value),
      [p.value for p in ProcessorName],
      "Payment processor backing the payment intents",
  )
  flags.DEFINE_string(
      "stripe_secret_key",
      os.environ.get("STRIPE_SECRET_KEY"),
      "Stripe secret API key",
  )
  flags.DEFINE_list(
      "payment_method_types",
      list(processors.DEFAULT_PAYMENT_METHOD_TYPES),
      "Payment method types allowed on created payment intents",
  )
  flags.DEFINE_string(
      "transactions_db_path",
      os.environ.get("TRANSACTIONS_DB_PATH"),
      "Path to the SQLite request log DB (request logging is off when unset)",
  )
except flags.DuplicateFlagError:
  pass


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
  """Builds the payment processor and opens the request log DB."""
  app.state.processor = processors.build_processor(
      FLAGS.processor,
      stripe_secret_key=FLAGS.stripe_secret_key,
      payment_method_types=FLAGS.payment_method_types,
  )
  if FLAGS.transactions_db_path:
    await db.store.open(FLAGS.transactions_db_path)
  yield
  await db.store.close()
