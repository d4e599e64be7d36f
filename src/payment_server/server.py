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

"""Storefront Payment Server (Python/FastAPI)."""

import logging
import sys
import time
from typing import Sequence

from absl import app as absl_app
from fastapi import FastAPI
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn

from . import config
from .enums import ProcessorName
from .exceptions import PaymentServiceError
from .routes.payments import router as payments_router

# --- App Setup ---

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Storefront Payment Service",
    version=config.get_server_version(),
    description="Creates and refunds payment intents for the storefront app",
    lifespan=config.lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
  """Logs method, path, status and latency of every request."""
  started = time.perf_counter()
  response = await call_next(request)
  logger.info(
      "%s %s %d %.1f ms",
      request.method,
      request.url.path,
      response.status_code,
      (time.perf_counter() - started) * 1000,
  )
  return response


@app.exception_handler(PaymentServiceError)
async def payment_exception_handler(request: Request, exc: PaymentServiceError):
  """Handles payment service exceptions and converts them to JSON responses."""
  del request  # Unused.
  return JSONResponse(
      status_code=exc.status_code,
      content={"error": exc.message, "code": exc.code},
  )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
):
  """Reports malformed request bodies in the same shape as service errors."""
  del request  # Unused.
  errors = exc.errors()
  message = errors[0].get("msg") if errors else "Malformed request body"
  return JSONResponse(
      status_code=400,
      content={"error": message, "code": "INVALID_REQUEST"},
  )


@app.get("/")
async def root() -> dict[str, str]:
  return {"message": "Payment server is running"}


app.include_router(payments_router)


def main(argv: Sequence[str]) -> None:
  """Main entry point for the payment server."""
  del argv  # Unused.

  if (
      config.FLAGS.processor == ProcessorName.STRIPE.value
      and not config.FLAGS.stripe_secret_key
  ):
    logger.error(
        "--stripe_secret_key (or STRIPE_SECRET_KEY) must be provided when"
        " --processor=stripe."
    )
    print("\nUsage:")
    print(config.FLAGS.main_module_help())
    sys.exit(1)

  logger.info("Server listening on port %d", config.FLAGS.port)
  uvicorn.run(app, host=config.FLAGS.host, port=config.FLAGS.port)


def run() -> None:
  absl_app.run(main)


if __name__ == "__main__":
  run()
