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

"""Utility script to dump the payment request log from the database.

This script reads and displays the requests stored in the transactions DB by
the payment server: timestamp, method, URL, payment intent and payload of each.
It can optionally be narrowed down to a single payment intent.

Usage:
  payment-log-dump --transactions_db_path=... [--payment_intent_id=pi_...]
"""

import asyncio
import json
import sys

from absl import app as absl_app
from absl import flags

from . import config  # pylint: disable=unused-import
from . import db

FLAGS = flags.FLAGS
flags.DEFINE_string(
    "payment_intent_id", None, "Only show requests for this payment intent"
)


def format_entry(log: db.RequestLog) -> str:
  """Renders one request log row for the terminal."""
  lines = [f"[{log.timestamp}] {log.method} {log.url}"]
  if log.payment_intent_id:
    lines.append(f"  Payment Intent: {log.payment_intent_id}")
  if log.payload:
    lines.append(f"  Payload: {json.dumps(log.payload, indent=2)}")
  lines.append("-" * 40)
  return "\n".join(lines)


async def dump_logs() -> None:
  """Queries the database and prints request logs."""
  if not FLAGS.transactions_db_path:
    print("Error: --transactions_db_path is required.")
    sys.exit(1)

  await db.store.open(FLAGS.transactions_db_path)
  try:
    async with db.store.session_factory() as session:
      print("=== PAYMENT REQUEST LOGS ===")
      logs = await db.list_request_logs(session, FLAGS.payment_intent_id)
      if not logs:
        print("No request logs found.")
        return
      for log in logs:
        print(format_entry(log))
  finally:
    await db.store.close()


def main(argv):
  """Main entry point for the log dump script."""
  del argv
  asyncio.run(dump_logs())


def run() -> None:
  absl_app.run(main)


if __name__ == "__main__":
  run()
