#!/usr/bin/env python3

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from time_oracle.core.errors import OracleError
from time_oracle.integration.calldata import encode_update_timestamp
from time_oracle.integration.observability import setup_logging
from time_oracle.integration.oracle_engine import TimeOracle


OWNER = "0x" + "aa" * 20
UPDATER = "0x" + "bb" * 20


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run the owner/updater/pause scenario against an in-process oracle.")
    parser.add_argument("--log-format", choices=("json", "text"), default="text")
    parser.add_argument("--max-age", type=int, default=300, help="staleness window in seconds")
    args = parser.parse_args(argv)

    setup_logging("INFO", args.log_format)

    oracle = TimeOracle(OWNER)
    oracle.subscribe(lambda effect: print(f"[offline-demo] event {effect.event.value} account={effect.account} ts={effect.timestamp}"))
    print(f"[offline-demo] constructed latest={oracle.latest()} last_update_time={oracle.last_update_time()}")

    oracle.add_authorized_updater(OWNER, UPDATER)

    now_ms = int(time.time() * 1000)
    oracle.submit_calldata(UPDATER, encode_update_timestamp(now_ms))
    print(f"[offline-demo] latest={oracle.latest()} stale={oracle.is_stale(args.max_age)}")

    oracle.pause(OWNER)
    try:
        oracle.update(UPDATER, now_ms + 1)
    except OracleError as exc:
        print(f"[offline-demo] update while paused rejected: code={exc.code} retryable={exc.retryable}")
    else:
        print("[offline-demo] FAIL: update accepted while paused")
        return 1

    oracle.unpause(OWNER)
    oracle.update(UPDATER, now_ms + 1)
    print(f"[offline-demo] OK latest={oracle.latest()} digest={oracle.digest()}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
