"""
HTTP surface for the time oracle.

Stdlib only. Read endpoints are open to any consumer:

    GET /health
    GET /latest                      -> {"timestamp": ...}
    GET /last_update_time            -> {"last_update_time": ...}
    GET /is_stale?max_age=<seconds>  -> {"stale": bool, "max_age": ...}
    GET /is_authorized?address=<a>   -> {"address": ..., "authorized": bool, "can_update": bool}
    GET /state                       -> full snapshot + digest

`POST /update` is disabled unless `accept_writes` is configured. When enabled,
the caller is the principal an authenticating gateway put in the configured
header; this server holds no keys and does not authenticate anyone itself.
The body is either JSON `{"value": <int>}` or raw `updateTimestamp(uint256)`
calldata (`application/octet-stream`).

Hardening:
- CORS only for configured origins, never a wildcard
- per-client-IP token bucket shared by reads and writes
- request line, header count and body size are bounded
"""

from __future__ import annotations

import argparse
import json
import logging
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple
from urllib.parse import parse_qs, urlsplit

from ..core.errors import (
    REJECT_INVARIANT,
    REJECT_NOT_OWNER,
    REJECT_PARAM_DOMAIN,
    REJECT_UNAUTHORIZED_UPDATER,
    REJECT_ZERO_PRINCIPAL,
    OracleError,
)
from ..core.state import state_digest, state_to_dict
from .config import OracleConfig, load_config
from .observability import setup_logging
from .oracle_engine import TimeOracle

logger = logging.getLogger(__name__)

MAX_BODY_BYTES = 4096

# Buckets idle this long are full again and can be forgotten.
_IDLE_BUCKET_SECONDS = 120.0

_STATUS_FOR_CODE = {
    REJECT_NOT_OWNER: 403,
    REJECT_UNAUTHORIZED_UPDATER: 403,
    REJECT_ZERO_PRINCIPAL: 400,
    REJECT_PARAM_DOMAIN: 400,
    REJECT_INVARIANT: 500,
    "calldata": 400,
}

Reply = Tuple[int, Dict[str, Any]]


class TokenBucketRateLimiter:
    """
    Per-key token bucket holding `rpm` tokens that refill continuously.

    Safe to share between handler threads. `rpm <= 0` disables limiting.
    """

    def __init__(self, *, rpm: int, clock: Callable[[], float] = time.monotonic) -> None:
        self._rpm = max(0, int(rpm))
        self._per_second = self._rpm / 60.0
        self._clock = clock
        self._lock = threading.Lock()
        # key -> (tokens, last refill time)
        self._buckets: Dict[str, Tuple[float, float]] = {}

    def allow(self, key: str) -> bool:
        if self._rpm == 0:
            return True
        now = self._clock()
        with self._lock:
            tokens, seen = self._buckets.get(key, (float(self._rpm), now))
            tokens = min(float(self._rpm), tokens + max(0.0, now - seen) * self._per_second)
            allowed = tokens >= 1.0
            self._buckets[key] = (tokens - 1.0 if allowed else tokens, now)
            if len(self._buckets) > 4096:
                self._evict_idle(now)
        return allowed

    def _evict_idle(self, now: float) -> None:
        stale = [k for k, (_, seen) in self._buckets.items() if now - seen > _IDLE_BUCKET_SECONDS]
        for k in stale:
            del self._buckets[k]


def status_for_error(exc: OracleError) -> int:
    # Paused and validation rejections are conflicts with current state.
    return _STATUS_FOR_CODE.get(exc.code, 409)


def _error(status: int, message: str) -> Reply:
    return status, {"ok": False, "error": message}


def _first(query: Dict[str, List[str]], name: str) -> str:
    return (query.get(name) or [""])[0]


def _get_health(oracle: TimeOracle, query: Dict[str, List[str]]) -> Reply:
    return 200, {"status": "healthy", "service": "time-oracle"}


def _get_latest(oracle: TimeOracle, query: Dict[str, List[str]]) -> Reply:
    return 200, {"timestamp": oracle.latest()}


def _get_last_update_time(oracle: TimeOracle, query: Dict[str, List[str]]) -> Reply:
    return 200, {"last_update_time": oracle.last_update_time()}


def _get_is_stale(oracle: TimeOracle, query: Dict[str, List[str]]) -> Reply:
    raw = _first(query, "max_age")
    # isdigit() alone admits non-ASCII digits such as "²" that int() rejects.
    if not (raw.isascii() and raw.isdigit()):
        return _error(400, "max_age must be a non-negative integer")
    max_age = int(raw)
    return 200, {"stale": oracle.is_stale(max_age), "max_age": max_age}


def _get_is_authorized(oracle: TimeOracle, query: Dict[str, List[str]]) -> Reply:
    address = _first(query, "address")
    if not address:
        return _error(400, "address is required")
    return 200, {
        "address": address,
        "authorized": oracle.is_authorized_updater(address),
        "can_update": oracle.can_update(address),
    }


def _get_state(oracle: TimeOracle, query: Dict[str, List[str]]) -> Reply:
    # One snapshot for both fields, so the digest always matches the body.
    snapshot = oracle.state
    body = state_to_dict(snapshot)
    body["digest"] = state_digest(snapshot)
    return 200, body


_GET_ROUTES: Dict[str, Callable[[TimeOracle, Dict[str, List[str]]], Reply]] = {
    "/health": _get_health,
    "/latest": _get_latest,
    "/last_update_time": _get_last_update_time,
    "/is_stale": _get_is_stale,
    "/is_authorized": _get_is_authorized,
    "/state": _get_state,
}


def _parse_update_body(body: bytes) -> Optional[int]:
    try:
        obj = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        return None
    if not isinstance(obj, dict):
        return None
    value = obj.get("value")
    if not isinstance(value, int) or isinstance(value, bool):
        return None
    return value


class OracleRequestHandler(BaseHTTPRequestHandler):
    server_version = "TimeOracleApi/1"

    # Bound request line / headers to avoid memory abuse.
    max_requestline = 8192
    max_headers = 100

    @property
    def oracle(self) -> TimeOracle:
        return getattr(self.server, "oracle")

    @property
    def config(self) -> OracleConfig:
        return getattr(self.server, "config")

    def _cors_origin(self) -> Optional[str]:
        origin = self.headers.get("Origin") or ""
        return origin if origin in self.config.cors_origins else None

    def _reply(self, status: int, obj: object) -> None:
        payload = json.dumps(obj, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json; charset=utf-8")
        self.send_header("Content-Length", str(len(payload)))
        self.send_header("Cache-Control", "no-store")
        origin = self._cors_origin()
        if origin is not None:
            self.send_header("Access-Control-Allow-Origin", origin)
            self.send_header("Vary", "Origin")
        self.end_headers()
        self.wfile.write(payload)

    def _throttled(self) -> bool:
        # The socket peer is the client; X-Forwarded-For is not trusted.
        limiter: TokenBucketRateLimiter = getattr(self.server, "rate_limiter")
        if limiter.allow(str(self.client_address[0])):
            return False
        self._reply(429, {"ok": False, "error": "rate_limited"})
        return True

    def do_OPTIONS(self) -> None:  # noqa: N802
        origin = self._cors_origin()
        self.send_response(204)
        if origin is not None:
            methods = "GET,POST,OPTIONS" if self.config.accept_writes else "GET,OPTIONS"
            headers = "Content-Type," + self.config.principal_header if self.config.accept_writes else "Content-Type"
            self.send_header("Access-Control-Allow-Origin", origin)
            self.send_header("Access-Control-Allow-Methods", methods)
            self.send_header("Access-Control-Allow-Headers", headers)
            self.send_header("Access-Control-Max-Age", "600")
            self.send_header("Vary", "Origin")
        self.end_headers()

    def do_GET(self) -> None:  # noqa: N802
        if self._throttled():
            return
        parts = urlsplit(self.path or "")
        route = _GET_ROUTES.get(parts.path)
        if route is None:
            self._reply(404, {"ok": False, "error": "not_found"})
            return
        status, body = route(self.oracle, parse_qs(parts.query))
        self._reply(status, body)

    def do_POST(self) -> None:  # noqa: N802
        if self._throttled():
            return
        status, body = self._handle_update()
        self._reply(status, body)

    def _handle_update(self) -> Reply:
        try:
            length = int(self.headers.get("Content-Length") or "0")
        except ValueError:
            length = -1
        if not 0 <= length <= MAX_BODY_BYTES:
            self.close_connection = True
            return _error(413, "invalid_body_size")
        # Drain the body before any other rejection so the connection closes cleanly.
        raw = self.rfile.read(length)

        if urlsplit(self.path or "").path != "/update" or not self.config.accept_writes:
            return _error(404, "not_found")
        caller = (self.headers.get(self.config.principal_header) or "").strip()
        if not caller:
            return _error(401, "missing_principal")

        try:
            if (self.headers.get("Content-Type") or "").startswith("application/octet-stream"):
                effect = self.oracle.submit_calldata(caller, raw)
            else:
                value = _parse_update_body(raw)
                if value is None:
                    return _error(400, 'body must be {"value": <int>}')
                effect = self.oracle.update(caller, value)
        except OracleError as exc:
            return status_for_error(exc), {
                "ok": False,
                "error": exc.code,
                "detail": str(exc),
                "retryable": exc.retryable,
            }
        return 200, {
            "ok": True,
            "event": effect.event.value,
            "timestamp": effect.timestamp,
            "updated_by": effect.updated_by,
        }

    def log_message(self, fmt: str, *args: object) -> None:
        # Path only: query strings carry caller-supplied addresses.
        logger.debug("%s %s => %s", self.command, (self.path or "").split("?", 1)[0], fmt % args if args else fmt)


def make_server(oracle: TimeOracle, config: OracleConfig) -> ThreadingHTTPServer:
    httpd = ThreadingHTTPServer((config.api_host, config.api_port), OracleRequestHandler)
    httpd.daemon_threads = True
    # Handlers reach the oracle and settings through the server instance.
    httpd.oracle = oracle  # type: ignore[attr-defined]
    httpd.config = config  # type: ignore[attr-defined]
    httpd.rate_limiter = TokenBucketRateLimiter(rpm=config.rate_limit_rpm)  # type: ignore[attr-defined]
    return httpd


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Serve the time oracle over HTTP.")
    parser.add_argument("--config", type=Path, default=None, help="YAML config file (schema time-oracle/config/v1)")
    args = parser.parse_args(argv)

    config = load_config(args.config)
    setup_logging(config.log_level, config.log_format)
    if not config.owner:
        logger.error("no owner configured; set TIME_ORACLE_OWNER or `owner:` in the config file")
        return 2

    oracle = TimeOracle.from_config(config)
    httpd = make_server(oracle, config)
    host, port = httpd.server_address[:2]
    logger.info(
        "time-oracle listening on http://%s:%s (cors_origins=%s, rpm=%d, accept_writes=%s)",
        host,
        port,
        sorted(config.cors_origins),
        config.rate_limit_rpm,
        config.accept_writes,
    )
    try:
        httpd.serve_forever()
    except KeyboardInterrupt:
        logger.info("shutting down")
    finally:
        httpd.server_close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
