"""
Imperative shell for the time oracle: host, codec, config, logging, HTTP
"""

from .calldata import (
    UPDATE_TIMESTAMP_SELECTOR,
    UPDATE_TIMESTAMP_SIGNATURE,
    decode_update_timestamp,
    encode_update_timestamp,
)
from .config import ConfigError, OracleConfig, load_config
from .observability import setup_logging
from .oracle_engine import TimeOracle, system_clock

__all__ = [
    "UPDATE_TIMESTAMP_SELECTOR",
    "UPDATE_TIMESTAMP_SIGNATURE",
    "decode_update_timestamp",
    "encode_update_timestamp",
    "ConfigError",
    "OracleConfig",
    "load_config",
    "setup_logging",
    "TimeOracle",
    "system_clock",
]
