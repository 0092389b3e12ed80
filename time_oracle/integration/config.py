"""
Oracle host configuration.

Sources, in increasing precedence:
1. dataclass defaults
2. an optional YAML file (schema `time-oracle/config/v1`)
3. environment variables

YAML shape problems fail closed with `ConfigError`. Malformed or out-of-range
integer environment values fall back to the default or are clamped, the same
way the API server always treated its env knobs.

Example file:

    schema: time-oracle/config/v1
    owner: "0x1111111111111111111111111111111111111111"
    updaters:
      - "0x2222222222222222222222222222222222222222"
    validation:
      enabled: true
      drift_margin_bps: 200
    api:
      host: 127.0.0.1
      port: 8000
      cors_origins: ["https://dash.example"]
      rate_limit_rpm: 600
      accept_writes: false
    logging:
      level: INFO
      format: json
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, FrozenSet, Mapping, Optional, Tuple

import yaml

from ..core.types import BPS_DENOMINATOR, DEFAULT_DRIFT_MARGIN_BPS


CONFIG_SCHEMA = "time-oracle/config/v1"
CONFIG_PATH_ENV = "TIME_ORACLE_CONFIG"

_TRUE_STRINGS = frozenset({"1", "true", "yes", "on"})
_FALSE_STRINGS = frozenset({"0", "false", "no", "off"})


class ConfigError(ValueError):
    """Raised for an unreadable or malformed configuration file."""


@dataclass(frozen=True)
class OracleConfig:
    # Authority
    owner: Optional[str] = None
    updaters: Tuple[str, ...] = ()

    # Validation policy (strict by default; disable to reproduce permissive acceptance)
    validation_enabled: bool = True
    drift_margin_bps: int = DEFAULT_DRIFT_MARGIN_BPS

    # HTTP surface
    api_host: str = "127.0.0.1"
    api_port: int = 8000
    cors_origins: FrozenSet[str] = field(default_factory=frozenset)
    rate_limit_rpm: int = 600
    # Writes over HTTP trust `principal_header` as set by an authenticating gateway.
    accept_writes: bool = False
    principal_header: str = "X-Authenticated-Principal"

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"


def _env_int(environ: Mapping[str, str], name: str, default: int, *, lo: int, hi: int) -> int:
    raw = environ.get(name)
    if raw is None or not raw.strip():
        return int(default)
    try:
        v = int(raw.strip())
    except ValueError:
        return int(default)
    if v < lo:
        return int(lo)
    if v > hi:
        return int(hi)
    return int(v)


def _env_str(environ: Mapping[str, str], name: str, default: str) -> str:
    raw = environ.get(name)
    if raw is None:
        return default
    v = raw.strip()
    return v if v else default


def _env_bool(environ: Mapping[str, str], name: str, default: bool) -> bool:
    raw = environ.get(name)
    if raw is None or not raw.strip():
        return default
    v = raw.strip().lower()
    if v in _TRUE_STRINGS:
        return True
    if v in _FALSE_STRINGS:
        return False
    return default


def _split_csv(value: str) -> Tuple[str, ...]:
    return tuple(item.strip() for item in (value or "").split(",") if item.strip())


def parse_cors_origins(value: str) -> FrozenSet[str]:
    """
    Parse CORS origins list. Supports comma-separated values.

    Default is empty (deny CORS). '*' is treated as unsafe and ignored, which
    forces operators to list trusted origins.
    """
    return frozenset(origin for origin in _split_csv(value) if origin != "*")


def _require_mapping(obj: Any, *, name: str) -> dict[str, Any]:
    if not isinstance(obj, dict):
        raise ConfigError(f"{name} must be a mapping")
    return obj


def _optional_mapping(root: Mapping[str, Any], key: str) -> dict[str, Any]:
    val = root.get(key)
    if val is None:
        return {}
    return _require_mapping(val, name=key)


def _require_str(obj: Any, *, name: str) -> str:
    if not isinstance(obj, str) or not obj.strip():
        raise ConfigError(f"{name} must be a non-empty string")
    return obj.strip()


def _require_int(obj: Any, *, name: str, lo: int, hi: int) -> int:
    if not isinstance(obj, int) or isinstance(obj, bool):
        raise ConfigError(f"{name} must be an integer")
    if obj < lo or obj > hi:
        raise ConfigError(f"{name} must be in [{lo}, {hi}]")
    return obj


def _require_bool(obj: Any, *, name: str) -> bool:
    if not isinstance(obj, bool):
        raise ConfigError(f"{name} must be a boolean")
    return obj


def _require_str_list(obj: Any, *, name: str) -> Tuple[str, ...]:
    if not isinstance(obj, list):
        raise ConfigError(f"{name} must be a list")
    return tuple(_require_str(item, name=f"{name}[{i}]") for i, item in enumerate(obj))


def config_from_mapping(root_obj: Any, *, base: OracleConfig = OracleConfig()) -> OracleConfig:
    """Apply a parsed YAML document on top of `base`."""
    root = _require_mapping(root_obj, name="config")

    schema = root.get("schema", CONFIG_SCHEMA)
    if schema != CONFIG_SCHEMA:
        raise ConfigError(f"unsupported config schema: {schema!r}")

    updates: dict[str, Any] = {}
    if root.get("owner") is not None:
        updates["owner"] = _require_str(root["owner"], name="owner")
    if root.get("updaters") is not None:
        updates["updaters"] = _require_str_list(root["updaters"], name="updaters")

    validation = _optional_mapping(root, "validation")
    if "enabled" in validation:
        updates["validation_enabled"] = _require_bool(validation["enabled"], name="validation.enabled")
    if "drift_margin_bps" in validation:
        updates["drift_margin_bps"] = _require_int(
            validation["drift_margin_bps"], name="validation.drift_margin_bps", lo=0, hi=BPS_DENOMINATOR,
        )

    api = _optional_mapping(root, "api")
    if "host" in api:
        updates["api_host"] = _require_str(api["host"], name="api.host")
    if "port" in api:
        updates["api_port"] = _require_int(api["port"], name="api.port", lo=0, hi=65535)
    if "cors_origins" in api:
        origins = _require_str_list(api["cors_origins"], name="api.cors_origins")
        updates["cors_origins"] = frozenset(o for o in origins if o != "*")
    if "rate_limit_rpm" in api:
        updates["rate_limit_rpm"] = _require_int(api["rate_limit_rpm"], name="api.rate_limit_rpm", lo=0, hi=1_000_000)
    if "accept_writes" in api:
        updates["accept_writes"] = _require_bool(api["accept_writes"], name="api.accept_writes")
    if "principal_header" in api:
        updates["principal_header"] = _require_str(api["principal_header"], name="api.principal_header")

    logging_cfg = _optional_mapping(root, "logging")
    if "level" in logging_cfg:
        updates["log_level"] = _require_str(logging_cfg["level"], name="logging.level").upper()
    if "format" in logging_cfg:
        fmt = _require_str(logging_cfg["format"], name="logging.format")
        if fmt not in ("json", "text"):
            raise ConfigError("logging.format must be 'json' or 'text'")
        updates["log_format"] = fmt

    return replace(base, **updates)


def load_config_file(path: Path, *, base: OracleConfig = OracleConfig()) -> OracleConfig:
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"cannot read config file {path}: {exc}") from exc
    try:
        doc = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML in {path}: {exc}") from exc
    if doc is None:
        return base
    return config_from_mapping(doc, base=base)


def apply_env(config: OracleConfig, environ: Mapping[str, str]) -> OracleConfig:
    """Overlay environment variables on `config`."""
    owner = _env_str(environ, "TIME_ORACLE_OWNER", config.owner or "")
    updaters_raw = environ.get("TIME_ORACLE_UPDATERS")
    log_format = _env_str(environ, "LOG_FORMAT", config.log_format)
    return replace(
        config,
        owner=owner or None,
        updaters=_split_csv(updaters_raw) if updaters_raw is not None else config.updaters,
        validation_enabled=_env_bool(environ, "TIME_ORACLE_VALIDATION", config.validation_enabled),
        drift_margin_bps=_env_int(
            environ, "TIME_ORACLE_DRIFT_MARGIN_BPS", config.drift_margin_bps, lo=0, hi=BPS_DENOMINATOR,
        ),
        api_host=_env_str(environ, "API_HOST", config.api_host),
        api_port=_env_int(environ, "API_PORT", config.api_port, lo=0, hi=65535),
        cors_origins=(
            parse_cors_origins(environ["CORS_ORIGINS"]) if environ.get("CORS_ORIGINS") else config.cors_origins
        ),
        rate_limit_rpm=_env_int(environ, "RATE_LIMIT_RPM", config.rate_limit_rpm, lo=0, hi=1_000_000),
        accept_writes=_env_bool(environ, "TIME_ORACLE_ACCEPT_WRITES", config.accept_writes),
        log_level=_env_str(environ, "LOG_LEVEL", config.log_level).upper(),
        log_format=log_format if log_format in ("json", "text") else config.log_format,
    )


def load_config(path: Optional[Path] = None, *, environ: Optional[Mapping[str, str]] = None) -> OracleConfig:
    """Load defaults, then the YAML file (explicit path or $TIME_ORACLE_CONFIG), then env."""
    env = os.environ if environ is None else environ
    config = OracleConfig()
    file_path = path if path is not None else (Path(env[CONFIG_PATH_ENV]) if env.get(CONFIG_PATH_ENV) else None)
    if file_path is not None:
        config = load_config_file(file_path, base=config)
    return apply_env(config, env)
