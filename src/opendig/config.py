from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

"""
Process-wide configuration.

Everything is read from the environment once at startup and never mutated:
  BIND_PATH            dig binary (default "dig", resolved through PATH)
  DEFAULT_DNS          server passed as @server to every query
  DEBUG                "true" turns on debug logging (commands + parse results)
  DIG_TIMEOUT          value for dig's own +timeout (seconds)
  DIG_PROCESS_TIMEOUT  hard deadline for the dig process (seconds)
  DIG_MAX_CONCURRENCY  cap on parallel dig processes during fan-out (0 = no cap)
  SUBNETS_FILE         optional JSON file replacing the built-in subnet registry
"""

DEFAULT_DIG_PATH = "dig"
DEFAULT_DNS_SERVER = "223.5.5.5"


def _env_float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = (env.get(key) or "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{key} must be a number, got {raw!r}")
    if value <= 0:
        raise ValueError(f"{key} must be positive, got {raw!r}")
    return value


def _env_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = (env.get(key) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{key} must be an integer, got {raw!r}")
    if value < 0:
        raise ValueError(f"{key} must be >= 0, got {raw!r}")
    return value


@dataclass(frozen=True)
class Settings:
    dig_path: str = DEFAULT_DIG_PATH
    default_server: str = DEFAULT_DNS_SERVER
    debug: bool = False
    query_timeout: float = 3.0
    process_timeout: float = 10.0
    max_concurrency: int = 0
    subnets_file: Optional[str] = None

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if env is None else env
        return cls(
            dig_path=(env.get("BIND_PATH") or "").strip() or DEFAULT_DIG_PATH,
            default_server=(env.get("DEFAULT_DNS") or "").strip() or DEFAULT_DNS_SERVER,
            debug=(env.get("DEBUG") or "").strip().lower() == "true",
            query_timeout=_env_float(env, "DIG_TIMEOUT", 3.0),
            process_timeout=_env_float(env, "DIG_PROCESS_TIMEOUT", 10.0),
            max_concurrency=_env_int(env, "DIG_MAX_CONCURRENCY", 0),
            subnets_file=(env.get("SUBNETS_FILE") or "").strip() or None,
        )
