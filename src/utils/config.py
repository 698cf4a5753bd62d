"""Environment-backed service configuration."""

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Mapping


DEFAULT_HOST = '0.0.0.0'
DEFAULT_PORT = 8000
DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_BCRYPT_ROUNDS = 12

REQUIRED_VARS = ('API_MONGO_URI', 'API_MONGO_DB_NAME')


class ConfigError(ValueError):
    """Raised when the environment does not describe a usable configuration."""


@dataclass(frozen=True)
class Settings:
    mongo_uri: str
    mongo_db_name: str
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    bcrypt_rounds: int = DEFAULT_BCRYPT_ROUNDS


def _parse_number(environ: Mapping[str, str], name: str, default, cast, problems: list[str]):
    raw = environ.get(name, '').strip()
    if not raw:
        return default
    try:
        value = cast(raw)
    except ValueError:
        problems.append(f"{name} must be a number, got {raw!r}")
        return default
    if value <= 0:
        problems.append(f"{name} must be positive, got {raw!r}")
        return default
    return value


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from environment variables.

    Args:
        environ: Mapping to read from (defaults to ``os.environ``)

    Returns:
        Validated Settings

    Raises:
        ConfigError: if a required variable is missing or a number is malformed
    """
    if environ is None:
        environ = os.environ

    problems = [
        f"{name} is required"
        for name in REQUIRED_VARS
        if not environ.get(name, '').strip()
    ]

    port = _parse_number(environ, 'API_PORT', DEFAULT_PORT, int, problems)
    request_timeout = _parse_number(
        environ, 'API_REQUEST_TIMEOUT', DEFAULT_REQUEST_TIMEOUT, float, problems
    )
    bcrypt_rounds = _parse_number(environ, 'BCRYPT_ROUNDS', DEFAULT_BCRYPT_ROUNDS, int, problems)
    if not 4 <= bcrypt_rounds <= 31:
        problems.append(f"BCRYPT_ROUNDS must be between 4 and 31, got {bcrypt_rounds}")
        bcrypt_rounds = DEFAULT_BCRYPT_ROUNDS

    if problems:
        raise ConfigError("invalid configuration: " + "; ".join(problems))

    return Settings(
        mongo_uri=environ['API_MONGO_URI'].strip(),
        mongo_db_name=environ['API_MONGO_DB_NAME'].strip(),
        host=environ.get('API_HOST', '').strip() or DEFAULT_HOST,
        port=port,
        request_timeout=request_timeout,
        bcrypt_rounds=bcrypt_rounds,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return process-wide Settings, loaded once from ``os.environ``."""
    return load_settings()
