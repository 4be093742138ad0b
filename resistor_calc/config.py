"""
Search defaults, overridable through environment variables.

    RCALC_WORKERS           scoring threads per search (default 1)
    RCALC_CHUNK_SIZE        combinations scored per chunk (default 65536)
    RCALC_TOP_K             results shown by the CLI and API (default 10)
    RCALC_MAX_COMBINATIONS  largest search the HTTP API accepts (default 5,000,000)
"""

import os


def _env_int(name: str, default: int, minimum: int = 1) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}")
    return value


DEFAULT_WORKERS: int = _env_int('RCALC_WORKERS', 1)

DEFAULT_CHUNK_SIZE: int = _env_int('RCALC_CHUNK_SIZE', 65536)

DEFAULT_TOP_K: int = _env_int('RCALC_TOP_K', 10)

MAX_API_COMBINATIONS: int = _env_int('RCALC_MAX_COMBINATIONS', 5_000_000)
