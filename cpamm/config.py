"""Runtime configuration for the HTTP service."""

import os
from collections.abc import Mapping
from dataclasses import dataclass

_TRUE_VALUES = ("true", "1", "yes")


@dataclass(frozen=True)
class ApiConfig:
    """Settings for the API process, read from the environment.

    Attributes:
        host: Interface to bind (CPAMM_HOST, default 0.0.0.0)
        port: Port to bind (CPAMM_PORT, default 8000)
        debug: Enable auto-reload (CPAMM_DEBUG, default false)
        log_level: Minimum log level (CPAMM_LOG_LEVEL, default info)
        log_json: Emit JSON log lines instead of console output
            (CPAMM_LOG_JSON, default false)
    """

    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    log_level: str = "info"
    log_json: bool = False


def load_config(environ: Mapping[str, str] | None = None) -> ApiConfig:
    """Build an ApiConfig from environment variables.

    Raises:
        ValueError: If CPAMM_PORT is not an integer
    """
    env = os.environ if environ is None else environ
    return ApiConfig(
        host=env.get("CPAMM_HOST", "0.0.0.0"),
        port=int(env.get("CPAMM_PORT", "8000")),
        debug=env.get("CPAMM_DEBUG", "false").lower() in _TRUE_VALUES,
        log_level=env.get("CPAMM_LOG_LEVEL", "info").lower(),
        log_json=env.get("CPAMM_LOG_JSON", "false").lower() in _TRUE_VALUES,
    )


# Default configuration instance
DEFAULT_CONFIG = ApiConfig()
