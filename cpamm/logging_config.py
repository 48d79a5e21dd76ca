"""structlog setup shared by the API and local scripts."""

import logging

import structlog


def configure_logging(level: str = "info", json: bool = False) -> None:
    """Configure structlog for the process.

    Args:
        level: Minimum level name ("debug", "info", "warning", ...)
        json: Render one JSON object per line instead of console output
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")

    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
    )
