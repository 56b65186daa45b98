"""Structured logging for the API process and the market-data client.

structlog is routed through stdlib logging so uvicorn and ccxt records share
the same renderer. Per-request fields (request id, path) are carried in
structlog contextvars and merged into every event logged while the request
is being handled.
"""

import logging
import os
import uuid

import structlog

# Third-party loggers that are chatty at DEBUG/INFO.
NOISY_LOGGERS = ("ccxt", "ccxt.base.exchange", "uvicorn.access", "asyncio")


def _select_renderer(log_format: str) -> structlog.types.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def setup_logging(log_level: str = "INFO") -> None:
    """Configure structlog over stdlib logging.

    Rendering format is controlled by the LOG_FORMAT environment variable:
    - "json" for deployed instances (one event per line)
    - "console" for local development (default)
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    renderer = _select_renderer(os.environ.get("LOG_FORMAT", "console").lower())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, level))


def bind_request_context(path: str, request_id: str | None = None) -> str:
    """Attach request fields to every event logged in the current context.

    Returns the request id (generated when not supplied).
    """
    request_id = request_id or uuid.uuid4().hex[:12]
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=request_id, path=path)
    return request_id


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a bound structlog logger with the given name."""
    return structlog.get_logger(name)
