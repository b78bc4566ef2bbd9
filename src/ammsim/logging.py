"""structlog setup for the simulator.

Every record, ours and uvicorn's, goes through one stdlib handler whose
``ProcessorFormatter`` renders either console lines or JSON objects.
The pacing and sampling tasks bind a ``task`` contextvar, so their
events can be told apart in a single stream.
"""

import logging
from typing import Literal

import structlog

LogFormat = Literal["console", "json"]

# uvicorn logs every feed request and WebSocket frame at INFO
_NOISY_LOGGERS = ("uvicorn.access",)


def _renderers(log_format: LogFormat) -> list[structlog.types.Processor]:
    if log_format == "json":
        return [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    if log_format == "console":
        return [structlog.dev.ConsoleRenderer()]
    raise ValueError(f"Unknown log format {log_format!r}, expected 'console' or 'json'")


def setup_logging(log_level: str = "INFO", log_format: LogFormat = "console") -> None:
    """Route structlog and stdlib logging through one formatted handler.

    Args:
        log_level: Root level name; unknown names fall back to INFO.
        log_format: ``"console"`` for humans, ``"json"`` for log shippers.

    Raises:
        ValueError: If ``log_format`` is not a known format.
    """
    renderers = _renderers(log_format)

    pre_chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    structlog.configure(
        processors=[
            *pre_chain,
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *renderers],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
