"""structlog setup shared by the API process and the batch scripts.

Every entry, structlog or stdlib (uvicorn, SQLAlchemy), goes through one
processor chain and one renderer: JSON lines in production, colored console
output with DEBUG on. Entries carry the emitting service's name and, inside
a request, its X-Request-ID.
"""

import logging
import logging.config

import structlog
from asgi_correlation_id.context import correlation_id

# Third-party loggers that drown out the studio's own events at INFO
QUIET_LOGGERS = {
    "uvicorn.access": "WARNING",
    "sqlalchemy.engine": "WARNING",
}


def add_correlation_id(logger, method, event_dict):
    """Copy the current request's correlation id into the entry, if any."""
    cid = correlation_id.get(None)
    if cid:
        event_dict["correlation_id"] = cid
    return event_dict


def tag_service(service_name: str):
    """Processor adding service=<service_name> unless the call already set one."""

    def add_service(logger, method, event_dict):
        event_dict.setdefault("service", service_name)
        return event_dict

    return add_service


def shared_processors(service_name: str) -> list:
    """Processors applied to structlog and stdlib entries alike, before rendering."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_correlation_id,
        tag_service(service_name),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]


def build_logging_config(log_level: str, renderer, pre_chain: list) -> dict:
    """dictConfig for a single stdout handler rendering through structlog."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "studio": {
                "()": structlog.stdlib.ProcessorFormatter,
                "foreign_pre_chain": pre_chain,
                "processors": [
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    renderer,
                ],
            },
        },
        "handlers": {
            "stdout": {
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stdout",
                "formatter": "studio",
            },
        },
        "root": {"handlers": ["stdout"], "level": log_level},
        "loggers": {name: {"level": level} for name, level in QUIET_LOGGERS.items()},
    }


def configure_structlog(
    log_level: str = "INFO",
    json_logs: bool = True,
    service_name: str = "studio-backend",
) -> None:
    """Configure structlog and the stdlib root logger.

    Must run before other studio modules fetch their loggers, since
    cache_logger_on_first_use freezes the processor chain.

    Args:
        log_level: Root log level ("DEBUG", "INFO", "WARNING", "ERROR")
        json_logs: JSON output when True, ConsoleRenderer otherwise
        service_name: Value of the "service" key on every entry
    """
    pre_chain = shared_processors(service_name)
    renderer = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()

    logging.config.dictConfig(build_logging_config(log_level.upper(), renderer, pre_chain))

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
