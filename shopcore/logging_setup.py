import logging

import structlog


def configure_logging(level: int = logging.INFO) -> None:
    """JSON-логи structlog в stdout: уровень, ISO-время, событие и контекст"""
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
    )
