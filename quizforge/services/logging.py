"""
Structured logging setup and the request/timing helpers built on it
"""
import logging
import sys
import time
from functools import wraps
from typing import Callable, Optional

import structlog

from quizforge.config import LOG_LEVEL

# Third-party loggers that are too noisy at INFO
QUIET_LOGGERS = {
    "sqlalchemy": logging.WARNING,
    "multipart": logging.WARNING,
    "PIL": logging.WARNING,
    # pypdf warns about every malformed cross-reference table
    "pypdf": logging.ERROR,
}

SHARED_PROCESSORS = [
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.processors.UnicodeDecoder(),
]


def configure_logging(level: str = LOG_LEVEL):
    """Route structlog through stdlib logging and render every event as JSON"""
    structlog.configure(
        processors=SHARED_PROCESSORS + [structlog.processors.JSONRenderer()],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
    )
    for name, quiet_level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(quiet_level)


def get_logger(name: Optional[str] = None):
    return structlog.get_logger(name)


def log_performance(operation: str, summarize: Optional[Callable] = None):
    """
    Time a call and log its outcome under the "performance" logger.

    ``summarize`` maps the return value to extra fields for the completion
    event, e.g. the number of generated questions.
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            logger = get_logger("performance")
            started = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                logger.error(
                    "operation_failed",
                    operation=operation,
                    duration_seconds=round(time.perf_counter() - started, 4),
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise

            extra = summarize(result) if summarize else {}
            logger.info(
                "operation_completed",
                operation=operation,
                duration_seconds=round(time.perf_counter() - started, 4),
                **extra,
            )
            return result
        return wrapper
    return decorator


def request_fields(request) -> dict:
    return {
        "method": request.method,
        "path": request.url.path,
        "query": request.url.query or None,
        "client_ip": request.client.host if request.client else "unknown",
        "content_length": request.headers.get("content-length"),
    }


def log_api_request(request, response=None, error=None, duration: Optional[float] = None):
    """Log the start, completion or failure of one HTTP request"""
    logger = get_logger("api")
    fields = request_fields(request)

    if error is not None:
        logger.error("api_request_failed", error=str(error), status_code=getattr(error, "status_code", 500), **fields)
    elif response is not None:
        level = logger.warning if response.status_code >= 400 else logger.info
        level("api_request_completed", status_code=response.status_code, duration_seconds=duration, **fields)
    else:
        logger.debug("api_request_started", **fields)
