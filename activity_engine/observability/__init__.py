"""
Observability module: structured logging and request/evaluation context.

Usage:
    from activity_engine.observability import get_logger, RequestContext

    logger = get_logger(__name__)
    logger.warning("Skipping row", extra={"kind": "task"})

    with RequestContext() as ctx:
        logger.info("Snapshot built", extra={"total": 12})
"""

from .context import (
    EvaluationContext,
    RequestContext,
    generate_request_id,
    get_evaluated_at,
    get_request_id,
    set_request_id,
)
from .logging import HumanFormatter, JSONFormatter, configure_from_settings, configure_logging, get_logger
from .middleware import CorrelationIdMiddleware

__all__ = [
    # Logging
    "get_logger",
    "configure_logging",
    "configure_from_settings",
    "JSONFormatter",
    "HumanFormatter",
    # Context
    "RequestContext",
    "EvaluationContext",
    "generate_request_id",
    "get_request_id",
    "set_request_id",
    "get_evaluated_at",
    # Middleware
    "CorrelationIdMiddleware",
]
