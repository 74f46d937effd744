"""Observability – structlog configuration and logger helper."""
from route_authz.observability.logging.factory import JsonLoggerFactory, configure_logging
from route_authz.observability.logging.processors import get_logger

__all__ = ["JsonLoggerFactory", "configure_logging", "get_logger"]
