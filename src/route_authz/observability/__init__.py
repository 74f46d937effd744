"""Observability – structured logging."""
from route_authz.observability.logging import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
