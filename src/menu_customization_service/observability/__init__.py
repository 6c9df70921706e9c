"""Logging, tracing, and metrics for the menu customization service."""

from menu_customization_service.observability.config import configure_logging, setup_observability
from menu_customization_service.observability.decorators import traced

__all__ = ["setup_observability", "configure_logging", "traced"]
