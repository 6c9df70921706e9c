"""OpenTelemetry tracing decorators."""

import asyncio
import functools
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, TypeVar

from opentelemetry import trace
from opentelemetry.trace import Span

from menu_customization_service.observability.config import DEFAULT_SERVICE_NAME

# Type variable for generic function signatures
F = TypeVar("F", bound=Callable[..., Any])


def traced(span_name: str | None = None, service_name: str = DEFAULT_SERVICE_NAME) -> Callable[[F], F]:
    """Decorator that runs a function inside an OpenTelemetry span.

    Records success, and on failure the exception type and message, as span
    attributes. Both plain and async functions are supported.

    Args:
        span_name: Name for the span (defaults to the function name)
        service_name: Service name used for the tracer and span attributes

    Returns:
        Decorated function with tracing

    Example:
        @traced("menu.break_inheritance")
        def break_inheritance(self, dish_id: str) -> DetachResult:
            ...
    """

    def decorator(func: F) -> F:
        name = span_name or func.__name__
        tracer = trace.get_tracer(service_name)

        @contextmanager
        def span_for_call() -> Iterator[Span]:
            with tracer.start_as_current_span(name) as span:
                span.set_attribute("service.name", service_name)
                if span_name:
                    span.set_attribute("function.name", func.__name__)
                try:
                    yield span
                    span.set_attribute("success", True)
                except Exception as e:
                    span.set_attribute("success", False)
                    span.set_attribute("error.type", type(e).__name__)
                    span.set_attribute("error.message", str(e))
                    span.record_exception(e)
                    raise

        @functools.wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            with span_for_call():
                return await func(*args, **kwargs)

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            with span_for_call():
                return func(*args, **kwargs)

        if asyncio.iscoroutinefunction(func):
            return async_wrapper  # type: ignore
        return sync_wrapper  # type: ignore

    return decorator
