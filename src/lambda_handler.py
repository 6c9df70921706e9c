"""AWS Lambda handler for API Gateway requests.

Wraps the FastAPI application from main.py with the Mangum ASGI adapter. The
application and adapter are created once per Lambda container and reused
across warm invocations.
"""

import logging
import os
from typing import Any

from mangum import Mangum

logger = logging.getLogger(__name__)

_mangum_handler: Mangum | None = None


def get_mangum_handler() -> Mangum:
    """Create or retrieve the cached Mangum adapter."""
    global _mangum_handler

    if _mangum_handler is None:
        # main builds the application at import time outside of tests
        import main

        _mangum_handler = Mangum(main.app, lifespan="off")
        logger.info("Lambda ASGI adapter initialized")

    return _mangum_handler


def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Route an API Gateway event to the FastAPI application.

    Args:
        event: The API Gateway event payload
        context: The Lambda context object

    Returns:
        API Gateway proxy response
    """
    handler = get_mangum_handler()
    response: dict[str, Any] = handler(event, context)
    return response


# Warm the container during cold start (skip in test mode)
if os.getenv("ENVIRONMENT") != "test":
    get_mangum_handler()
