"""Main application entry point for the menu customization service.

This module provides the FastAPI application factory and configuration
for running the service locally or in production.
"""

import logging
import os
from typing import Any

import boto3
from fastapi import FastAPI

from menu_customization_service.auth.api_keys import parse_api_keys
from menu_customization_service.handlers.api_handler import create_app
from menu_customization_service.models.modifier_models import DEFAULT_CURRENCY
from menu_customization_service.observability import configure_logging, setup_observability
from menu_customization_service.repositories.menu_repositories import (
    DynamoDBMenuRepository,
    InMemoryMenuRepository,
    MenuRepository,
)
from menu_customization_service.services.menu_read_service import MenuReadService
from menu_customization_service.services.order_service import OrderPlacementService
from menu_customization_service.services.template_propagation_service import (
    TemplatePropagationService,
)

logger = logging.getLogger(__name__)


def get_dynamodb_resource() -> Any:
    """Create DynamoDB resource with appropriate configuration.

    Returns:
        Boto3 DynamoDB resource configured for environment
    """
    endpoint_url = os.getenv("DYNAMODB_ENDPOINT")
    region = os.getenv("AWS_REGION", "us-east-1")

    if endpoint_url:
        logger.info(f"Using local DynamoDB at {endpoint_url}")
        return boto3.resource(
            "dynamodb",
            endpoint_url=endpoint_url,
            region_name=region,
            aws_access_key_id=os.getenv("AWS_ACCESS_KEY_ID"),
            aws_secret_access_key=os.getenv("AWS_SECRET_ACCESS_KEY"),
        )

    logger.info(f"Using AWS DynamoDB in region {region}")
    # Production uses the default credential chain (IAM role, env vars, etc.)
    return boto3.resource("dynamodb", region_name=region)


def create_repository() -> MenuRepository:
    """Create the menu repository selected by MENU_STORAGE_BACKEND.

    Returns:
        In-memory repository for "memory", DynamoDB repository otherwise

    Raises:
        ValueError: If the backend name is not recognised
    """
    backend = os.getenv("MENU_STORAGE_BACKEND", "dynamodb").lower()

    if backend == "memory":
        logger.warning("Using in-memory menu storage, data is lost on restart")
        return InMemoryMenuRepository()

    if backend != "dynamodb":
        raise ValueError(f"Unsupported MENU_STORAGE_BACKEND: {backend}")

    dishes_table = os.getenv("DYNAMODB_DISHES_TABLE", "menu-dishes")
    templates_table = os.getenv("DYNAMODB_TEMPLATES_TABLE", "menu-category-templates")
    categories_table = os.getenv("DYNAMODB_CATEGORIES_TABLE", "menu-categories")
    logger.info(
        f"Repository configured - dishes: {dishes_table}, templates: {templates_table}, "
        f"categories: {categories_table}"
    )
    return DynamoDBMenuRepository(
        dynamodb_resource=get_dynamodb_resource(),
        dishes_table_name=dishes_table,
        templates_table_name=templates_table,
        categories_table_name=categories_table,
    )


def create_application() -> FastAPI:
    """Create and configure the FastAPI application with all dependencies.

    This factory function:
    1. Configures logging
    2. Creates the menu repository
    3. Creates the menu read, order placement, and template propagation services
    4. Creates the FastAPI app
    5. Sets up observability

    Returns:
        Configured FastAPI application instance
    """
    configure_logging(os.getenv("LOG_LEVEL", "INFO"))
    logger.info("Initializing menu customization service...")

    repository = create_repository()
    currency = os.getenv("MENU_CURRENCY", DEFAULT_CURRENCY)

    menu_read_service = MenuReadService(repository=repository)
    order_service = OrderPlacementService(repository=repository, currency=currency)
    propagation_service = TemplatePropagationService(repository=repository)
    logger.info(f"Services initialized (currency {currency})")

    api_keys = parse_api_keys(os.getenv("ADMIN_API_KEY"))
    if not api_keys:
        logger.warning("No ADMIN_API_KEY configured - admin endpoints will not be accessible")
        api_keys = ["dummy-key-for-development"]

    app = create_app(
        menu_read_service=menu_read_service,
        order_service=order_service,
        propagation_service=propagation_service,
        api_keys=api_keys,
    )
    setup_observability(app)

    logger.info("Menu customization service initialized successfully")
    return app


# Create the application instance only outside of tests so that importing
# this module during test collection has no side effects
if os.getenv("ENVIRONMENT") != "test":  # noqa: SIM108
    app = create_application()
else:
    app = FastAPI()


if __name__ == "__main__":
    """Run the application with uvicorn when executed directly."""
    import uvicorn

    port = int(os.getenv("PORT", "8002"))
    host = os.getenv("HOST", "0.0.0.0")

    logger.info(f"Starting development server on {host}:{port}")

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=True,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )
