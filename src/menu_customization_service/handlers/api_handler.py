"""FastAPI application exposing menu read, order placement, and admin endpoints."""

import logging
from typing import Union

from fastapi import Depends, FastAPI, Header, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from menu_customization_service.auth.api_keys import APIKeyValidator, require_api_key
from menu_customization_service.models.errors import (
    ErrorKind,
    MenuEngineError,
    SelectionRejectedError,
)
from menu_customization_service.models.modifier_models import EffectiveSchema
from menu_customization_service.models.selection_models import (
    BatchResult,
    DetachResult,
    PriceBreakdown,
    Selection,
    ValidationResult,
)
from menu_customization_service.services.menu_read_service import MenuReadService, RestaurantMenu
from menu_customization_service.services.order_service import OrderLine, OrderPlacementService
from menu_customization_service.services.template_propagation_service import (
    TemplatePropagationService,
)

logger = logging.getLogger(__name__)

ERROR_STATUS_CODES: dict[ErrorKind, int] = {
    ErrorKind.DISH_NOT_FOUND: 404,
    ErrorKind.TEMPLATE_NOT_FOUND: 404,
    ErrorKind.UNKNOWN_SIZE_VARIANT: 422,
    ErrorKind.TEMPLATE_INACTIVE: 409,
    ErrorKind.ALREADY_DETACHED: 409,
    ErrorKind.CONCURRENT_MODIFICATION: 409,
}


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str


class ValidateCustomizationRequest(BaseModel):
    selection: Selection = Field(default_factory=Selection)


class CalculatePriceRequest(BaseModel):
    size_label: str | None = None
    selection: Selection = Field(default_factory=Selection)
    quantity: int = Field(default=1, ge=1)


class OrderLineRequest(BaseModel):
    dish_id: str
    size_label: str | None = None
    selection: Selection = Field(default_factory=Selection)
    quantity: int = Field(default=1, ge=1)


class ApplyTemplateRequest(BaseModel):
    dish_ids: list[str] = Field(..., min_length=1)


def batch_response(result: BatchResult) -> Union[BatchResult, JSONResponse]:
    """Return 200 when every dish succeeded, 207 with the manifest otherwise."""
    if result.failed:
        return JSONResponse(status_code=207, content=result.model_dump(mode="json"))
    return result


def create_app(
    menu_read_service: MenuReadService,
    order_service: OrderPlacementService,
    propagation_service: TemplatePropagationService,
    api_keys: list[str],
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        menu_read_service: Service building storefront menus
        order_service: Service validating and pricing selections
        propagation_service: Service behind admin template actions
        api_keys: Valid API keys for admin endpoints

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="Menu Customization Service API",
        description="Menu customization inheritance, validation, and pricing",
        version="1.0.0",
    )

    app.state.menu_read_service = menu_read_service
    app.state.order_service = order_service
    app.state.propagation_service = propagation_service
    app.state.api_key_validator = APIKeyValidator(api_keys=api_keys)

    @app.exception_handler(SelectionRejectedError)
    async def handle_selection_rejected(_request: Request, exc: SelectionRejectedError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={
                "error": "selection_rejected",
                "message": exc.message,
                "errors": [error.model_dump(mode="json") for error in exc.errors],
            },
        )

    @app.exception_handler(MenuEngineError)
    async def handle_engine_error(_request: Request, exc: MenuEngineError) -> JSONResponse:
        status_code = ERROR_STATUS_CODES.get(exc.kind, 400)
        return JSONResponse(
            status_code=status_code,
            content={"error": exc.kind.value, "message": exc.message},
        )

    def validate_api_key(x_api_key: str | None = Header(None)) -> str:
        """Dependency to validate the admin API key."""
        return require_api_key(app.state.api_key_validator, x_api_key)

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check() -> HealthResponse:
        return HealthResponse(status="healthy")

    # Menu read

    @app.get(
        "/restaurants/{restaurant_id}/menu",
        response_model=RestaurantMenu,
        tags=["Menu"],
    )
    def get_restaurant_menu(restaurant_id: str) -> RestaurantMenu:
        menu: RestaurantMenu = app.state.menu_read_service.get_restaurant_menu(restaurant_id)
        return menu

    @app.get(
        "/dishes/{dish_id}/customization",
        response_model=EffectiveSchema,
        tags=["Menu"],
    )
    def get_dish_customization(dish_id: str) -> EffectiveSchema:
        schema: EffectiveSchema = app.state.menu_read_service.get_effective_schema(dish_id)
        return schema

    # Order placement

    @app.post(
        "/dishes/{dish_id}/validate-customization",
        response_model=ValidationResult,
        tags=["Orders"],
    )
    def validate_customization(
        dish_id: str, body: ValidateCustomizationRequest
    ) -> ValidationResult:
        result: ValidationResult = app.state.order_service.validate_selection(
            dish_id, body.selection
        )
        return result

    @app.post(
        "/dishes/{dish_id}/calculate-price",
        response_model=PriceBreakdown,
        tags=["Orders"],
    )
    def calculate_dish_price(dish_id: str, body: CalculatePriceRequest) -> PriceBreakdown:
        price: PriceBreakdown = app.state.order_service.calculate_price(
            dish_id, body.size_label, body.selection, body.quantity
        )
        return price

    @app.post("/orders/lines", response_model=OrderLine, tags=["Orders"])
    def place_order_line(body: OrderLineRequest) -> OrderLine:
        line: OrderLine = app.state.order_service.place_order_line(
            body.dish_id, body.size_label, body.selection, body.quantity
        )
        return line

    # Admin menu builder

    @app.post(
        "/admin/templates/{template_id}/apply",
        response_model=BatchResult,
        tags=["Admin"],
    )
    def apply_template_to_dishes(
        template_id: str,
        body: ApplyTemplateRequest,
        _api_key: str = Depends(validate_api_key),
    ) -> Union[BatchResult, JSONResponse]:
        logger.info(f"Applying template {template_id} to {len(body.dish_ids)} dishes")
        result = app.state.propagation_service.apply_template_to_dishes(template_id, body.dish_ids)
        return batch_response(result)

    @app.post(
        "/admin/templates/{template_id}/apply-to-category/{category_id}",
        response_model=BatchResult,
        tags=["Admin"],
    )
    def apply_template_to_category(
        template_id: str,
        category_id: str,
        _api_key: str = Depends(validate_api_key),
    ) -> Union[BatchResult, JSONResponse]:
        logger.info(f"Applying template {template_id} to category {category_id}")
        result = app.state.propagation_service.apply_template_to_category(template_id, category_id)
        return batch_response(result)

    @app.post(
        "/admin/dishes/{dish_id}/break-inheritance",
        response_model=DetachResult,
        tags=["Admin"],
    )
    def break_inheritance(
        dish_id: str,
        _api_key: str = Depends(validate_api_key),
    ) -> DetachResult:
        logger.info(f"Breaking inheritance for dish {dish_id}")
        result: DetachResult = app.state.propagation_service.break_inheritance(dish_id)
        return result

    @app.delete("/admin/templates/{template_id}", status_code=204, tags=["Admin"])
    def delete_template(
        template_id: str,
        _api_key: str = Depends(validate_api_key),
    ) -> Response:
        logger.info(f"Deleting template {template_id}")
        app.state.propagation_service.delete_template(template_id)
        return Response(status_code=204)

    return app
