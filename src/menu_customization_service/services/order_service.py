"""Order placement service: validates and prices customer selections.

Validation always runs before pricing. A line that passes validation is priced
and returned with a denormalized copy of the chosen options, which the order
system stores as the immutable order-line record.
"""

import logging
from decimal import Decimal

from pydantic import BaseModel, Field

from menu_customization_service.models.errors import DishNotFoundError, SelectionRejectedError
from menu_customization_service.models.modifier_models import (
    DEFAULT_CURRENCY,
    Dish,
    EffectiveSchema,
)
from menu_customization_service.models.selection_models import (
    PriceBreakdown,
    Selection,
    ValidationResult,
)
from menu_customization_service.observability import metrics
from menu_customization_service.observability.decorators import traced
from menu_customization_service.repositories.menu_repositories import MenuRepository
from menu_customization_service.services.inheritance_resolver import resolve
from menu_customization_service.services.price_calculator import calculate_price
from menu_customization_service.services.selection_validator import validate

logger = logging.getLogger(__name__)


class ChosenOption(BaseModel):
    """Snapshot of one chosen option at the time the line was placed."""

    group_id: str
    group_name: str
    option_id: str
    option_name: str
    price_delta: Decimal
    quantity: int
    multiplier: Decimal = Decimal("1")


class OrderLine(BaseModel):
    """A validated, priced order line ready to be persisted by the order system."""

    dish_id: str
    dish_name: str
    price: PriceBreakdown
    chosen_options: list[ChosenOption] = Field(default_factory=list)


class OrderPlacementService:
    """Entry point for the storefront's order placement flow."""

    def __init__(self, repository: MenuRepository, currency: str = DEFAULT_CURRENCY) -> None:
        """Initialize the OrderPlacementService.

        Args:
            repository: Storage for dishes and templates
            currency: Currency code reported on price breakdowns
        """
        self.repository = repository
        self.currency = currency

    def validate_selection(self, dish_id: str, selection: Selection) -> ValidationResult:
        """Validate a selection for a dish.

        Raises:
            DishNotFoundError: If the dish does not exist
        """
        _, schema = self._load(dish_id)
        result = validate(schema, selection)
        metrics.record_selection_validation(result.is_valid)
        return result

    def calculate_price(
        self,
        dish_id: str,
        size_label: str | None,
        selection: Selection,
        quantity: int = 1,
    ) -> PriceBreakdown:
        """Price a selection without validating it (e.g. live totals in the storefront).

        Raises:
            DishNotFoundError: If the dish does not exist
            UnknownSizeVariantError: If the dish has no price point
        """
        dish, schema = self._load(dish_id)
        return calculate_price(dish, size_label, selection, schema, quantity, self.currency)

    @traced("order.place_order_line")
    def place_order_line(
        self,
        dish_id: str,
        size_label: str | None,
        selection: Selection,
        quantity: int = 1,
    ) -> OrderLine:
        """Validate, then price, one order line.

        Args:
            dish_id: Dish being ordered
            size_label: Requested size
            selection: Customer selection
            quantity: Units of the configured dish

        Returns:
            OrderLine: Price breakdown plus a snapshot of the chosen options

        Raises:
            DishNotFoundError: If the dish does not exist
            SelectionRejectedError: If the selection is not admissible
            UnknownSizeVariantError: If the dish has no price point
        """
        dish, schema = self._load(dish_id)

        result = validate(schema, selection)
        metrics.record_selection_validation(result.is_valid)
        if not result.is_valid:
            logger.info(
                f"Rejected selection for dish {dish_id}: "
                f"{', '.join(error.kind.value for error in result.errors)}"
            )
            raise SelectionRejectedError(dish_id, result.errors)

        price = calculate_price(dish, size_label, selection, schema, quantity, self.currency)
        return OrderLine(
            dish_id=dish.id,
            dish_name=dish.name,
            price=price,
            chosen_options=self._snapshot(schema, selection),
        )

    def _load(self, dish_id: str) -> tuple[Dish, EffectiveSchema]:
        dish = self.repository.get_dish(dish_id)
        if dish is None:
            raise DishNotFoundError(dish_id)
        templates = self.repository.list_templates_for_category(dish.category_id)
        return dish, resolve(dish, templates)

    @staticmethod
    def _snapshot(schema: EffectiveSchema, selection: Selection) -> list[ChosenOption]:
        snapshot: list[ChosenOption] = []
        for group in schema.groups:
            for choice in selection.choices.get(group.id, []):
                option = group.option(choice.option_id)
                if option is None:
                    continue
                snapshot.append(
                    ChosenOption(
                        group_id=group.id,
                        group_name=group.name,
                        option_id=option.id,
                        option_name=option.name,
                        price_delta=option.price_delta,
                        quantity=choice.quantity,
                        multiplier=choice.multiplier,
                    )
                )
        return snapshot
