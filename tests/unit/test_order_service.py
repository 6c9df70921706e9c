"""Unit tests for OrderPlacementService."""

from decimal import Decimal

import pytest

from menu_customization_service.models.errors import (
    DishNotFoundError,
    ErrorKind,
    SelectionRejectedError,
)
from menu_customization_service.models.selection_models import OptionChoice, Selection
from menu_customization_service.repositories.menu_repositories import InMemoryMenuRepository
from menu_customization_service.services.order_service import OrderPlacementService


@pytest.fixture
def service(menu_repository: InMemoryMenuRepository) -> OrderPlacementService:
    return OrderPlacementService(repository=menu_repository)


@pytest.mark.unit
class TestValidateSelection:
    """Test suite for validate_selection."""

    def test_valid(self, service: OrderPlacementService) -> None:
        result = service.validate_selection(
            "dish_hawaiian", Selection.from_option_ids({"tpl_crust": ["opt_thin"]})
        )

        assert result.is_valid is True

    def test_invalid_is_reported_not_raised(self, service: OrderPlacementService) -> None:
        result = service.validate_selection("dish_hawaiian", Selection())

        assert result.is_valid is False
        assert result.errors[0].kind == ErrorKind.MISSING_REQUIRED_GROUP

    def test_missing_dish(self, service: OrderPlacementService) -> None:
        with pytest.raises(DishNotFoundError):
            service.validate_selection("dish_missing", Selection())


@pytest.mark.unit
class TestCalculatePrice:
    """Test suite for OrderPlacementService.calculate_price."""

    def test_prices_without_validating(self, service: OrderPlacementService) -> None:
        price = service.calculate_price(
            "dish_margherita",
            "Large",
            Selection.from_option_ids({"tpl_toppings": ["opt_pepperoni"]}),
            quantity=2,
        )

        assert price.total_price == Decimal("18.00")
        assert price.line_total == Decimal("36.00")
        assert price.currency == "CAD"

    def test_configured_currency(self, menu_repository: InMemoryMenuRepository) -> None:
        service = OrderPlacementService(repository=menu_repository, currency="USD")

        price = service.calculate_price("dish_caesar", None, Selection())

        assert price.currency == "USD"
        assert price.total_price == Decimal("9.99")


@pytest.mark.unit
class TestPlaceOrderLine:
    """Test suite for place_order_line."""

    def test_valid_line_is_priced_and_snapshotted(self, service: OrderPlacementService) -> None:
        selection = Selection(
            choices={
                "tpl_toppings": [OptionChoice(option_id="opt_olives", quantity=2)],
                "tpl_crust": [OptionChoice(option_id="opt_stuffed")],
            }
        )

        line = service.place_order_line("dish_hawaiian", None, selection, quantity=2)

        assert line.dish_id == "dish_hawaiian"
        assert line.dish_name == "Hawaiian"
        # 14.00 + 2.50 + 2 * 0.75
        assert line.price.total_price == Decimal("18.00")
        assert line.price.line_total == Decimal("36.00")
        assert [(o.group_name, o.option_name, o.quantity) for o in line.chosen_options] == [
            ("Crust", "Stuffed", 1),
            ("Toppings", "Olives", 2),
        ]
        assert line.chosen_options[0].price_delta == Decimal("2.50")

    def test_rejected_selection_raises_with_errors(self, service: OrderPlacementService) -> None:
        selection = Selection.from_option_ids({"tpl_crust": ["opt_thin", "opt_stuffed"]})

        with pytest.raises(SelectionRejectedError) as exc_info:
            service.place_order_line("dish_hawaiian", None, selection)

        assert exc_info.value.dish_id == "dish_hawaiian"
        assert [error.kind for error in exc_info.value.errors] == [ErrorKind.ABOVE_MAXIMUM]
        assert exc_info.value.kind == ErrorKind.ABOVE_MAXIMUM

    def test_snapshot_is_independent_of_later_edits(
        self, service: OrderPlacementService, menu_repository: InMemoryMenuRepository
    ) -> None:
        line = service.place_order_line(
            "dish_hawaiian", None, Selection.from_option_ids({"tpl_crust": ["opt_stuffed"]})
        )

        menu_repository.delete_template("tpl_crust")

        assert line.chosen_options[0].option_name == "Stuffed"
        assert line.price.total_price == Decimal("16.50")

    def test_missing_dish(self, service: OrderPlacementService) -> None:
        with pytest.raises(DishNotFoundError):
            service.place_order_line("dish_missing", None, Selection())
