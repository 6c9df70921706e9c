"""Unit tests for the selection validator."""

import pytest

from menu_customization_service.models.errors import ErrorKind
from menu_customization_service.models.modifier_models import (
    CategoryTemplate,
    Dish,
    DishCustomOrigin,
    EffectiveSchema,
    ModifierGroup,
    ModifierOption,
)
from menu_customization_service.models.selection_models import OptionChoice, Selection
from menu_customization_service.services.inheritance_resolver import resolve
from menu_customization_service.services.selection_validator import validate


@pytest.fixture
def pizza_schema(
    margherita: Dish, crust_template: CategoryTemplate, toppings_template: CategoryTemplate
) -> EffectiveSchema:
    """Crust (required 1-1), Toppings (0-3), Dips (unlimited)."""
    return resolve(margherita, [crust_template, toppings_template])


def group_schema(**constraints) -> EffectiveSchema:
    group = ModifierGroup(
        id="grp_1",
        name="Size",
        options=[
            ModifierOption(id="opt_small", name="Small"),
            ModifierOption(id="opt_large", name="Large"),
        ],
        origin=DishCustomOrigin(dish_id="dish_1"),
        **constraints,
    )
    return EffectiveSchema(dish_id="dish_1", groups=[group])


@pytest.mark.unit
class TestValidate:
    """Test suite for validate."""

    def test_valid_selection(self, pizza_schema: EffectiveSchema) -> None:
        selection = Selection.from_option_ids(
            {"tpl_crust": ["opt_thin"], "tpl_toppings": ["opt_cheese", "opt_olives"]}
        )

        result = validate(pizza_schema, selection)

        assert result.is_valid is True
        assert result.errors == []

    def test_required_group_unmet(self) -> None:
        schema = group_schema(is_required=True, min_selections=1)

        result = validate(schema, Selection())

        assert result.is_valid is False
        assert len(result.errors) == 1
        error = result.errors[0]
        assert error.kind == ErrorKind.MISSING_REQUIRED_GROUP
        assert error.group_id == "grp_1"
        assert error.group_name == "Size"
        assert error.message == "Choose at least 1 Size"

    def test_below_minimum_on_optional_group(self) -> None:
        schema = group_schema(min_selections=2)

        result = validate(schema, Selection.from_option_ids({"grp_1": ["opt_small"]}))

        assert [error.kind for error in result.errors] == [ErrorKind.BELOW_MINIMUM]
        assert result.errors[0].message == "Choose at least 2 Size"

    def test_below_minimum_on_empty_optional_group(self) -> None:
        schema = group_schema(min_selections=1)

        result = validate(schema, Selection())

        assert [error.kind for error in result.errors] == [ErrorKind.BELOW_MINIMUM]

    def test_required_group_partially_filled_reports_below_minimum(self) -> None:
        schema = group_schema(is_required=True, min_selections=2)

        result = validate(schema, Selection.from_option_ids({"grp_1": ["opt_small"]}))

        assert [error.kind for error in result.errors] == [ErrorKind.BELOW_MINIMUM]

    def test_above_maximum(self, pizza_schema: EffectiveSchema) -> None:
        selection = Selection.from_option_ids(
            {
                "tpl_crust": ["opt_thin"],
                "tpl_toppings": ["opt_cheese", "opt_pepperoni", "opt_olives", "opt_olives"],
            }
        )

        result = validate(pizza_schema, selection)

        assert [error.kind for error in result.errors] == [ErrorKind.ABOVE_MAXIMUM]
        assert result.errors[0].message == "Choose at most 3 Toppings"

    def test_quantity_counts_toward_maximum(self) -> None:
        schema = group_schema(max_selections=2)
        selection = Selection(choices={"grp_1": [OptionChoice(option_id="opt_small", quantity=3)]})

        result = validate(schema, selection)

        assert [error.kind for error in result.errors] == [ErrorKind.ABOVE_MAXIMUM]

    def test_unlimited_maximum(self) -> None:
        schema = group_schema(max_selections=0)
        selection = Selection(choices={"grp_1": [OptionChoice(option_id="opt_small", quantity=50)]})

        assert validate(schema, selection).is_valid is True

    def test_unknown_option(self, pizza_schema: EffectiveSchema) -> None:
        selection = Selection.from_option_ids({"tpl_crust": ["opt_thin", "opt_deep_dish"]})

        result = validate(pizza_schema, selection)

        assert [error.kind for error in result.errors] == [ErrorKind.UNKNOWN_OPTION]
        assert result.errors[0].option_id == "opt_deep_dish"
        assert result.errors[0].group_id == "tpl_crust"

    def test_unknown_option_does_not_satisfy_required_group(
        self, pizza_schema: EffectiveSchema
    ) -> None:
        selection = Selection.from_option_ids({"tpl_crust": ["opt_deep_dish"]})

        result = validate(pizza_schema, selection)

        assert [error.kind for error in result.errors] == [
            ErrorKind.MISSING_REQUIRED_GROUP,
            ErrorKind.UNKNOWN_OPTION,
        ]

    def test_unknown_group(self, pizza_schema: EffectiveSchema) -> None:
        selection = Selection.from_option_ids(
            {"tpl_crust": ["opt_thin"], "tpl_sauce": ["opt_bbq"]}
        )

        result = validate(pizza_schema, selection)

        assert [error.kind for error in result.errors] == [ErrorKind.UNKNOWN_GROUP]
        assert result.errors[0].group_id == "tpl_sauce"
        assert result.errors[0].group_name is None

    def test_errors_follow_schema_order_then_unknown_groups(
        self, pizza_schema: EffectiveSchema
    ) -> None:
        selection = Selection.from_option_ids(
            {
                "stale_group": ["opt_x"],
                "tpl_toppings": ["opt_cheese", "opt_pepperoni", "opt_olives", "opt_cheese"],
                "grp_dips": ["opt_gone"],
            }
        )

        result = validate(pizza_schema, selection)

        assert [(error.kind, error.group_id) for error in result.errors] == [
            (ErrorKind.MISSING_REQUIRED_GROUP, "tpl_crust"),
            (ErrorKind.ABOVE_MAXIMUM, "tpl_toppings"),
            (ErrorKind.UNKNOWN_OPTION, "grp_dips"),
            (ErrorKind.UNKNOWN_GROUP, "stale_group"),
        ]

    def test_error_order_is_reproducible(self, pizza_schema: EffectiveSchema) -> None:
        selection = Selection.from_option_ids({"tpl_toppings": ["opt_x", "opt_y"], "other": []})

        assert validate(pizza_schema, selection) == validate(pizza_schema, selection)

    def test_group_without_options_is_never_enforced(self) -> None:
        empty = ModifierGroup(
            id="grp_empty",
            name="Extras",
            is_required=True,
            min_selections=1,
            origin=DishCustomOrigin(dish_id="dish_1"),
        )
        schema = EffectiveSchema(dish_id="dish_1", groups=[empty])

        assert validate(schema, Selection()).is_valid is True

    def test_empty_schema_and_empty_selection(self) -> None:
        result = validate(EffectiveSchema(dish_id="dish_1"), Selection())

        assert result.is_valid is True

    @pytest.mark.parametrize(
        "selection",
        [
            Selection(),
            Selection(choices={"tpl_crust": []}),
            Selection.from_option_ids({"": [""]}),
            Selection.from_option_ids({"tpl_crust": ["opt_thin"] * 10, "??": ["opt_thin"]}),
        ],
    )
    def test_never_raises(self, pizza_schema: EffectiveSchema, selection: Selection) -> None:
        result = validate(pizza_schema, selection)

        assert result.is_valid == (not result.errors)
