"""Shared pytest fixtures and configuration for all tests."""

import os
from decimal import Decimal

import pytest

# main.py and lambda_handler.py only build the application outside of tests
os.environ.setdefault("ENVIRONMENT", "test")

from menu_customization_service.models.modifier_models import (  # noqa: E402
    Category,
    CategoryTemplate,
    Dish,
    DishCustomOrigin,
    ModifierGroup,
    ModifierOption,
    SizeVariant,
)
from menu_customization_service.repositories.menu_repositories import (  # noqa: E402
    InMemoryMenuRepository,
)


@pytest.fixture
def mock_restaurant_id() -> str:
    """Fixture providing a standard test restaurant ID."""
    return "rest_123456"


@pytest.fixture
def pizza_category(mock_restaurant_id: str) -> Category:
    return Category(id="cat_pizza", restaurant_id=mock_restaurant_id, name="Pizza", sort_order=1)


@pytest.fixture
def salad_category(mock_restaurant_id: str) -> Category:
    return Category(id="cat_salad", restaurant_id=mock_restaurant_id, name="Salads", sort_order=2)


@pytest.fixture
def crust_template() -> CategoryTemplate:
    """Required single-choice template with a free default option."""
    return CategoryTemplate(
        id="tpl_crust",
        category_id="cat_pizza",
        name="Crust",
        is_required=True,
        min_selections=1,
        max_selections=1,
        display_order=1,
        options=[
            ModifierOption(id="opt_thin", name="Thin", is_included_by_default=True),
            ModifierOption(id="opt_stuffed", name="Stuffed", price_delta=Decimal("2.50")),
        ],
    )


@pytest.fixture
def toppings_template() -> CategoryTemplate:
    """Optional multi-choice template (choose 0-3)."""
    return CategoryTemplate(
        id="tpl_toppings",
        category_id="cat_pizza",
        name="Toppings",
        min_selections=0,
        max_selections=3,
        display_order=2,
        options=[
            ModifierOption(
                id="opt_cheese",
                name="Extra Cheese",
                price_delta=Decimal("1.50"),
                is_included_by_default=True,
            ),
            ModifierOption(id="opt_pepperoni", name="Pepperoni", price_delta=Decimal("2.00")),
            ModifierOption(id="opt_olives", name="Olives", price_delta=Decimal("0.75")),
        ],
    )


@pytest.fixture
def dressing_template() -> CategoryTemplate:
    return CategoryTemplate(
        id="tpl_dressing",
        category_id="cat_salad",
        name="Dressing",
        is_required=True,
        min_selections=1,
        max_selections=1,
        options=[
            ModifierOption(id="opt_caesar", name="Caesar"),
            ModifierOption(id="opt_ranch", name="Ranch"),
        ],
    )


@pytest.fixture
def dips_group() -> ModifierGroup:
    """Custom group owned by the margherita dish."""
    return ModifierGroup(
        id="grp_dips",
        name="Dips",
        max_selections=0,
        options=[ModifierOption(id="opt_garlic", name="Garlic Dip", price_delta=Decimal("0.99"))],
        origin=DishCustomOrigin(dish_id="dish_margherita"),
    )


@pytest.fixture
def margherita(dips_group: ModifierGroup) -> Dish:
    return Dish(
        id="dish_margherita",
        category_id="cat_pizza",
        name="Margherita",
        size_variants=[
            SizeVariant(label="Small", price=Decimal("12.00")),
            SizeVariant(label="Large", price=Decimal("16.00")),
        ],
        custom_groups=[dips_group],
        display_order=1,
    )


@pytest.fixture
def hawaiian() -> Dish:
    return Dish(
        id="dish_hawaiian",
        category_id="cat_pizza",
        name="Hawaiian",
        base_price=Decimal("14.00"),
        display_order=2,
    )


@pytest.fixture
def caesar_salad() -> Dish:
    return Dish(
        id="dish_caesar",
        category_id="cat_salad",
        name="Caesar Salad",
        base_price=Decimal("9.99"),
    )


@pytest.fixture
def menu_repository(
    pizza_category: Category,
    salad_category: Category,
    crust_template: CategoryTemplate,
    toppings_template: CategoryTemplate,
    dressing_template: CategoryTemplate,
    margherita: Dish,
    hawaiian: Dish,
    caesar_salad: Dish,
) -> InMemoryMenuRepository:
    """In-memory repository seeded with two categories, three templates, and three dishes."""
    repository = InMemoryMenuRepository()
    for category in (pizza_category, salad_category):
        repository.save_category(category)
    for template in (crust_template, toppings_template, dressing_template):
        repository.save_template(template)
    for dish in (margherita, hawaiian, caesar_salad):
        repository.save_dish(dish)
    return repository
