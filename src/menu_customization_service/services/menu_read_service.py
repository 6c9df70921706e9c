"""Menu read service: serves a restaurant's menu with resolved customizations."""

import logging

from pydantic import BaseModel, Field

from menu_customization_service.models.errors import DishNotFoundError
from menu_customization_service.models.modifier_models import (
    Category,
    EffectiveSchema,
    ModifierGroup,
    SizeVariant,
)
from menu_customization_service.observability.decorators import traced
from menu_customization_service.repositories.menu_repositories import MenuRepository
from menu_customization_service.services.inheritance_resolver import resolve

logger = logging.getLogger(__name__)


class MenuDish(BaseModel):
    """A dish as shown on the storefront."""

    id: str
    name: str
    description: str | None = None
    size_variants: list[SizeVariant] = Field(default_factory=list)
    modifier_groups: list[ModifierGroup] = Field(default_factory=list)


class MenuCategory(BaseModel):
    """A category and its dishes as shown on the storefront."""

    id: str
    name: str
    description: str | None = None
    sort_order: int = 0
    dishes: list[MenuDish] = Field(default_factory=list)


class RestaurantMenu(BaseModel):
    """Complete storefront menu for one restaurant."""

    restaurant_id: str
    categories: list[MenuCategory] = Field(default_factory=list)


class MenuReadService:
    """Builds storefront menus by resolving every dish's effective schema."""

    def __init__(self, repository: MenuRepository) -> None:
        """Initialize the MenuReadService.

        Args:
            repository: Storage for categories, dishes, and templates
        """
        self.repository = repository

    @traced("menu.get_restaurant_menu")
    def get_restaurant_menu(self, restaurant_id: str) -> RestaurantMenu:
        """Build the full menu of a restaurant.

        Categories are ordered by sort_order and dishes by display_order. Each
        dish is resolved once against its category's templates.

        Args:
            restaurant_id: Restaurant to build the menu for

        Returns:
            RestaurantMenu: Categories, dishes, sizes, and modifier groups
        """
        categories = sorted(
            self.repository.list_categories_for_restaurant(restaurant_id),
            key=lambda category: category.sort_order,
        )
        menu = RestaurantMenu(
            restaurant_id=restaurant_id,
            categories=[self._build_category(category) for category in categories],
        )

        dish_count = sum(len(category.dishes) for category in menu.categories)
        logger.info(
            f"Built menu for restaurant {restaurant_id}: "
            f"{len(menu.categories)} categories, {dish_count} dishes"
        )
        return menu

    def get_effective_schema(self, dish_id: str) -> EffectiveSchema:
        """Resolve the effective schema of a single dish.

        Raises:
            DishNotFoundError: If the dish does not exist
        """
        dish = self.repository.get_dish(dish_id)
        if dish is None:
            raise DishNotFoundError(dish_id)
        return resolve(dish, self.repository.list_templates_for_category(dish.category_id))

    def _build_category(self, category: Category) -> MenuCategory:
        templates = self.repository.list_templates_for_category(category.id)
        dishes = sorted(
            self.repository.list_dishes_in_category(category.id),
            key=lambda dish: dish.display_order,
        )
        return MenuCategory(
            id=category.id,
            name=category.name,
            description=category.description,
            sort_order=category.sort_order,
            dishes=[
                MenuDish(
                    id=dish.id,
                    name=dish.name,
                    description=dish.description,
                    size_variants=dish.price_variants(),
                    modifier_groups=resolve(dish, templates).groups,
                )
                for dish in dishes
            ],
        )
