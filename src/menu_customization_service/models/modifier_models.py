"""Menu and modifier data models.

These models describe the dish/template graph the engine operates on: dishes,
their size variants, modifier groups with their options, and the category
templates dishes inherit from. The effective schema of a dish is derived from
them by the inheritance resolver and is never persisted.
"""

from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Annotated, Literal, Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

DEFAULT_CURRENCY = "CAD"
DEFAULT_VARIANT_LABEL = "Regular"

CENT = Decimal("0.01")


def to_minor_units(amount: Decimal) -> int:
    """Convert a decimal money amount to integer minor units (cents).

    Args:
        amount: Money amount, e.g. Decimal("12.99")

    Returns:
        int: Amount in minor units, rounded half-up
    """
    return int((amount / CENT).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor_units(minor: int) -> Decimal:
    """Convert integer minor units back to a two-place decimal amount."""
    return (Decimal(minor) * CENT).quantize(CENT)


class InheritanceState(str, Enum):
    """Whether a dish still follows its category templates."""

    INHERITED = "inherited"
    DETACHED = "detached"


class ModifierOption(BaseModel):
    """A selectable modifier option (e.g. "Extra Cheese")."""

    model_config = ConfigDict(frozen=True, json_encoders={Decimal: str})

    id: str = Field(..., description="Unique identifier for the option")
    name: str = Field(..., description="Option name")
    price_delta: Decimal = Field(
        default=Decimal("0.00"), description="Price change per paid unit, may be negative"
    )
    is_included_by_default: bool = Field(
        default=False, description="Whether the first unit comes with the dish at no charge"
    )


class CategoryTemplateOrigin(BaseModel):
    """Origin of a group projected from a category template."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["category_template"] = "category_template"
    template_id: str


class DishCustomOrigin(BaseModel):
    """Origin of a group owned by a single dish.

    source_template_id is set when the group was materialized from a template
    (by breaking inheritance or by applying a template to a detached dish).
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["dish_custom"] = "dish_custom"
    dish_id: str
    source_template_id: str | None = None


Origin = Annotated[CategoryTemplateOrigin | DishCustomOrigin, Field(discriminator="kind")]


class SelectionConstraints(BaseModel):
    """Shared shape of anything that behaves like a modifier group."""

    name: str = Field(..., description="Group name shown to customers")
    is_required: bool = Field(default=False, description="Whether a choice must be made")
    min_selections: int = Field(default=0, description="Minimum total quantity", ge=0)
    max_selections: int = Field(
        default=0, description="Maximum total quantity, 0 means unlimited", ge=0
    )
    options: list[ModifierOption] = Field(default_factory=list, description="Options in order")

    @model_validator(mode="after")
    def validate_constraints(self) -> Self:
        """Validate selection bounds and option uniqueness."""
        if self.max_selections != 0 and self.min_selections > self.max_selections:
            raise ValueError("min_selections must not exceed max_selections")
        if self.is_required and self.min_selections < 1:
            raise ValueError("required groups must have min_selections >= 1")
        option_ids = [option.id for option in self.options]
        if len(option_ids) != len(set(option_ids)):
            raise ValueError("option ids must be unique within a group")
        return self

    def option(self, option_id: str) -> ModifierOption | None:
        """Look up an option by id.

        Args:
            option_id: The option identifier

        Returns:
            ModifierOption if present in this group, None otherwise
        """
        for option in self.options:
            if option.id == option_id:
                return option
        return None


class ModifierGroup(SelectionConstraints):
    """A modifier group as offered on a dish."""

    model_config = ConfigDict(json_encoders={Decimal: str})

    id: str = Field(..., description="Unique identifier for the group")
    origin: Origin = Field(..., description="Where this group comes from")

    @property
    def template_id(self) -> str | None:
        """Template this group was projected from or copied from, if any."""
        if isinstance(self.origin, CategoryTemplateOrigin):
            return self.origin.template_id
        return self.origin.source_template_id

    @property
    def is_inherited(self) -> bool:
        return isinstance(self.origin, CategoryTemplateOrigin)


class CategoryTemplate(SelectionConstraints):
    """A reusable modifier group owned by a menu category."""

    model_config = ConfigDict(json_encoders={Decimal: str})

    id: str = Field(..., description="Unique identifier for the template")
    category_id: str = Field(..., description="Category that owns the template")
    display_order: int = Field(default=0, description="Display order within the category")
    is_active: bool = Field(default=True, description="Whether dishes currently see it")

    def as_modifier_group(self) -> ModifierGroup:
        """Project this template onto a dish-facing modifier group."""
        return ModifierGroup(
            id=self.id,
            name=self.name,
            is_required=self.is_required,
            min_selections=self.min_selections,
            max_selections=self.max_selections,
            options=list(self.options),
            origin=CategoryTemplateOrigin(template_id=self.id),
        )


class Category(BaseModel):
    """Menu category model."""

    id: str = Field(..., description="Unique identifier for the category")
    restaurant_id: str = Field(..., description="Restaurant this category belongs to")
    name: str = Field(..., description="Category name")
    description: str | None = Field(None, description="Category description")
    sort_order: int = Field(default=0, description="Display order of category")


class SizeVariant(BaseModel):
    """A named price point for a dish (e.g. Small, Large)."""

    model_config = ConfigDict(json_encoders={Decimal: str})

    label: str = Field(..., description="Size label")
    price: Decimal = Field(..., description="Price for this size", ge=0)


class Dish(BaseModel):
    """Dish model with its pricing and customization state."""

    model_config = ConfigDict(json_encoders={Decimal: str})

    id: str = Field(..., description="Unique identifier for the dish")
    category_id: str = Field(..., description="Category this dish belongs to")
    name: str = Field(..., description="Dish name")
    description: str | None = Field(None, description="Dish description")
    base_price: Decimal | None = Field(None, description="Price when no sizes are defined", ge=0)
    size_variants: list[SizeVariant] = Field(default_factory=list, description="Sizes in order")
    inheritance_state: InheritanceState = Field(default=InheritanceState.INHERITED)
    custom_groups: list[ModifierGroup] = Field(
        default_factory=list, description="Dish-owned groups in creation order"
    )
    display_order: int = Field(default=0, description="Display order within the category")

    def price_variants(self) -> list[SizeVariant]:
        """Return the price points of this dish.

        A dish without explicit sizes has a single implicit "Regular" variant at
        its base price. A dish with neither has no price points.
        """
        if self.size_variants:
            return list(self.size_variants)
        if self.base_price is not None:
            return [SizeVariant(label=DEFAULT_VARIANT_LABEL, price=self.base_price)]
        return []


class EffectiveSchema(BaseModel):
    """Resolved, per-dish list of modifier groups offered to a customer."""

    dish_id: str
    groups: list[ModifierGroup] = Field(default_factory=list)

    def group(self, group_id: str) -> ModifierGroup | None:
        for group in self.groups:
            if group.id == group_id:
                return group
        return None

    def equivalent_to(self, other: "EffectiveSchema") -> bool:
        """Compare two schemas on what a customer sees, ignoring group ids and origins."""
        return self.dish_id == other.dish_id and _shape(self) == _shape(other)


def _shape(schema: EffectiveSchema) -> list[tuple]:
    return [
        (
            group.name,
            group.is_required,
            group.min_selections,
            group.max_selections,
            tuple(group.options),
        )
        for group in schema.groups
    ]
