"""Customer selection, pricing, validation, and batch result models."""

from collections.abc import Iterable, Mapping
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from menu_customization_service.models.errors import ErrorKind
from menu_customization_service.models.modifier_models import ModifierGroup


class OptionChoice(BaseModel):
    """One chosen option with its quantity (e.g. "2x extra cheese").

    multiplier is opaque to the engine; it scales this choice's price
    contribution (the storefront uses it for split-dish placement).
    """

    option_id: str = Field(..., description="Chosen option identifier")
    quantity: int = Field(default=1, description="Number of units chosen", ge=1)
    multiplier: Decimal = Field(default=Decimal("1"), description="Price multiplier", ge=0)


class Selection(BaseModel):
    """Customer input: chosen options keyed by modifier group id.

    Repeated choices of the same option within a group add up.
    """

    choices: dict[str, list[OptionChoice]] = Field(default_factory=dict)

    @classmethod
    def from_option_ids(cls, option_ids_by_group: Mapping[str, Iterable[str]]) -> "Selection":
        """Build a selection with one unit per listed option id.

        Args:
            option_ids_by_group: Mapping of group id to chosen option ids; an
                option id listed twice counts as two units

        Returns:
            Selection: The equivalent selection
        """
        return cls(
            choices={
                group_id: [OptionChoice(option_id=option_id) for option_id in option_ids]
                for group_id, option_ids in option_ids_by_group.items()
            }
        )

    def quantities_for(self, group_id: str) -> dict[str, int]:
        """Total chosen quantity per option id for one group, in first-seen order."""
        totals: dict[str, int] = {}
        for choice in self.choices.get(group_id, []):
            totals[choice.option_id] = totals.get(choice.option_id, 0) + choice.quantity
        return totals


class PriceBreakdown(BaseModel):
    """Computed price of one dish configuration."""

    model_config = ConfigDict(json_encoders={Decimal: str})

    base_price: Decimal = Field(..., description="Price of the chosen size variant")
    modifier_total: Decimal = Field(..., description="Sum of modifier contributions")
    total_price: Decimal = Field(..., description="base_price + modifier_total for one unit")
    currency: str = Field(..., description="ISO currency code")
    size_label: str = Field(..., description="Label of the size variant actually priced")
    line_quantity: int = Field(default=1, description="Units of the dish on the order line", ge=1)
    line_total: Decimal = Field(..., description="total_price * line_quantity")


class ValidationError(BaseModel):
    """One reason a selection is not admissible."""

    kind: ErrorKind
    group_id: str
    group_name: str | None = None
    option_id: str | None = None
    message: str


class ValidationResult(BaseModel):
    """Outcome of validating a selection against an effective schema."""

    is_valid: bool
    errors: list[ValidationError] = Field(default_factory=list)


class DishFailure(BaseModel):
    """A dish a batch operation could not be applied to."""

    dish_id: str
    reason: ErrorKind
    message: str


class BatchResult(BaseModel):
    """Per-dish manifest of a bulk template operation."""

    template_id: str
    succeeded: list[str] = Field(default_factory=list)
    failed: list[DishFailure] = Field(default_factory=list)

    @property
    def applied_count(self) -> int:
        return len(self.succeeded)

    @property
    def is_partial(self) -> bool:
        """Whether some, but not all, dishes succeeded."""
        return bool(self.succeeded) and bool(self.failed)


class DetachResult(BaseModel):
    """Outcome of breaking a dish's inheritance."""

    dish_id: str
    copied_groups: list[ModifierGroup] = Field(default_factory=list)
    template_group_ids: dict[str, str] = Field(
        default_factory=dict, description="Template id to id of its dish-owned copy"
    )
