"""Price calculator: base/size price plus selected modifiers.

All arithmetic runs on integer minor units; decimals only appear at the
boundary. The calculator is best-effort with respect to the selection: unknown
groups and options contribute nothing, and reporting them is the selection
validator's job.
"""

from decimal import ROUND_HALF_UP, Decimal

from menu_customization_service.models.errors import UnknownSizeVariantError
from menu_customization_service.models.modifier_models import (
    DEFAULT_CURRENCY,
    Dish,
    EffectiveSchema,
    ModifierGroup,
    SizeVariant,
    from_minor_units,
    to_minor_units,
)
from menu_customization_service.models.selection_models import (
    OptionChoice,
    PriceBreakdown,
    Selection,
)


def calculate_price(
    dish: Dish,
    size_label: str | None,
    selection: Selection,
    effective_schema: EffectiveSchema,
    line_quantity: int = 1,
    currency: str = DEFAULT_CURRENCY,
) -> PriceBreakdown:
    """Calculate the price of a dish configuration.

    Args:
        dish: The dish being ordered
        size_label: Requested size; falls back to the dish's first variant
        selection: Customer selection
        effective_schema: Resolved schema of the dish, supplied by the caller
        line_quantity: Units of the configured dish on the order line
        currency: Currency code reported in the breakdown

    Returns:
        PriceBreakdown: Base, modifier, unit and line totals

    Raises:
        UnknownSizeVariantError: If the dish has no price point at all
    """
    variant = select_size_variant(dish, size_label)
    base_minor = to_minor_units(variant.price)

    modifier_minor = 0
    for group_id, choices in selection.choices.items():
        group = effective_schema.group(group_id)
        if group is None:
            continue
        modifier_minor += _group_contribution(group, choices)

    total_minor = base_minor + modifier_minor
    return PriceBreakdown(
        base_price=from_minor_units(base_minor),
        modifier_total=from_minor_units(modifier_minor),
        total_price=from_minor_units(total_minor),
        currency=currency,
        size_label=variant.label,
        line_quantity=line_quantity,
        line_total=from_minor_units(total_minor * line_quantity),
    )


def select_size_variant(dish: Dish, size_label: str | None) -> SizeVariant:
    """Pick the size variant to price.

    Matches the label exactly, then ignoring case and surrounding whitespace,
    and otherwise falls back to the first variant.

    Raises:
        UnknownSizeVariantError: If the dish has no variants to fall back to
    """
    variants = dish.price_variants()
    if not variants:
        raise UnknownSizeVariantError(dish.id, size_label)

    if size_label is not None:
        for variant in variants:
            if variant.label == size_label:
                return variant
        wanted = size_label.strip().casefold()
        for variant in variants:
            if variant.label.strip().casefold() == wanted:
                return variant

    return variants[0]


def _group_contribution(group: ModifierGroup, choices: list[OptionChoice]) -> int:
    """Sum the contributions of one group's choices in minor units.

    For an option included by default, only the first unit across all of its
    choices is free; repeated units are charged in full.
    """
    free_units_left: dict[str, int] = {}
    total = 0
    for choice in choices:
        option = group.option(choice.option_id)
        if option is None:
            continue
        if option.id not in free_units_left:
            free_units_left[option.id] = 1 if option.is_included_by_default else 0

        free_units = min(free_units_left[option.id], choice.quantity)
        free_units_left[option.id] -= free_units
        paid_units = choice.quantity - free_units

        total += _scaled(to_minor_units(option.price_delta) * paid_units, choice.multiplier)
    return total


def _scaled(minor: int, multiplier: Decimal) -> int:
    if multiplier == 1:
        return minor
    return int((Decimal(minor) * multiplier).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
