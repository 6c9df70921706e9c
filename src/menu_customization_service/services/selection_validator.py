"""Selection validator: decides whether a customer selection is admissible.

The validator never raises. It gates order placement and must always be able
to explain why a selection was rejected.
"""

from menu_customization_service.models.errors import ErrorKind
from menu_customization_service.models.modifier_models import EffectiveSchema, ModifierGroup
from menu_customization_service.models.selection_models import (
    Selection,
    ValidationError,
    ValidationResult,
)


def validate(effective_schema: EffectiveSchema, selection: Selection) -> ValidationResult:
    """Validate a selection against a dish's effective schema.

    Groups are checked in schema order so error ordering is reproducible.
    Selected groups that are not in the schema are reported last, in
    selection order.

    Args:
        effective_schema: Resolved schema of the dish
        selection: Customer selection

    Returns:
        ValidationResult: is_valid plus itemized errors
    """
    errors: list[ValidationError] = []

    for group in effective_schema.groups:
        errors.extend(_validate_group(group, selection))

    known_group_ids = {group.id for group in effective_schema.groups}
    for group_id in selection.choices:
        if group_id not in known_group_ids:
            errors.append(
                ValidationError(
                    kind=ErrorKind.UNKNOWN_GROUP,
                    group_id=group_id,
                    message=f"Modifier group {group_id} is no longer available for this dish",
                )
            )

    return ValidationResult(is_valid=not errors, errors=errors)


def _validate_group(group: ModifierGroup, selection: Selection) -> list[ValidationError]:
    errors: list[ValidationError] = []
    quantities = selection.quantities_for(group.id)

    chosen = 0
    unknown_option_ids: list[str] = []
    for option_id, quantity in quantities.items():
        if group.option(option_id) is None:
            unknown_option_ids.append(option_id)
        else:
            chosen += quantity

    # A group without options can never be satisfied, so it is never enforced
    if group.options:
        if group.is_required and chosen == 0:
            errors.append(
                _error(
                    ErrorKind.MISSING_REQUIRED_GROUP,
                    group,
                    f"Choose at least {max(group.min_selections, 1)} {group.name}",
                )
            )
        elif chosen < group.min_selections:
            errors.append(
                _error(
                    ErrorKind.BELOW_MINIMUM,
                    group,
                    f"Choose at least {group.min_selections} {group.name}",
                )
            )

        if group.max_selections != 0 and chosen > group.max_selections:
            errors.append(
                _error(
                    ErrorKind.ABOVE_MAXIMUM,
                    group,
                    f"Choose at most {group.max_selections} {group.name}",
                )
            )

    for option_id in unknown_option_ids:
        errors.append(
            _error(
                ErrorKind.UNKNOWN_OPTION,
                group,
                f"Option {option_id} is no longer available in {group.name}",
                option_id=option_id,
            )
        )

    return errors


def _error(
    kind: ErrorKind, group: ModifierGroup, message: str, option_id: str | None = None
) -> ValidationError:
    return ValidationError(
        kind=kind,
        group_id=group.id,
        group_name=group.name,
        option_id=option_id,
        message=message,
    )
