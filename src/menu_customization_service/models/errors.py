"""Error taxonomy for the menu customization engine.

Structural lookup failures (missing dish, missing template, unpriceable size)
are raised as typed exceptions. Problems with customer selections are never
raised; the selection validator reports them as data using the same ErrorKind
values.
"""

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from menu_customization_service.models.selection_models import ValidationError


class ErrorKind(str, Enum):
    """Enumeration of engine error kinds."""

    UNKNOWN_SIZE_VARIANT = "unknown_size_variant"
    UNKNOWN_OPTION = "unknown_option"
    UNKNOWN_GROUP = "unknown_group"
    MISSING_REQUIRED_GROUP = "missing_required_group"
    BELOW_MINIMUM = "below_minimum"
    ABOVE_MAXIMUM = "above_maximum"
    CROSS_CATEGORY_MISMATCH = "cross_category_mismatch"
    DISH_NOT_FOUND = "dish_not_found"
    TEMPLATE_NOT_FOUND = "template_not_found"
    TEMPLATE_INACTIVE = "template_inactive"
    ALREADY_DETACHED = "already_detached"
    CONCURRENT_MODIFICATION = "concurrent_modification"


class MenuEngineError(Exception):
    """Base class for errors surfaced to callers of the engine."""

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message


class DishNotFoundError(MenuEngineError):
    def __init__(self, dish_id: str) -> None:
        super().__init__(ErrorKind.DISH_NOT_FOUND, f"Dish {dish_id} not found")
        self.dish_id = dish_id


class TemplateNotFoundError(MenuEngineError):
    def __init__(self, template_id: str) -> None:
        super().__init__(ErrorKind.TEMPLATE_NOT_FOUND, f"Template {template_id} not found")
        self.template_id = template_id


class TemplateInactiveError(MenuEngineError):
    """Raised when an inactive template is applied; inherited dishes would never see it."""

    def __init__(self, template_id: str) -> None:
        super().__init__(
            ErrorKind.TEMPLATE_INACTIVE,
            f"Template {template_id} is inactive and cannot be applied",
        )
        self.template_id = template_id


class UnknownSizeVariantError(MenuEngineError):
    """Raised when a dish has no price point at all to fall back to."""

    def __init__(self, dish_id: str, size_label: str | None) -> None:
        super().__init__(
            ErrorKind.UNKNOWN_SIZE_VARIANT,
            f"Dish {dish_id} has no price for size {size_label!r} and no variant to fall back to",
        )
        self.dish_id = dish_id
        self.size_label = size_label


class InheritanceAlreadyBrokenError(MenuEngineError):
    def __init__(self, dish_id: str) -> None:
        super().__init__(
            ErrorKind.ALREADY_DETACHED,
            f"Dish {dish_id} is already detached from its category templates",
        )
        self.dish_id = dish_id


class ConcurrentModificationError(MenuEngineError):
    def __init__(self, dish_id: str) -> None:
        super().__init__(
            ErrorKind.CONCURRENT_MODIFICATION,
            f"Dish {dish_id} was modified concurrently, reload and try again",
        )
        self.dish_id = dish_id


class SelectionRejectedError(MenuEngineError):
    """Raised by order placement when a selection fails validation.

    Carries the itemized validation errors so the caller can render them as
    field-level messages.
    """

    def __init__(self, dish_id: str, errors: list["ValidationError"]) -> None:
        super().__init__(
            errors[0].kind if errors else ErrorKind.UNKNOWN_OPTION,
            f"Selection for dish {dish_id} is not valid ({len(errors)} problem(s))",
        )
        self.dish_id = dish_id
        self.errors = errors
