"""Custom metrics for the menu customization service."""

from opentelemetry import metrics

# Get meter for menu customization service
meter = metrics.get_meter("menu-customization-svc")

# Template propagation outcomes, one increment per dish
template_application_counter = meter.create_counter(
    name="menu_template_application_total",
    description="Total number of per-dish template applications by outcome",
    unit="1",
)

inheritance_break_counter = meter.create_counter(
    name="menu_inheritance_break_total",
    description="Total number of dishes detached from their category templates",
    unit="1",
)

template_deletion_counter = meter.create_counter(
    name="menu_template_deletion_total",
    description="Total number of category templates deleted",
    unit="1",
)

selection_validation_counter = meter.create_counter(
    name="menu_selection_validation_total",
    description="Total number of customer selections validated by outcome",
    unit="1",
)

# Size of the manifest returned by bulk operations
batch_size_histogram = meter.create_histogram(
    name="menu_template_batch_size",
    description="Number of dishes touched by a bulk template operation",
    unit="1",
)


def record_template_application(outcome: str, reason: str | None = None) -> None:
    """Record the outcome of applying a template to one dish.

    Args:
        outcome: "succeeded" or "failed"
        reason: Error kind value when the application failed
    """
    attributes = {"outcome": outcome}
    if reason is not None:
        attributes["reason"] = reason
    template_application_counter.add(1, attributes)


def record_batch_size(operation: str, dish_count: int) -> None:
    """Record how many dishes a bulk operation touched.

    Args:
        operation: Operation name (e.g. "apply_to_dishes", "apply_to_category")
        dish_count: Number of dishes in the batch
    """
    batch_size_histogram.record(dish_count, {"operation": operation})


def record_inheritance_break() -> None:
    inheritance_break_counter.add(1)


def record_template_deletion() -> None:
    template_deletion_counter.add(1)


def record_selection_validation(is_valid: bool) -> None:
    """Record a selection validation.

    Args:
        is_valid: Whether the selection was admissible
    """
    selection_validation_counter.add(1, {"valid": is_valid})
