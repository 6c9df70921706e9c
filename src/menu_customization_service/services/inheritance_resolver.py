"""Inheritance resolver: computes the effective modifier groups of a dish."""

from collections.abc import Iterable

from menu_customization_service.models.modifier_models import (
    CategoryTemplate,
    Dish,
    EffectiveSchema,
    InheritanceState,
)


def resolve(dish: Dish, category_templates: Iterable[CategoryTemplate]) -> EffectiveSchema:
    """Resolve the effective schema of a dish.

    Inherited dishes see the active templates of their own category, in the
    category's display order, followed by their custom groups in creation order.
    Detached dishes see only their custom groups.

    This is a pure function; it is called on every menu read.

    Args:
        dish: The dish to resolve
        category_templates: Templates of the dish's category. Templates of other
            categories and inactive templates are ignored.

    Returns:
        EffectiveSchema: The groups offered to the customer
    """
    if dish.inheritance_state == InheritanceState.DETACHED:
        return EffectiveSchema(dish_id=dish.id, groups=list(dish.custom_groups))

    applicable = [
        template
        for template in category_templates
        if template.category_id == dish.category_id and template.is_active
    ]
    # sorted() is stable, so equal display_order keeps the caller's order
    applicable = sorted(applicable, key=lambda template: template.display_order)

    groups = [template.as_modifier_group() for template in applicable]
    groups.extend(dish.custom_groups)
    return EffectiveSchema(dish_id=dish.id, groups=groups)
