"""Template propagation service for the admin menu builder.

Applies category templates to dishes in bulk, detaches dishes from their
category templates, and deletes templates. Bulk operations are sequences of
independent per-dish updates: one dish failing never aborts the batch, and the
caller gets a manifest of what succeeded and what failed.
"""

import logging
import uuid
from collections.abc import Iterable

from menu_customization_service.models.errors import (
    ConcurrentModificationError,
    DishNotFoundError,
    ErrorKind,
    InheritanceAlreadyBrokenError,
    TemplateInactiveError,
    TemplateNotFoundError,
)
from menu_customization_service.models.modifier_models import (
    CategoryTemplate,
    Dish,
    DishCustomOrigin,
    InheritanceState,
    ModifierGroup,
)
from menu_customization_service.models.selection_models import (
    BatchResult,
    DetachResult,
    DishFailure,
)
from menu_customization_service.observability import metrics
from menu_customization_service.observability.decorators import traced
from menu_customization_service.repositories.menu_repositories import MenuRepository
from menu_customization_service.services.inheritance_resolver import resolve

logger = logging.getLogger(__name__)


def new_group_id() -> str:
    """Generate an id for a dish-owned modifier group."""
    return f"grp_{uuid.uuid4().hex[:12]}"


def copy_group_to_dish(group: CategoryTemplate | ModifierGroup, dish_id: str, template_id: str) -> ModifierGroup:
    """Deep-copy a template (or a group projected from one) into a dish-owned group.

    The copy gets a fresh id and keeps the name, constraints, and options.

    Args:
        group: Template or template-origin group to copy
        dish_id: Dish that will own the copy
        template_id: Template the copy is materialized from

    Returns:
        ModifierGroup: Independent dish-owned group
    """
    return ModifierGroup(
        id=new_group_id(),
        name=group.name,
        is_required=group.is_required,
        min_selections=group.min_selections,
        max_selections=group.max_selections,
        options=[option.model_copy() for option in group.options],
        origin=DishCustomOrigin(dish_id=dish_id, source_template_id=template_id),
    )


class TemplatePropagationService:
    """Service behind the admin menu builder's template actions."""

    def __init__(self, repository: MenuRepository) -> None:
        """Initialize the TemplatePropagationService.

        Args:
            repository: Storage for dishes and templates
        """
        self.repository = repository

    @traced("menu.apply_template_to_dishes")
    def apply_template_to_dishes(self, template_id: str, dish_ids: Iterable[str]) -> BatchResult:
        """Apply a template to a set of dishes.

        Inherited dishes of the template's category already see the template and
        need no change. Detached dishes get a fresh dish-owned copy of the
        template's current options appended to their custom groups; earlier
        copies are left as they are.

        Args:
            template_id: Template to apply
            dish_ids: Dishes to apply it to (duplicates are collapsed)

        Returns:
            BatchResult: Manifest of per-dish outcomes

        Raises:
            TemplateNotFoundError: If the template does not exist
            TemplateInactiveError: If the template is inactive
        """
        template = self._get_applicable_template(template_id)
        ordered_ids = list(dict.fromkeys(dish_ids))
        metrics.record_batch_size("apply_to_dishes", len(ordered_ids))

        result = BatchResult(template_id=template_id)
        for dish_id in ordered_ids:
            failure = self._apply_to_dish(template, dish_id)
            if failure is None:
                result.succeeded.append(dish_id)
                metrics.record_template_application("succeeded")
            else:
                logger.warning(
                    f"Template {template_id} not applied to dish {dish_id}: {failure.message}"
                )
                result.failed.append(failure)
                metrics.record_template_application("failed", failure.reason.value)

        logger.info(
            f"Template {template_id} applied to {result.applied_count} of "
            f"{len(ordered_ids)} dishes ({len(result.failed)} failed)"
        )
        return result

    @traced("menu.apply_template_to_category")
    def apply_template_to_category(self, template_id: str, category_id: str) -> BatchResult:
        """Apply a template to every dish currently in a category.

        Dishes added to the category later pick the template up through
        inheritance without re-application.

        Args:
            template_id: Template to apply
            category_id: Category whose dishes receive it

        Returns:
            BatchResult: Manifest of per-dish outcomes

        Raises:
            TemplateNotFoundError: If the template does not exist
            TemplateInactiveError: If the template is inactive
        """
        self._get_applicable_template(template_id)
        dishes = sorted(
            self.repository.list_dishes_in_category(category_id),
            key=lambda dish: dish.display_order,
        )
        return self.apply_template_to_dishes(template_id, [dish.id for dish in dishes])

    @traced("menu.break_inheritance")
    def break_inheritance(self, dish_id: str) -> DetachResult:
        """Detach a dish from its category templates.

        Every inherited group is snapshotted into a dish-owned copy, placed ahead
        of the dish's existing custom groups so the effective schema is
        unchanged, and the dish is marked detached. The update is atomic.

        Args:
            dish_id: Dish to detach

        Returns:
            DetachResult: The copies created and the template they came from

        Raises:
            DishNotFoundError: If the dish does not exist or was deleted meanwhile
            InheritanceAlreadyBrokenError: If the dish is already detached
            ConcurrentModificationError: If storage rejected the write
        """
        dish = self.repository.get_dish(dish_id)
        if dish is None:
            raise DishNotFoundError(dish_id)
        if dish.inheritance_state == InheritanceState.DETACHED:
            raise InheritanceAlreadyBrokenError(dish_id)

        templates = self.repository.list_templates_for_category(dish.category_id)
        copies: dict[str, ModifierGroup] = {}

        def detach(current: Dish) -> Dish:
            if current.inheritance_state == InheritanceState.DETACHED:
                raise InheritanceAlreadyBrokenError(current.id)
            copies.clear()
            for group in resolve(current, templates).groups:
                if group.is_inherited:
                    copies[group.id] = copy_group_to_dish(group, current.id, group.id)
            return current.model_copy(
                update={
                    "inheritance_state": InheritanceState.DETACHED,
                    "custom_groups": [*copies.values(), *current.custom_groups],
                }
            )

        if self.repository.update_dish(dish_id, detach) is None:
            if self.repository.get_dish(dish_id) is None:
                raise DishNotFoundError(dish_id)
            raise ConcurrentModificationError(dish_id)

        metrics.record_inheritance_break()
        logger.info(f"Dish {dish_id} detached with {len(copies)} copied template group(s)")
        return DetachResult(
            dish_id=dish_id,
            copied_groups=list(copies.values()),
            template_group_ids={template_id: group.id for template_id, group in copies.items()},
        )

    @traced("menu.delete_template")
    def delete_template(self, template_id: str) -> None:
        """Delete a category template.

        Detached dishes keep their copies; inherited dishes stop seeing the
        template on their next resolution.

        Args:
            template_id: Template to delete

        Raises:
            TemplateNotFoundError: If the template does not exist or could not be deleted
        """
        self._get_template(template_id)
        if not self.repository.delete_template(template_id):
            raise TemplateNotFoundError(template_id)

        metrics.record_template_deletion()
        logger.info(f"Template {template_id} deleted")

    def _get_template(self, template_id: str) -> CategoryTemplate:
        template = self.repository.get_template(template_id)
        if template is None:
            raise TemplateNotFoundError(template_id)
        return template

    def _get_applicable_template(self, template_id: str) -> CategoryTemplate:
        template = self._get_template(template_id)
        if not template.is_active:
            raise TemplateInactiveError(template_id)
        return template

    def _apply_to_dish(self, template: CategoryTemplate, dish_id: str) -> DishFailure | None:
        """Apply a template to one dish; returns a failure entry or None on success."""
        dish = self.repository.get_dish(dish_id)
        if dish is None:
            return DishFailure(
                dish_id=dish_id,
                reason=ErrorKind.DISH_NOT_FOUND,
                message=f"Dish {dish_id} not found",
            )

        if dish.category_id != template.category_id:
            return DishFailure(
                dish_id=dish_id,
                reason=ErrorKind.CROSS_CATEGORY_MISMATCH,
                message=(
                    f"Template {template.id} belongs to category {template.category_id}, "
                    f"dish is in category {dish.category_id}"
                ),
            )

        if dish.inheritance_state == InheritanceState.INHERITED:
            return None

        def attach_copy(current: Dish) -> Dish:
            if current.inheritance_state == InheritanceState.INHERITED:
                return current
            copy = copy_group_to_dish(template, current.id, template.id)
            return current.model_copy(update={"custom_groups": [*current.custom_groups, copy]})

        if self.repository.update_dish(dish_id, attach_copy) is None:
            if self.repository.get_dish(dish_id) is None:
                return DishFailure(
                    dish_id=dish_id,
                    reason=ErrorKind.DISH_NOT_FOUND,
                    message=f"Dish {dish_id} was deleted during the update",
                )
            return DishFailure(
                dish_id=dish_id,
                reason=ErrorKind.CONCURRENT_MODIFICATION,
                message=f"Dish {dish_id} was modified concurrently",
            )
        return None
