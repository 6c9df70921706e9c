"""Storage repositories for dishes, category templates, and categories.

The engine never performs I/O itself; services talk to a MenuRepository.
Every dish mutation goes through update_dish, a single atomic
read-modify-write keyed by dish id. Following the pattern of the rest of the
service, expected storage failures are reported with None/False rather than
exceptions.
"""

import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from botocore.exceptions import ClientError
from mypy_boto3_dynamodb.service_resource import DynamoDBServiceResource, Table

from menu_customization_service.models.modifier_models import Category, CategoryTemplate, Dish

logger = logging.getLogger(__name__)

DishMutator = Callable[[Dish], Dish]


class MenuRepository(ABC):
    """Storage contract the engine's services depend on."""

    @abstractmethod
    def get_dish(self, dish_id: str) -> Dish | None:
        pass

    @abstractmethod
    def save_dish(self, dish: Dish) -> bool:
        pass

    @abstractmethod
    def list_dishes_in_category(self, category_id: str) -> list[Dish]:
        pass

    @abstractmethod
    def update_dish(self, dish_id: str, mutator: DishMutator) -> Dish | None:
        """Atomically apply mutator to the stored dish.

        The mutator receives the current dish and returns its replacement. If the
        mutator raises, nothing is written and the exception propagates.

        Args:
            dish_id: Dish to update
            mutator: Pure function from current dish to new dish

        Returns:
            The stored dish, or None if the dish is missing or the write lost a
            race with another writer
        """
        pass

    @abstractmethod
    def get_template(self, template_id: str) -> CategoryTemplate | None:
        pass

    @abstractmethod
    def save_template(self, template: CategoryTemplate) -> bool:
        pass

    @abstractmethod
    def list_templates_for_category(self, category_id: str) -> list[CategoryTemplate]:
        pass

    @abstractmethod
    def delete_template(self, template_id: str) -> bool:
        pass

    @abstractmethod
    def get_category(self, category_id: str) -> Category | None:
        pass

    @abstractmethod
    def save_category(self, category: Category) -> bool:
        pass

    @abstractmethod
    def list_categories_for_restaurant(self, restaurant_id: str) -> list[Category]:
        pass


class InMemoryMenuRepository(MenuRepository):
    """Process-local repository used for tests and local development.

    Dish updates are serialized per dish with a lock, so concurrent updates of
    the same dish never interleave.
    """

    def __init__(self) -> None:
        self._dishes: dict[str, Dish] = {}
        self._templates: dict[str, CategoryTemplate] = {}
        self._categories: dict[str, Category] = {}
        self._guard = threading.Lock()
        self._dish_locks: dict[str, threading.Lock] = {}

    def _lock_for(self, dish_id: str) -> threading.Lock:
        with self._guard:
            return self._dish_locks.setdefault(dish_id, threading.Lock())

    def get_dish(self, dish_id: str) -> Dish | None:
        return self._dishes.get(dish_id)

    def save_dish(self, dish: Dish) -> bool:
        with self._lock_for(dish.id):
            self._dishes[dish.id] = dish
        return True

    def list_dishes_in_category(self, category_id: str) -> list[Dish]:
        return [dish for dish in self._dishes.values() if dish.category_id == category_id]

    def update_dish(self, dish_id: str, mutator: DishMutator) -> Dish | None:
        with self._lock_for(dish_id):
            current = self._dishes.get(dish_id)
            if current is None:
                return None
            updated = mutator(current)
            self._dishes[dish_id] = updated
            return updated

    def get_template(self, template_id: str) -> CategoryTemplate | None:
        return self._templates.get(template_id)

    def save_template(self, template: CategoryTemplate) -> bool:
        self._templates[template.id] = template
        return True

    def list_templates_for_category(self, category_id: str) -> list[CategoryTemplate]:
        return [t for t in self._templates.values() if t.category_id == category_id]

    def delete_template(self, template_id: str) -> bool:
        return self._templates.pop(template_id, None) is not None

    def get_category(self, category_id: str) -> Category | None:
        return self._categories.get(category_id)

    def save_category(self, category: Category) -> bool:
        self._categories[category.id] = category
        return True

    def list_categories_for_restaurant(self, restaurant_id: str) -> list[Category]:
        return [c for c in self._categories.values() if c.restaurant_id == restaurant_id]


class DynamoDBMenuRepository(MenuRepository):
    """DynamoDB-backed repository.

    Uses one table per entity. Each item stores its key attributes plus the
    model serialized as a JSON payload. Dish items also carry a version number;
    update_dish writes with a condition on it (optimistic concurrency).

    Expected indexes:
        dishes table: category_id-index (partition key category_id)
        templates table: category_id-index (partition key category_id)
        categories table: restaurant_id-index (partition key restaurant_id)
    """

    def __init__(
        self,
        dynamodb_resource: DynamoDBServiceResource,
        dishes_table_name: str,
        templates_table_name: str,
        categories_table_name: str,
    ) -> None:
        """Initialize repository.

        Args:
            dynamodb_resource: Boto3 DynamoDB resource
            dishes_table_name: Name of the dishes table
            templates_table_name: Name of the category templates table
            categories_table_name: Name of the categories table
        """
        self.dynamodb = dynamodb_resource
        self.dishes_table: Table = dynamodb_resource.Table(dishes_table_name)
        self.templates_table: Table = dynamodb_resource.Table(templates_table_name)
        self.categories_table: Table = dynamodb_resource.Table(categories_table_name)

    @staticmethod
    def _query_all(table: Table, **kwargs: Any) -> list[dict]:
        """Run a query and follow LastEvaluatedKey until every page is read."""
        items: list[dict] = []
        while True:
            response = table.query(**kwargs)
            items.extend(response.get("Items", []))
            if "LastEvaluatedKey" not in response:
                return items
            kwargs["ExclusiveStartKey"] = response["LastEvaluatedKey"]

    # Dishes

    def get_dish(self, dish_id: str) -> Dish | None:
        item = self._get_dish_item(dish_id)
        if item is None:
            return None
        return Dish.model_validate_json(item["payload"])

    def save_dish(self, dish: Dish) -> bool:
        """Save a dish unconditionally, resetting its version."""
        try:
            self.dishes_table.put_item(Item=self._dish_item(dish, version=1))
            return True

        except ClientError as e:
            logger.error(f"Failed to save dish {dish.id}: {e}")  # pragma: no cover
            return False

    def list_dishes_in_category(self, category_id: str) -> list[Dish]:
        try:
            items = self._query_all(
                self.dishes_table,
                IndexName="category_id-index",
                KeyConditionExpression="category_id = :cid",
                ExpressionAttributeValues={":cid": category_id},
            )

            return [Dish.model_validate_json(item["payload"]) for item in items]

        except ClientError as e:
            logger.error(f"Failed to list dishes for category {category_id}: {e}")  # pragma: no cover
            return []

    def update_dish(self, dish_id: str, mutator: DishMutator) -> Dish | None:
        item = self._get_dish_item(dish_id, consistent=True)
        if item is None:
            return None

        version = int(item.get("version", 0))
        updated = mutator(Dish.model_validate_json(item["payload"]))

        try:
            self.dishes_table.put_item(
                Item=self._dish_item(updated, version=version + 1),
                ConditionExpression="#version = :expected",
                ExpressionAttributeNames={"#version": "version"},
                ExpressionAttributeValues={":expected": version},
            )
            return updated

        except ClientError as e:
            if e.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException":
                logger.warning(f"Concurrent update detected for dish {dish_id}")
            else:
                logger.error(f"Failed to update dish {dish_id}: {e}")  # pragma: no cover
            return None

    def _get_dish_item(self, dish_id: str, consistent: bool = False) -> dict | None:
        try:
            response = self.dishes_table.get_item(
                Key={"dish_id": dish_id}, ConsistentRead=consistent
            )
            return response.get("Item")

        except ClientError as e:
            logger.error(f"Failed to get dish {dish_id}: {e}")  # pragma: no cover
            return None

    @staticmethod
    def _dish_item(dish: Dish, version: int) -> dict:
        return {
            "dish_id": dish.id,
            "category_id": dish.category_id,
            "version": version,
            "payload": dish.model_dump_json(),
        }

    # Templates

    def get_template(self, template_id: str) -> CategoryTemplate | None:
        try:
            response = self.templates_table.get_item(Key={"template_id": template_id})

            if "Item" not in response:
                return None

            return CategoryTemplate.model_validate_json(response["Item"]["payload"])

        except ClientError as e:
            logger.error(f"Failed to get template {template_id}: {e}")  # pragma: no cover
            return None

    def save_template(self, template: CategoryTemplate) -> bool:
        try:
            self.templates_table.put_item(
                Item={
                    "template_id": template.id,
                    "category_id": template.category_id,
                    "payload": template.model_dump_json(),
                }
            )
            return True

        except ClientError as e:
            logger.error(f"Failed to save template {template.id}: {e}")  # pragma: no cover
            return False

    def list_templates_for_category(self, category_id: str) -> list[CategoryTemplate]:
        try:
            items = self._query_all(
                self.templates_table,
                IndexName="category_id-index",
                KeyConditionExpression="category_id = :cid",
                ExpressionAttributeValues={":cid": category_id},
            )

            return [CategoryTemplate.model_validate_json(item["payload"]) for item in items]

        except ClientError as e:
            logger.error(f"Failed to list templates for category {category_id}: {e}")  # pragma: no cover
            return []

    def delete_template(self, template_id: str) -> bool:
        try:
            self.templates_table.delete_item(Key={"template_id": template_id})
            return True

        except ClientError as e:
            logger.error(f"Failed to delete template {template_id}: {e}")  # pragma: no cover
            return False

    # Categories

    def get_category(self, category_id: str) -> Category | None:
        try:
            response = self.categories_table.get_item(Key={"category_id": category_id})

            if "Item" not in response:
                return None

            return Category.model_validate_json(response["Item"]["payload"])

        except ClientError as e:
            logger.error(f"Failed to get category {category_id}: {e}")  # pragma: no cover
            return None

    def save_category(self, category: Category) -> bool:
        try:
            self.categories_table.put_item(
                Item={
                    "category_id": category.id,
                    "restaurant_id": category.restaurant_id,
                    "payload": category.model_dump_json(),
                }
            )
            return True

        except ClientError as e:
            logger.error(f"Failed to save category {category.id}: {e}")  # pragma: no cover
            return False

    def list_categories_for_restaurant(self, restaurant_id: str) -> list[Category]:
        try:
            items = self._query_all(
                self.categories_table,
                IndexName="restaurant_id-index",
                KeyConditionExpression="restaurant_id = :rid",
                ExpressionAttributeValues={":rid": restaurant_id},
            )

            return [Category.model_validate_json(item["payload"]) for item in items]

        except ClientError as e:
            logger.error(f"Failed to list categories for restaurant {restaurant_id}: {e}")  # pragma: no cover
            return []
