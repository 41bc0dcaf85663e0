"""
Generic read-only resource controller.

A resource is described by a handful of functions rather than a class
hierarchy: how to check permissions, how to turn request parameters into
a query, how to fetch entities and how to project them. The controller
wires them into the two read operations (collection and single item) and
publishes the item schema.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Type

from pydantic import BaseModel

from .errors import RestError
from .models import User
from .schema import item_schema, public_item_schema

logger = logging.getLogger(__name__)

PermissionCheck = Callable[[User, str], Optional[RestError]]


@dataclass
class ResourceController:
    namespace: str
    rest_base: str
    item_model: Type[BaseModel]
    schema_title: str
    permission_check: PermissionCheck
    prepare_query: Callable[[Any], Any]
    fetch_items: Callable[[Any], Tuple[Sequence[Any], int]]
    fetch_item: Callable[[int], Any]
    project: Callable[[Any, str], BaseModel]
    invalid_id_code: str = "rest_invalid_id"

    def _check(self, user: User, action: str) -> None:
        error = self.permission_check(user, action)
        if error is not None:
            logger.info("Denied %s on %s/%s for user %s", action, self.namespace, self.rest_base, user.id)
            raise error

    def get_items(self, params: Any, user: User) -> Tuple[List[Dict[str, Any]], int, int]:
        """Return ``(rows, total, total_pages)`` for a collection request."""
        self._check(user, "list")
        query = self.prepare_query(params)
        entities, total = self.fetch_items(query)

        per_page = getattr(params, "per_page", None) or max(1, len(entities))
        total_pages = int(math.ceil(total / float(per_page))) if total else 0
        page = getattr(params, "page", 1)
        if total and page > total_pages:
            raise RestError(
                "rest_post_invalid_page_number",
                "The page number requested is larger than the number of pages available.",
                400,
            )

        context = getattr(params, "context", "view")
        rows = [self.project(entity, context).model_dump() for entity in entities]
        return rows, total, total_pages

    def get_item(self, item_id: int, context: str, user: User) -> Dict[str, Any]:
        self._check(user, "read")
        entity = self.fetch_item(item_id)
        if entity is None:
            raise RestError(self.invalid_id_code, "Invalid ID.", 404)
        return self.project(entity, context).model_dump()

    def get_item_schema(self) -> Dict[str, Any]:
        return item_schema(self.item_model, self.schema_title)

    def get_public_item_schema(self, endpoints: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
        return public_item_schema(self.namespace, endpoints, self.get_item_schema())
