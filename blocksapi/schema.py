"""
JSON Schema publishing for response models.

Response models are pydantic classes whose fields carry two extra
annotations, ``context`` (which request contexts include the field) and
``readonly``. ``item_schema`` turns such a model into a self-contained
schema document: definitions are inlined so clients and documentation
tools can read each property in place.
"""

from __future__ import annotations

from copy import deepcopy
from typing import Any, Dict, Iterable, List, Sequence, Type

from pydantic import BaseModel, Field

JSON_SCHEMA_DIALECT = "https://json-schema.org/draft/2020-12/schema"

VIEW_EDIT = ("view", "edit")
VIEW_EDIT_EMBED = ("view", "edit", "embed")


def api_field(default: Any = ..., *, description: str, context: Sequence[str] = VIEW_EDIT,
              readonly: bool = False, **kwargs: Any) -> Any:
    """``pydantic.Field`` carrying the ``context`` and ``readonly`` annotations."""
    extra = {"context": list(context), "readonly": readonly}
    return Field(default, description=description, json_schema_extra=extra, **kwargs)


def _inline_refs(node: Any, defs: Dict[str, Any]) -> Any:
    if isinstance(node, list):
        return [_inline_refs(item, defs) for item in node]
    if not isinstance(node, dict):
        return node
    if "allOf" in node and len(node["allOf"]) == 1:
        # Older pydantic wraps a $ref that has sibling keys in a single-item allOf.
        node = dict(node)
        node.update(node.pop("allOf")[0])
    if "$ref" in node:
        name = node["$ref"].rsplit("/", 1)[-1]
        resolved = _inline_refs(deepcopy(defs[name]), defs)
        for key, value in node.items():
            if key != "$ref":
                resolved[key] = _inline_refs(value, defs)
        return resolved
    return {key: _inline_refs(value, defs) for key, value in node.items()}


def _strip_titles(node: Any) -> Any:
    if isinstance(node, list):
        return [_strip_titles(item) for item in node]
    if not isinstance(node, dict):
        return node
    cleaned = {}
    for key, value in node.items():
        if key == "title" and isinstance(value, str):
            continue
        if key == "properties" and isinstance(value, dict):
            cleaned[key] = {name: _strip_titles(sub) for name, sub in value.items()}
        else:
            cleaned[key] = _strip_titles(value)
    return cleaned


def item_schema(model: Type[BaseModel], title: str) -> Dict[str, Any]:
    raw = model.model_json_schema(mode="serialization")
    defs = raw.pop("$defs", {})
    body = _strip_titles(_inline_refs(raw, defs))
    return {
        "$schema": JSON_SCHEMA_DIALECT,
        "title": title,
        "type": "object",
        "properties": body.get("properties", {}),
        "required": body.get("required", []),
        "additionalProperties": False,
    }


def args_schema(model: Type[BaseModel]) -> Dict[str, Any]:
    """Per-parameter schema of a query parameter model, keyed by name."""
    raw = model.model_json_schema()
    defs = raw.pop("$defs", {})
    body = _strip_titles(_inline_refs(raw, defs))
    required = set(body.get("required", []))
    args = {}
    for name, prop in body.get("properties", {}).items():
        prop["required"] = name in required
        args[name] = prop
    return args


def public_item_schema(namespace: str, endpoints: Iterable[Dict[str, Any]], schema: Dict[str, Any]) -> Dict[str, Any]:
    """Route index served for ``OPTIONS`` requests."""
    endpoints = list(endpoints)
    methods: List[str] = []
    for endpoint in endpoints:
        for method in endpoint.get("methods", []):
            if method not in methods:
                methods.append(method)
    return {
        "namespace": namespace,
        "methods": methods,
        "endpoints": endpoints,
        "schema": schema,
    }
