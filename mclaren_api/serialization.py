"""
Reference-preserving JSON.

Entity graphs returned by the API contain shared and cyclic references
(a driver points at its car, which lists its drivers). Plain recursive
encoding would duplicate shared objects and never terminate on cycles, so
objects are written once with a ``$id`` and every later occurrence becomes a
``{"$ref": ...}`` pointer. Lists are wrapped as ``{"$id": ..., "$values": [...]}``.

Example:
    >>> car = {"model": "MCL38"}
    >>> dumps_preserving({"first": car, "second": car})
    '{"$id":"1","first":{"$id":"2","model":"MCL38"},"second":{"$ref":"2"}}'
"""

import dataclasses
import json
from collections.abc import Iterator
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import InstanceState

ID_KEY = "$id"
REF_KEY = "$ref"
VALUES_KEY = "$values"

_SCALARS = (str, int, float, bool)


class ReferenceEncoder:
    """
    Converts an object graph into JSON-ready data, tracking object identity.

    One encoder covers one document; ids restart at "1" for each instance.
    """

    def __init__(self):
        self._ids: dict[int, str] = {}
        # Holds every visited object so id() values stay unique for the pass
        self._visited: list[Any] = []

    def encode(self, value: Any) -> Any:
        if value is None or isinstance(value, _SCALARS):
            return value
        if isinstance(value, Enum):
            return self.encode(value.value)
        if isinstance(value, (datetime, date, time)):
            return value.isoformat()
        if isinstance(value, (Decimal, UUID)):
            return str(value)

        existing = self._ids.get(id(value))
        if existing is not None:
            return {REF_KEY: existing}

        ref = self._register(value)
        if isinstance(value, (list, tuple, set, frozenset)):
            return {ID_KEY: ref, VALUES_KEY: [self.encode(item) for item in value]}

        body: dict[str, Any] = {ID_KEY: ref}
        for key, member in self._members(value):
            body[key] = self.encode(member)
        return body

    def _register(self, value: Any) -> str:
        ref = str(len(self._visited) + 1)
        self._ids[id(value)] = ref
        self._visited.append(value)
        return ref

    def _members(self, value: Any) -> Iterator[tuple[str, Any]]:
        if isinstance(value, dict):
            for key, member in value.items():
                yield str(key), member
            return

        state = sa_inspect(value, raiseerr=False)
        if isinstance(state, InstanceState):
            # Unloaded attributes would trigger I/O; they are left out
            unloaded = state.unloaded
            for attr in state.mapper.attrs:
                if attr.key not in unloaded:
                    yield attr.key, getattr(value, attr.key)
            return

        if isinstance(value, BaseModel):
            for name in type(value).model_fields:
                yield name, getattr(value, name)
            return

        if dataclasses.is_dataclass(value) and not isinstance(value, type):
            for f in dataclasses.fields(value):
                yield f.name, getattr(value, f.name)
            return

        raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def to_reference_tree(value: Any) -> Any:
    """Encode a graph into plain dicts and lists carrying $id/$ref markers."""
    return ReferenceEncoder().encode(value)


def dumps_preserving(value: Any, **kwargs: Any) -> str:
    """Serialize a graph to a JSON string, preserving shared references."""
    kwargs.setdefault("separators", (",", ":"))
    kwargs.setdefault("ensure_ascii", False)
    return json.dumps(to_reference_tree(value), **kwargs)


def resolve_references(data: Any) -> Any:
    """
    Rebuild a decoded $id/$ref document into Python objects.

    Every ``$ref`` resolves to the very same dict or list that carried the
    matching ``$id``, so shared references and cycles survive the round trip.

    Raises:
        ValueError: If a ``$ref`` points at an id that was never defined
    """
    objects: dict[str, Any] = {}

    def build(node: Any) -> Any:
        if isinstance(node, list):
            return [build(item) for item in node]
        if not isinstance(node, dict):
            return node

        if REF_KEY in node:
            ref = node[REF_KEY]
            if ref not in objects:
                raise ValueError(f"Unresolved reference: {ref}")
            return objects[ref]

        if VALUES_KEY in node:
            items: list[Any] = []
            if ID_KEY in node:
                objects[node[ID_KEY]] = items
            items.extend(build(item) for item in node[VALUES_KEY])
            return items

        result: dict[str, Any] = {}
        if ID_KEY in node:
            objects[node[ID_KEY]] = result
        for key, member in node.items():
            if key != ID_KEY:
                result[key] = build(member)
        return result

    return build(data)


def loads_preserving(text: str | bytes) -> Any:
    """Parse JSON produced by dumps_preserving back into an identity-preserving graph."""
    return resolve_references(json.loads(text))


class ReferenceJSONResponse(JSONResponse):
    """JSON response that writes its content in the reference-preserving format."""

    def render(self, content: Any) -> bytes:
        return dumps_preserving(content).encode("utf-8")
