# Copyright (C) 2024 Josua Krause
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Interface for entity storage. An entity storage persists flat JSON
objects whose layout is described by an entity schema. Entities are addressed
by the value of their primary key property."""
from collections.abc import Mapping
from typing import Any, Literal, TypedDict

from typing_extensions import NotRequired


PropertyType = Literal["string", "integer", "boolean"]
"""The type of an entity property."""


PROPERTY_TYPES: dict[PropertyType, type] = {
    "string": str,
    "integer": int,
    "boolean": bool,
}
"""The python types of entity properties."""


EntityProperty = TypedDict('EntityProperty', {
    "property": str,
    "type": PropertyType,
    "is_primary": NotRequired[bool],
    "optional": NotRequired[bool],
})
"""A property of an entity."""


EntitySchema = TypedDict('EntitySchema', {
    "type": str,
    "properties": list[EntityProperty],
})
"""The layout of an entity. Exactly one property must be the primary key."""


def get_primary_key(schema: EntitySchema) -> str:
    """
    Retrieves the name of the primary key property.

    Args:
        schema (EntitySchema): The schema.

    Raises:
        ValueError: If the schema does not have exactly one primary key.

    Returns:
        str: The name of the primary key property.
    """
    primary = [
        prop["property"]
        for prop in schema["properties"]
        if prop.get("is_primary", False)
    ]
    if len(primary) != 1:
        raise ValueError(
            f"schema {schema['type']} must have exactly one primary key: "
            f"{primary}")
    return primary[0]


def validate_entity(
        schema: EntitySchema, entity: Mapping[str, Any]) -> dict[str, Any]:
    """
    Validates an entity against a schema.

    Args:
        schema (EntitySchema): The schema.
        entity (Mapping[str, Any]): The entity.

    Raises:
        ValueError: If the entity does not conform to the schema.

    Returns:
        dict[str, Any]: A copy of the entity that only contains properties of
            the schema.
    """
    res: dict[str, Any] = {}
    for prop in schema["properties"]:
        name = prop["property"]
        value = entity.get(name)
        if value is None:
            if prop.get("optional", False) and not prop.get("is_primary"):
                continue
            raise ValueError(f"{schema['type']}.{name} is missing")
        ptype = PROPERTY_TYPES[prop["type"]]
        # NOTE: bool is a subclass of int
        if not isinstance(value, ptype) or (
                ptype is int and isinstance(value, bool)):
            raise ValueError(
                f"{schema['type']}.{name} must be {prop['type']}: {value!r}")
        res[name] = value
    extra = set(entity.keys()).difference(res.keys()).difference(
        prop["property"] for prop in schema["properties"])
    if extra:
        raise ValueError(f"unknown properties for {schema['type']}: {extra}")
    return res


class EntityStorage:
    """Persists entities of a single schema. Implementations must make `set`,
    `get`, and `remove` of a single entity atomic. No guarantees are given
    across multiple entities."""
    def __init__(self, schema: EntitySchema) -> None:
        """
        Creates an entity storage.

        Args:
            schema (EntitySchema): The schema of the stored entities.
        """
        self._schema = schema
        self._primary_key = get_primary_key(schema)

    def get_schema(self) -> EntitySchema:
        """
        The schema of the stored entities.

        Returns:
            EntitySchema: The schema.
        """
        return self._schema

    def primary_key(self) -> str:
        """
        The name of the primary key property.

        Returns:
            str: The property name.
        """
        return self._primary_key

    def set(self, entity: Mapping[str, Any]) -> None:
        """
        Stores an entity. An existing entity with the same primary key is
        replaced.

        Args:
            entity (Mapping[str, Any]): The entity.

        Raises:
            ValueError: If the entity does not match the schema.
        """
        obj = validate_entity(self._schema, entity)
        self.do_set(f"{obj[self._primary_key]}", obj)

    def get(self, key: str) -> dict[str, Any] | None:
        """
        Retrieves an entity.

        Args:
            key (str): The value of the primary key.

        Returns:
            dict[str, Any] | None: The entity or None if it doesn't exist.
        """
        return self.do_get(key)

    def remove(self, key: str) -> bool:
        """
        Removes an entity.

        Args:
            key (str): The value of the primary key.

        Returns:
            bool: Whether the entity existed.
        """
        return self.do_remove(key)

    def do_set(self, key: str, entity: dict[str, Any]) -> None:
        """
        Stores a validated entity.

        Args:
            key (str): The value of the primary key.
            entity (dict[str, Any]): The entity.
        """
        raise NotImplementedError()

    def do_get(self, key: str) -> dict[str, Any] | None:
        """
        Retrieves an entity.

        Args:
            key (str): The value of the primary key.

        Returns:
            dict[str, Any] | None: The entity or None if it doesn't exist.
        """
        raise NotImplementedError()

    def do_remove(self, key: str) -> bool:
        """
        Removes an entity.

        Args:
            key (str): The value of the primary key.

        Returns:
            bool: Whether the entity existed.
        """
        raise NotImplementedError()
