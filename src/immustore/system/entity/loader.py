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
"""Loads an entity storage from a given configuration."""
from typing import Literal, TypedDict

from redipy import RedisConfig
from typing_extensions import NotRequired

from immustore.system.entity.redis import RedisBackend
from immustore.system.entity.storage import EntitySchema, EntityStorage
from immustore.system.plugins import create_plugin, is_plugin_name


MemoryEntityStorageModule = TypedDict('MemoryEntityStorageModule', {
    "name": Literal["memory"],
})
"""An in-memory entity storage. Entities do not outlive the process."""
RedisEntityStorageModule = TypedDict('RedisEntityStorageModule', {
    "name": Literal["redis"],
    "cfg": RedisConfig,
    "backend": NotRequired[RedisBackend],
})
"""A redis based entity storage. `cfg` defines the redis connection settings
and `backend` can switch to redipy's in-process redis implementation."""


EntityStorageModule = MemoryEntityStorageModule | RedisEntityStorageModule
"""Configuration of an entity storage."""


def load_entity_storage(
        module: EntityStorageModule, schema: EntitySchema) -> EntityStorage:
    """
    Loads the entity storage for the given configuration.

    Args:
        module (EntityStorageModule): The entity storage configuration.
        schema (EntitySchema): The schema of the entities to store.

    Raises:
        ValueError: If the configuration is invalid.

    Returns:
        EntityStorage: The entity storage.
    """
    # pylint: disable=import-outside-toplevel
    if is_plugin_name(module["name"]):
        return create_plugin(EntityStorage, module, schema=schema)
    if module["name"] == "memory":
        from immustore.system.entity.memory import MemoryEntityStorage
        return MemoryEntityStorage(schema)
    if module["name"] == "redis":
        from immustore.system.entity.redis import RedisEntityStorage
        return RedisEntityStorage(
            schema, module["cfg"], backend=module.get("backend", "redis"))
    raise ValueError(f"unknown entity storage: {module['name']}")
