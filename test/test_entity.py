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
"""Tests for entity storages."""
import pytest

from immustore.system.entity.loader import load_entity_storage
from immustore.system.entity.memory import MemoryEntityStorage
from immustore.system.entity.redis import RedisEntityStorage
from immustore.system.entity.storage import (
    EntitySchema,
    EntityStorage,
    get_primary_key,
    validate_entity,
)


TEST_SCHEMA: EntitySchema = {
    "type": "TestEntity",
    "properties": [
        {
            "property": "key",
            "type": "string",
            "is_primary": True,
        },
        {
            "property": "count",
            "type": "integer",
        },
        {
            "property": "flag",
            "type": "boolean",
            "optional": True,
        },
    ],
}


def create_storage(is_redis: bool) -> EntityStorage:
    """
    Creates an entity storage for the test schema.

    Args:
        is_redis (bool): Whether to use redis.

    Returns:
        EntityStorage: The entity storage.
    """
    if is_redis:
        return load_entity_storage(
            {
                "name": "redis",
                "cfg": {
                    "host": "localhost",
                    "port": 6379,
                    "passwd": "",
                    "prefix": "test",
                    "path": "userdata/test/",
                },
                "backend": "memory",
            },
            TEST_SCHEMA)
    return load_entity_storage({"name": "memory"}, TEST_SCHEMA)


@pytest.mark.parametrize("is_redis", [False, True])
def test_entity_storage(is_redis: bool) -> None:
    """
    Test setting, getting, and removing entities.

    Args:
        is_redis (bool): Whether to use redis.
    """
    storage = create_storage(is_redis)
    assert isinstance(
        storage, RedisEntityStorage if is_redis else MemoryEntityStorage)
    assert storage.primary_key() == "key"
    assert storage.get("a") is None
    storage.set({"key": "a", "count": 1})
    storage.set({"key": "b", "count": 2, "flag": True})
    assert storage.get("a") == {"key": "a", "count": 1}
    assert storage.get("b") == {"key": "b", "count": 2, "flag": True}
    storage.set({"key": "a", "count": 3, "flag": False})
    assert storage.get("a") == {"key": "a", "count": 3, "flag": False}
    assert storage.remove("a")
    assert not storage.remove("a")
    assert storage.get("a") is None
    assert storage.get("b") == {"key": "b", "count": 2, "flag": True}


@pytest.mark.parametrize("is_redis", [False, True])
def test_entity_copies(is_redis: bool) -> None:
    """
    Test that entities are not shared with the caller.

    Args:
        is_redis (bool): Whether to use redis.
    """
    storage = create_storage(is_redis)
    entity = {"key": "a", "count": 1}
    storage.set(entity)
    entity["count"] = 2
    res = storage.get("a")
    assert res == {"key": "a", "count": 1}
    assert res is not None
    res["count"] = 5
    assert storage.get("a") == {"key": "a", "count": 1}


@pytest.mark.parametrize("is_redis", [False, True])
def test_invalid_entities(is_redis: bool) -> None:
    """
    Test rejecting entities that do not match the schema.

    Args:
        is_redis (bool): Whether to use redis.
    """
    storage = create_storage(is_redis)
    with pytest.raises(ValueError, match=r"TestEntity\.key is missing"):
        storage.set({"count": 1})
    with pytest.raises(ValueError, match=r"TestEntity\.count is missing"):
        storage.set({"key": "a"})
    with pytest.raises(ValueError, match=r"must be integer"):
        storage.set({"key": "a", "count": "1"})
    with pytest.raises(ValueError, match=r"must be integer"):
        storage.set({"key": "a", "count": True})
    with pytest.raises(ValueError, match=r"must be boolean"):
        storage.set({"key": "a", "count": 1, "flag": "yes"})
    with pytest.raises(ValueError, match=r"unknown properties"):
        storage.set({"key": "a", "count": 1, "other": 1})
    assert storage.get("a") is None


def test_schema() -> None:
    """Test schema helpers."""
    assert get_primary_key(TEST_SCHEMA) == "key"
    with pytest.raises(ValueError, match=r"exactly one primary key"):
        get_primary_key({
            "type": "NoKey",
            "properties": [{"property": "a", "type": "string"}],
        })
    with pytest.raises(ValueError, match=r"exactly one primary key"):
        MemoryEntityStorage({
            "type": "TwoKeys",
            "properties": [
                {"property": "a", "type": "string", "is_primary": True},
                {"property": "b", "type": "string", "is_primary": True},
            ],
        })
    assert validate_entity(
        TEST_SCHEMA, {"key": "a", "count": 0, "flag": None}) == {
            "key": "a",
            "count": 0,
        }
    with pytest.raises(ValueError, match=r"unknown entity storage"):
        load_entity_storage({"name": "disk"}, TEST_SCHEMA)  # type: ignore
