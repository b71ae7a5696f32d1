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
"""Tests for the entity storage immutable storage connector."""
from typing import Any

import pytest

from immustore.system.entity.memory import MemoryEntityStorage
from immustore.system.entity.redis import RedisEntityStorage
from immustore.system.entity.storage import EntityStorage
from immustore.system.error import (
    InvalidArgumentError,
    MalformedIdentifierError,
    NamespaceMismatchError,
    NotAuthorizedError,
    NotFoundError,
    StorageOperationError,
)
from immustore.system.immutable.entity_storage import (
    EntityStorageImmutableStorageConnector,
)
from immustore.system.immutable.loader import load_connector
from immustore.system.immutable.schema import IMMUTABLE_ITEM_SCHEMA
from immustore.system.urn import generate_id, Urn


def create_storage(is_redis: bool) -> EntityStorage:
    """
    Creates an entity storage for immutable items.

    Args:
        is_redis (bool): Whether to use redis (with redipy's in-process
            backend).

    Returns:
        EntityStorage: The entity storage.
    """
    if is_redis:
        return RedisEntityStorage(
            IMMUTABLE_ITEM_SCHEMA, None, backend="memory")
    return MemoryEntityStorage(IMMUTABLE_ITEM_SCHEMA)


class BrokenEntityStorage(EntityStorage):
    """An entity storage where every operation fails."""
    def __init__(self) -> None:
        super().__init__(IMMUTABLE_ITEM_SCHEMA)
        self.calls = 0

    def do_set(self, key: str, entity: dict[str, Any]) -> None:
        self.calls += 1
        raise ConnectionError("storage is down")

    def do_get(self, key: str) -> dict[str, Any] | None:
        self.calls += 1
        raise ConnectionError("storage is down")

    def do_remove(self, key: str) -> bool:
        self.calls += 1
        raise ConnectionError("storage is down")


@pytest.mark.parametrize("is_redis", [False, True])
def test_lifecycle(is_redis: bool) -> None:
    """
    Test storing, retrieving, and removing records.

    Args:
        is_redis (bool): Whether to use redis.
    """
    connector = EntityStorageImmutableStorageConnector(
        create_storage(is_redis))
    assert connector.namespace() == "entity-storage"
    payloads = [b"a", b"hello world", bytes(range(256)), b"\0" * 1000]
    urns = [connector.store("alice", data) for data in payloads]
    assert len(set(urns)) == len(urns)
    for urn, data in zip(urns, payloads):
        parsed = Urn.parse(urn)
        assert parsed.namespace_identifier() == "immutable"
        assert parsed.namespace_method() == "entity-storage"
        assert len(parsed.namespace_specific()) == 64
        assert connector.get(urn) == data
        assert connector.get(urn) == data
    connector.remove("alice", urns[0])
    with pytest.raises(NotFoundError):
        connector.get(urns[0])
    with pytest.raises(NotFoundError):
        connector.remove("alice", urns[0])
    for urn, data in zip(urns[1:], payloads[1:]):
        assert connector.get(urn) == data


@pytest.mark.parametrize("is_redis", [False, True])
def test_ownership(is_redis: bool) -> None:
    """
    Test that only the controller can remove a record.

    Args:
        is_redis (bool): Whether to use redis.
    """
    connector = EntityStorageImmutableStorageConnector(
        create_storage(is_redis))
    urn = connector.store("did:example:alice", b"payload")
    with pytest.raises(NotAuthorizedError) as exc_info:
        connector.remove("did:example:bob", urn)
    assert exc_info.value.code == "notAuthorized"
    assert connector.get(urn) == b"payload"
    with pytest.raises(NotAuthorizedError):
        connector.remove("did:example:alice ", urn)
    connector.remove("did:example:alice", urn)
    with pytest.raises(NotFoundError):
        connector.get(urn)


def test_persisted_layout() -> None:
    """Test the layout of the stored entity."""
    storage = MemoryEntityStorage(IMMUTABLE_ITEM_SCHEMA)
    connector = EntityStorageImmutableStorageConnector(storage)
    urn = connector.store("alice", b"\x00\x01\x02")
    raw_id = Urn.parse(urn).namespace_specific()
    assert storage.get(raw_id) == {
        "id": raw_id,
        "controller": "alice",
        "data": "AAEC",
    }
    assert storage.size() == 1
    connector.remove("alice", urn)
    assert storage.size() == 0


@pytest.mark.parametrize("is_redis", [False, True])
def test_namespace_isolation(is_redis: bool) -> None:
    """
    Test that identifiers of other methods are rejected without lookup.

    Args:
        is_redis (bool): Whether to use redis.
    """
    storage = create_storage(is_redis)
    connector = EntityStorageImmutableStorageConnector(storage)
    other = EntityStorageImmutableStorageConnector(
        storage, namespace="other-method")
    urn = other.store("alice", b"data")
    assert urn.startswith("immutable:other-method:")
    assert other.get(urn) == b"data"
    with pytest.raises(NamespaceMismatchError) as exc_info:
        connector.get(urn)
    assert exc_info.value.code == "namespaceMismatch"
    with pytest.raises(NamespaceMismatchError):
        connector.remove("alice", urn)
    with pytest.raises(NamespaceMismatchError):
        connector.get(f"immutable:other-method:{generate_id()}")
    assert other.get(urn) == b"data"

    broken = BrokenEntityStorage()
    broken_connector = EntityStorageImmutableStorageConnector(broken)
    with pytest.raises(NamespaceMismatchError):
        broken_connector.get(urn)
    assert broken.calls == 0


@pytest.mark.parametrize("is_redis", [False, True])
def test_unknown(is_redis: bool) -> None:
    """
    Test retrieving records that never existed.

    Args:
        is_redis (bool): Whether to use redis.
    """
    connector = EntityStorageImmutableStorageConnector(
        create_storage(is_redis))
    urn = f"immutable:entity-storage:{generate_id()}"
    with pytest.raises(NotFoundError) as exc_info:
        connector.get(urn)
    assert exc_info.value.code == "notFound"
    assert exc_info.value.properties == {"id": urn}
    with pytest.raises(NotFoundError):
        connector.remove("alice", urn)


def test_invalid_arguments() -> None:
    """Test rejecting invalid arguments before touching the storage."""
    broken = BrokenEntityStorage()
    connector = EntityStorageImmutableStorageConnector(broken)
    with pytest.raises(InvalidArgumentError) as exc_info:
        connector.store("", b"data")
    assert exc_info.value.properties == {"argument": "controller"}
    with pytest.raises(InvalidArgumentError) as exc_info:
        connector.store("alice", b"")
    assert exc_info.value.properties == {"argument": "data"}
    with pytest.raises(InvalidArgumentError):
        connector.store("alice", "text")  # type: ignore
    with pytest.raises(MalformedIdentifierError):
        connector.get("")
    with pytest.raises(MalformedIdentifierError):
        connector.get("not-a-valid-id")
    with pytest.raises(MalformedIdentifierError):
        connector.get("other:entity-storage:abc")
    with pytest.raises(InvalidArgumentError):
        connector.remove("", f"immutable:entity-storage:{generate_id()}")
    with pytest.raises(MalformedIdentifierError):
        connector.remove("alice", "")
    assert broken.calls == 0
    with pytest.raises(ValueError):
        EntityStorageImmutableStorageConnector(broken, namespace="a:b")
    with pytest.raises(ValueError, match=r"invalid namespace"):
        load_connector({
            "name": "entity-storage",
            "entity_storage": {"name": "memory"},
            "namespace": "legacy:v2",
        })


def test_storage_failures() -> None:
    """Test wrapping failures of the entity storage."""
    broken = BrokenEntityStorage()
    connector = EntityStorageImmutableStorageConnector(broken)
    urn = f"immutable:entity-storage:{generate_id()}"
    with pytest.raises(StorageOperationError) as exc_info:
        connector.store("alice", b"data")
    assert exc_info.value.code == "storingFailed"
    assert isinstance(exc_info.value.cause, ConnectionError)
    with pytest.raises(StorageOperationError) as exc_info:
        connector.get(urn)
    assert exc_info.value.code == "gettingFailed"
    assert isinstance(exc_info.value.cause, ConnectionError)
    with pytest.raises(StorageOperationError) as exc_info:
        connector.remove("alice", urn)
    assert exc_info.value.code == "removingFailed"
    assert isinstance(exc_info.value.cause, ConnectionError)
    assert exc_info.value.source == "EntityStorageImmutableStorageConnector"


def test_corrupted_payload() -> None:
    """Test reading a payload that is not valid base64."""
    storage = MemoryEntityStorage(IMMUTABLE_ITEM_SCHEMA)
    connector = EntityStorageImmutableStorageConnector(storage)
    raw_id = generate_id()
    storage.set({"id": raw_id, "controller": "alice", "data": "!!"})
    with pytest.raises(StorageOperationError) as exc_info:
        connector.get(f"immutable:entity-storage:{raw_id}")
    assert exc_info.value.code == "gettingFailed"
    assert isinstance(exc_info.value.cause, ValueError)


def test_receipt() -> None:
    """Test the receipt of the connector."""
    connector = EntityStorageImmutableStorageConnector(
        MemoryEntityStorage(IMMUTABLE_ITEM_SCHEMA))
    urn = connector.store("alice", b"data")
    assert connector.get_receipt(urn) == {
        "type": "ImmutableStorageEntityStorageReceipt",
        "method": "entity-storage",
    }


@pytest.mark.parametrize("is_redis", [False, True])
def test_custom_namespace(is_redis: bool) -> None:
    """
    Test that a connector with a custom method reads its own records.

    Args:
        is_redis (bool): Whether to use redis.
    """
    connector = EntityStorageImmutableStorageConnector(
        create_storage(is_redis), namespace="archive-v2")
    urn = connector.store("alice", b"x")
    parsed = Urn.parse(urn)
    assert parsed.namespace_method() == "archive-v2"
    assert parsed.namespace_specific(0) == "archive-v2"
    assert connector.get(urn) == b"x"
    connector.remove("alice", urn)
    with pytest.raises(NotFoundError):
        connector.get(urn)
