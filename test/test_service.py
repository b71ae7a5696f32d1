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
"""Tests for the immutable storage service."""
import pytest

from immustore.system.config.loader import load_test
from immustore.system.error import (
    MalformedIdentifierError,
    NamespaceMismatchError,
    NotAuthorizedError,
    NotFoundError,
)
from immustore.system.logger.event import EventInfo
from immustore.system.logger.log import EventListener
from immustore.system.urn import generate_id, Urn


class CollectingListener(EventListener):
    """Collects all events in a list."""
    def __init__(self, *, disable_events: list[str] | None = None) -> None:
        super().__init__(disable_events=disable_events)
        self.events: list[EventInfo] = []

    def log_event(self, event: EventInfo) -> None:
        self.events.append(event)

    def names(self) -> list[str]:
        """
        The names of all collected events.

        Returns:
            list[str]: The event names in order.
        """
        return [event["name"] for event in self.events]


@pytest.mark.parametrize("is_redis", [False, True])
def test_service(is_redis: bool) -> None:
    """
    Test storing, retrieving, and removing records via the service.

    Args:
        is_redis (bool): Whether to use redis.
    """
    config = load_test(is_redis=is_redis)
    service = config.get_service()
    res = service.store("alice", b"payload")
    urn = res["id"]
    assert Urn.parse(urn).namespace_method() == "entity-storage"
    assert res["receipt"] == {
        "type": "ImmutableStorageEntityStorageReceipt",
        "method": "entity-storage",
    }
    assert service.get(urn) == {
        "data": b"payload",
        "receipt": res["receipt"],
    }
    assert service.get(urn, include_data=False) == {
        "receipt": res["receipt"],
    }
    with pytest.raises(NotAuthorizedError):
        service.remove("bob", urn)
    service.remove("alice", urn)
    with pytest.raises(NotFoundError):
        service.get(urn)
    with pytest.raises(NotFoundError):
        service.remove("alice", urn)


@pytest.mark.parametrize("is_redis", [False, True])
def test_dispatch(is_redis: bool) -> None:
    """
    Test routing identifiers to the connector of their method.

    Args:
        is_redis (bool): Whether to use redis.
    """
    config = load_test(is_redis=is_redis, namespaces=["primary", "legacy"])
    service = config.get_service()
    assert service.get_default_connector().namespace() == "primary"
    legacy = service.get_connector(f"immutable:legacy:{generate_id()}")
    assert legacy.namespace() == "legacy"
    old_urn = legacy.store("alice", b"old")
    new_urn = service.store("alice", b"new")["id"]
    assert old_urn.startswith("immutable:legacy:")
    assert new_urn.startswith("immutable:primary:")
    assert service.get(old_urn).get("data") == b"old"
    assert service.get(new_urn).get("data") == b"new"
    assert service.get(old_urn)["receipt"]["method"] == "legacy"
    with pytest.raises(NamespaceMismatchError):
        service.get(f"immutable:unknown:{generate_id()}")
    with pytest.raises(MalformedIdentifierError):
        service.get("")
    with pytest.raises(MalformedIdentifierError):
        service.get(f"mutable:primary:{generate_id()}")
    service.remove("alice", old_urn)
    with pytest.raises(NotFoundError):
        service.get(old_urn)
    assert service.get(new_urn).get("data") == b"new"


def test_invalid_service() -> None:
    """Test invalid connector setups."""
    with pytest.raises(ValueError, match=r"duplicate connector"):
        load_test(is_redis=False, namespaces=["a", "a"]).get_service()
    with pytest.raises(ValueError, match=r"no connectors"):
        load_test(is_redis=False, namespaces=[]).get_service()


def test_service_events() -> None:
    """Test the events logged by the service."""
    config = load_test(is_redis=False)
    listener = CollectingListener()
    config.get_logger().add_listener(listener)
    service = config.get_service()
    urn = service.store("alice", b"abc")["id"]
    service.get(urn)
    with pytest.raises(NotAuthorizedError):
        service.remove("bob", urn)
    service.remove("alice", urn)
    assert listener.names() == [
        "immutable.store",
        "immutable.get",
        "error.immutable.remove",
        "immutable.remove",
    ]
    store_evt, get_evt, error_evt, remove_evt = listener.events
    assert store_evt["event"] == {
        "name": "record",
        "action": "store",
        "urn": urn,
        "size": 3,
    }
    assert store_evt["ctx"] == {
        "controller": "alice",
        "method": "entity-storage",
        "urn": urn,
    }
    assert get_evt["ctx"] == {"urn": urn}
    assert error_evt["event"]["name"] == "error"
    assert error_evt["event"].get("code") == "notAuthorized"
    assert error_evt["ctx"] == {"controller": "bob", "urn": urn}
    assert remove_evt["ctx"] == {"controller": "alice", "urn": urn}


def test_service_event_filters() -> None:
    """Test filtering the events of the service."""
    config = load_test(is_redis=False)
    listener = CollectingListener(
        disable_events=["immutable", "error", "!immutable.remove"])
    config.get_logger().add_listener(listener)
    service = config.get_service()
    urn = service.store("alice", b"abc")["id"]
    service.get(urn)
    with pytest.raises(NotAuthorizedError):
        service.remove("bob", urn)
    service.remove("alice", urn)
    assert listener.names() == ["immutable.remove"]
