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
"""An immutable storage connector persisting records in an entity storage."""
from immustore.system.entity.storage import EntityStorage
from immustore.system.error import (
    ensure_bytes,
    ensure_str,
    MalformedIdentifierError,
    NamespaceMismatchError,
    NotAuthorizedError,
    NotFoundError,
    StorageOperation,
    StorageOperationError,
)
from immustore.system.immutable.connector import (
    ImmutableStorageConnector,
    Receipt,
)
from immustore.system.immutable.schema import ImmutableItem
from immustore.system.urn import generate_id, Urn
from immustore.system.util import as_base64, from_base64


CLASS_NAME = "EntityStorageImmutableStorageConnector"
"""Component name reported in errors."""


class EntityStorageImmutableStorageConnector(ImmutableStorageConnector):
    """Stores immutable records as `ImmutableItem` entities. Immutability is
    only enforced by not offering an update operation. The entity storage
    itself is trusted."""
    NAMESPACE = "entity-storage"
    """The default method tag of the connector."""

    def __init__(
            self,
            entity_storage: EntityStorage,
            *,
            namespace: str = NAMESPACE) -> None:
        """
        Creates an entity storage connector.

        Args:
            entity_storage (EntityStorage): The entity storage for
                `ImmutableItem` entities.
            namespace (str, optional): The method tag. Defaults to
                `entity-storage`.

        Raises:
            ValueError: If the namespace is not a valid identifier segment.
        """
        if not Urn.is_valid_segment(namespace):
            raise ValueError(f"invalid namespace: {namespace!r}")
        self._storage = entity_storage
        self._namespace = namespace

    def namespace(self) -> str:
        return self._namespace

    def _parse(self, identifier: str) -> Urn:
        if not isinstance(identifier, str) or not identifier:
            raise MalformedIdentifierError(CLASS_NAME, identifier)
        urn = Urn.parse_immutable(identifier)
        if urn.namespace_method() != self._namespace:
            raise NamespaceMismatchError(
                CLASS_NAME, self._namespace, identifier)
        return urn

    def _get_item(
            self,
            identifier: str,
            raw_id: str,
            op: StorageOperation) -> ImmutableItem:
        try:
            item = self._storage.get(raw_id)
        except Exception as exc:  # pylint: disable=broad-except
            raise StorageOperationError(
                CLASS_NAME, op, properties={"id": identifier}) from exc
        if item is None:
            raise NotFoundError(CLASS_NAME, identifier)
        return {
            "id": item["id"],
            "controller": item["controller"],
            "data": item["data"],
        }

    def store(self, controller: str, data: bytes) -> str:
        ensure_str(CLASS_NAME, "controller", controller)
        payload = ensure_bytes(CLASS_NAME, "data", data)
        raw_id = generate_id()
        item: ImmutableItem = {
            "id": raw_id,
            "controller": controller,
            "data": as_base64(payload),
        }
        try:
            self._storage.set(item)
        except Exception as exc:  # pylint: disable=broad-except
            raise StorageOperationError(CLASS_NAME, "storingFailed") from exc
        return Urn.create(self._namespace, raw_id).to_parseable()

    def get(self, identifier: str) -> bytes:
        urn = self._parse(identifier)
        item = self._get_item(
            identifier, urn.namespace_specific(), "gettingFailed")
        try:
            return from_base64(item["data"])
        except ValueError as exc:
            raise StorageOperationError(
                CLASS_NAME,
                "gettingFailed",
                "stored payload is corrupted",
                properties={"id": identifier}) from exc

    def remove(self, controller: str, identifier: str) -> None:
        ensure_str(CLASS_NAME, "controller", controller)
        urn = self._parse(identifier)
        raw_id = urn.namespace_specific()
        item = self._get_item(identifier, raw_id, "removingFailed")
        if item["controller"] != controller:
            raise NotAuthorizedError(CLASS_NAME, identifier)
        try:
            removed = self._storage.remove(raw_id)
        except Exception as exc:  # pylint: disable=broad-except
            raise StorageOperationError(
                CLASS_NAME,
                "removingFailed",
                properties={"id": identifier}) from exc
        if not removed:
            # a concurrent remove won the race
            raise NotFoundError(CLASS_NAME, identifier)

    def get_receipt(self, identifier: str) -> Receipt:
        urn = self._parse(identifier)
        return {
            "type": "ImmutableStorageEntityStorageReceipt",
            "method": urn.namespace_method(),
        }
