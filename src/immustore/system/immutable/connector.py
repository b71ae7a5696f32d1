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
"""Interface for immutable storage connectors."""
from typing import Any, TypeAlias


Receipt: TypeAlias = dict[str, Any]
"""An opaque acknowledgment of a stored record. Its content is defined by the
connector and is passed through unchanged."""


class ImmutableStorageConnector:
    """A connector stores byte payloads that can never be updated. Every
    connector owns a method tag which is part of all identifiers it creates.
    Identifiers with a different method are rejected with
    `NamespaceMismatchError`."""
    def namespace(self) -> str:
        """
        The method tag of identifiers created by this connector.

        Returns:
            str: The method tag.
        """
        raise NotImplementedError()

    def store(self, controller: str, data: bytes) -> str:
        """
        Stores a payload.

        Args:
            controller (str): The identity of the creator.
            data (bytes): The payload.

        Raises:
            InvalidArgumentError: If controller or data are empty.
            StorageOperationError: If storing failed.

        Returns:
            str: The identifier of the stored record.
        """
        raise NotImplementedError()

    def get(self, identifier: str) -> bytes:
        """
        Retrieves a payload.

        Args:
            identifier (str): The identifier.

        Raises:
            MalformedIdentifierError: If the identifier is not valid.
            NamespaceMismatchError: If the identifier belongs to a different
                connector.
            NotFoundError: If no record exists.
            StorageOperationError: If retrieving failed.

        Returns:
            bytes: The payload.
        """
        raise NotImplementedError()

    def remove(self, controller: str, identifier: str) -> None:
        """
        Removes a record. Only the creator of the record may remove it.

        Args:
            controller (str): The identity of the caller.
            identifier (str): The identifier.

        Raises:
            InvalidArgumentError: If the controller is empty.
            MalformedIdentifierError: If the identifier is not valid.
            NamespaceMismatchError: If the identifier belongs to a different
                connector.
            NotFoundError: If no record exists.
            NotAuthorizedError: If the caller is not the creator.
            StorageOperationError: If removing failed.
        """
        raise NotImplementedError()

    def get_receipt(self, identifier: str) -> Receipt:
        """
        Creates the receipt for a record.

        Args:
            identifier (str): The identifier.

        Returns:
            Receipt: The receipt.
        """
        raise NotImplementedError()
