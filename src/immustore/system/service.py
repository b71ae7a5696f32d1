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
"""The immutable storage service routes requests to the connector responsible
for an identifier and reports every operation to the event stream."""
from collections.abc import Iterable

from immustore.api.api import GetResponse, StoreResponse
from immustore.system.error import (
    ImmutableStorageError,
    MalformedIdentifierError,
    NamespaceMismatchError,
)
from immustore.system.immutable.connector import ImmutableStorageConnector
from immustore.system.logger.context import add_context
from immustore.system.logger.log import EventStream
from immustore.system.urn import Urn


CLASS_NAME = "ImmutableStorageService"
"""Component name reported in errors."""


class ImmutableStorageService:
    """Dispatches immutable storage operations to connectors. New records are
    stored with the default connector. Existing records are addressed by the
    method of their identifier so records of all connectors stay reachable."""
    def __init__(
            self,
            logger: EventStream,
            connectors: Iterable[ImmutableStorageConnector]) -> None:
        """
        Creates the service.

        Args:
            logger (EventStream): The logger.
            connectors (Iterable[ImmutableStorageConnector]): The connectors.
                The first connector is the default connector.

        Raises:
            ValueError: If no connector is given or multiple connectors use
                the same method tag.
        """
        self._logger = logger
        self._connectors: dict[str, ImmutableStorageConnector] = {}
        self._default: ImmutableStorageConnector | None = None
        for connector in connectors:
            method = connector.namespace()
            if method in self._connectors:
                raise ValueError(f"duplicate connector for {method}")
            self._connectors[method] = connector
            if self._default is None:
                self._default = connector
        if self._default is None:
            raise ValueError("at least one connector is required")

    def get_default_connector(self) -> ImmutableStorageConnector:
        """
        The connector used for storing new records.

        Returns:
            ImmutableStorageConnector: The default connector.
        """
        assert self._default is not None
        return self._default

    def get_connector(self, identifier: str) -> ImmutableStorageConnector:
        """
        Retrieves the connector responsible for the identifier.

        Args:
            identifier (str): The identifier.

        Raises:
            MalformedIdentifierError: If the identifier is not valid.
            NamespaceMismatchError: If no connector handles the method of the
                identifier.

        Returns:
            ImmutableStorageConnector: The connector.
        """
        if not isinstance(identifier, str) or not identifier:
            raise MalformedIdentifierError(CLASS_NAME, identifier)
        method = Urn.parse_immutable(identifier).namespace_method()
        res = self._connectors.get(method)
        if res is None:
            raise NamespaceMismatchError(
                CLASS_NAME, ",".join(sorted(self._connectors)), identifier)
        return res

    def store(self, controller: str, data: bytes) -> StoreResponse:
        """
        Stores a payload with the default connector.

        Args:
            controller (str): The identity of the creator.
            data (bytes): The payload.

        Returns:
            StoreResponse: The identifier and receipt.
        """
        connector = self.get_default_connector()
        with add_context({
                    "controller": controller,
                    "method": connector.namespace(),
                }):
            try:
                urn = connector.store(controller, data)
                receipt = connector.get_receipt(urn)
            except ImmutableStorageError as exc:
                self._logger.log_error("error.immutable.store", exc.code)
                raise
            self._logger.log_event(
                "immutable.store",
                {
                    "name": "record",
                    "action": "store",
                    "urn": urn,
                    "size": len(data),
                },
                adjust_ctx={"urn": urn})
        return {
            "id": urn,
            "receipt": receipt,
        }

    def get(self, identifier: str, *, include_data: bool = True) -> GetResponse:
        """
        Retrieves a record.

        Args:
            identifier (str): The identifier.
            include_data (bool, optional): Whether to include the payload in
                the response. Defaults to True.

        Returns:
            GetResponse: The receipt and optionally the payload.
        """
        with add_context({"urn": identifier}):
            try:
                connector = self.get_connector(identifier)
                data = connector.get(identifier)
                receipt = connector.get_receipt(identifier)
            except ImmutableStorageError as exc:
                self._logger.log_error("error.immutable.get", exc.code)
                raise
            self._logger.log_event(
                "immutable.get",
                {
                    "name": "record",
                    "action": "get",
                    "urn": identifier,
                    "size": len(data),
                })
        res: GetResponse = {
            "receipt": receipt,
        }
        if include_data:
            res["data"] = data
        return res

    def remove(self, controller: str, identifier: str) -> None:
        """
        Removes a record. Only the creator of the record may remove it.

        Args:
            controller (str): The identity of the caller.
            identifier (str): The identifier.
        """
        with add_context({"controller": controller, "urn": identifier}):
            try:
                connector = self.get_connector(identifier)
                connector.remove(controller, identifier)
            except ImmutableStorageError as exc:
                self._logger.log_error("error.immutable.remove", exc.code)
                raise
            self._logger.log_event(
                "immutable.remove",
                {
                    "name": "record",
                    "action": "remove",
                    "urn": identifier,
                })
