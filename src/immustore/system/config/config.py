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
"""Configurations connect the modules of immustore together."""
from immustore.system.immutable.connector import ImmutableStorageConnector
from immustore.system.logger.log import EventStream
from immustore.system.service import ImmutableStorageService


class Config:
    """Configurations connect the logger, the connectors, and the REST server
    address. Every value can be set only once."""
    def __init__(self) -> None:
        """
        Create an empty configuration.
        """
        self._logger: EventStream | None = None
        self._connectors: list[ImmutableStorageConnector] = []
        self._service: ImmutableStorageService | None = None
        self._server: tuple[str, int, str] | None = None

    def set_logger(self, logger: EventStream) -> None:
        """
        Set the logger.

        Args:
            logger (EventStream): The logger.

        Raises:
            ValueError: If the logger is already set.
        """
        if self._logger is not None:
            raise ValueError("logger already initialized")
        self._logger = logger

    def get_logger(self) -> EventStream:
        """
        Get the logger.

        Raises:
            ValueError: If no logger is set.

        Returns:
            EventStream: The logger.
        """
        if self._logger is None:
            raise ValueError("logger not initialized")
        return self._logger

    def add_connector(self, connector: ImmutableStorageConnector) -> None:
        """
        Add an immutable storage connector. The first connector added is the
        default connector for storing new records.

        Args:
            connector (ImmutableStorageConnector): The connector.

        Raises:
            ValueError: If the service was already created.
        """
        if self._service is not None:
            raise ValueError("service already initialized")
        self._connectors.append(connector)

    def get_service(self) -> ImmutableStorageService:
        """
        Get the immutable storage service. The service is created on first
        access and no connectors can be added afterwards.

        Raises:
            ValueError: If no connector or logger was set.

        Returns:
            ImmutableStorageService: The service.
        """
        if self._service is None:
            if not self._connectors:
                raise ValueError("no connectors initialized")
            self._service = ImmutableStorageService(
                self.get_logger(), self._connectors)
        return self._service

    def set_server(self, address: str, port: int, prefix: str) -> None:
        """
        Sets the address of the REST server.

        Args:
            address (str): The address to serve.
            port (int): The port to serve.
            prefix (str): The URL prefix of the REST surface.

        Raises:
            ValueError: If the server is already set or the prefix is
                invalid.
        """
        if self._server is not None:
            raise ValueError("server already initialized")
        if not prefix.startswith("/") or prefix.endswith("/"):
            raise ValueError(
                f"prefix must start and not end with '/': {prefix}")
        self._server = (address, port, prefix)

    def get_server(self) -> tuple[str, int, str] | None:
        """
        Get the REST server address.

        Returns:
            tuple[str, int, str] | None: The address, port, and URL prefix.
                None if no server is configured.
        """
        return self._server
