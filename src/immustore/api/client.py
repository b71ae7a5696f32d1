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
"""A client for the REST surface of an immutable storage service."""
from typing import Any
from urllib.parse import quote

import requests

from immustore.api.api import (
    CONTROLLER_HEADER,
    from_get_response_json,
    from_store_response_json,
    GetResponse,
    INCLUDE_DATA_PARAM,
    StoreRequestJSON,
    StoreResponse,
)
from immustore.system.error import (
    ensure_bytes,
    ensure_str,
    ERROR_CODES,
    error_from_code,
    MalformedIdentifierError,
    NotAuthorizedError,
    NotFoundError,
    StorageOperation,
    StorageOperationError,
    to_error_code,
)
from immustore.system.urn import Urn
from immustore.system.util import as_base64


CLASS_NAME = "ImmutableStorageClient"
"""Component name reported in errors."""


class ImmutableStorageClient:
    """Performs immutable storage operations via REST endpoints. Responses
    are not retried. Failures are raised as the typed errors reported by the
    endpoint."""
    def __init__(
            self,
            base_url: str,
            controller: str | None = None,
            *,
            prefix: str = "/immutable",
            session: requests.Session | None = None,
            timeout: float = 60.0) -> None:
        """
        Creates a client.

        Args:
            base_url (str): The base URL of the server, e.g.,
                `http://localhost:8080`.
            controller (str | None, optional): The identity of the caller.
                Required for storing and removing records. Defaults to None.
            prefix (str, optional): The URL prefix of the REST surface.
                Defaults to "/immutable".
            session (requests.Session | None, optional): The HTTP session.
                Defaults to a new session.
            timeout (float, optional): The request timeout in seconds.
                Defaults to 60.0.
        """
        self._url = f"{base_url.rstrip('/')}/{prefix.strip('/')}"
        self._controller = controller
        self._session = requests.Session() if session is None else session
        self._timeout = timeout

    def _request(
            self,
            method: str,
            op: StorageOperation,
            *,
            identifier: str | None = None,
            with_controller: bool = False,
            body: Any = None,
            params: dict[str, str] | None = None) -> Any:
        url = self._url
        if identifier is not None:
            url = f"{url}/{quote(identifier, safe='')}"
        headers: dict[str, str] = {}
        if with_controller:
            headers[CONTROLLER_HEADER] = ensure_str(
                CLASS_NAME, "controller", self._controller)
        try:
            resp = self._session.request(
                method,
                url,
                headers=headers,
                json=body,
                params=params,
                timeout=self._timeout)
        except requests.RequestException as exc:
            raise StorageOperationError(
                CLASS_NAME,
                op,
                f"request to {url} failed",
                properties={"url": url}) from exc
        if not resp.ok:
            self._raise_error(resp, op, identifier)
        if method == "DELETE":
            return None
        try:
            return resp.json()
        except ValueError as exc:
            raise StorageOperationError(
                CLASS_NAME,
                op,
                f"invalid response from {url}",
                properties={"url": url}) from exc

    @staticmethod
    def _raise_error(
            resp: requests.Response,
            op: StorageOperation,
            identifier: str | None) -> None:
        reason = f"{resp.reason}".strip()
        message = f"{resp.status_code} {reason}"
        if reason in ERROR_CODES:
            raise error_from_code(
                CLASS_NAME, to_error_code(reason), message, identifier)
        id_str = "" if identifier is None else identifier
        if resp.status_code == 404:
            raise NotFoundError(CLASS_NAME, id_str)
        if resp.status_code == 403:
            raise NotAuthorizedError(CLASS_NAME, id_str)
        raise StorageOperationError(CLASS_NAME, op, message)

    def store(self, data: bytes) -> StoreResponse:
        """
        Stores a payload.

        Args:
            data (bytes): The payload.

        Returns:
            StoreResponse: The identifier of the record and its receipt.
        """
        payload = ensure_bytes(CLASS_NAME, "data", data)
        body: StoreRequestJSON = {
            "data": as_base64(payload),
        }
        res = self._request(
            "POST", "storingFailed", with_controller=True, body=body)
        try:
            return from_store_response_json(res)
        except ValueError as exc:
            raise StorageOperationError(
                CLASS_NAME, "storingFailed", f"{exc}") from exc

    def get(
            self,
            identifier: str,
            *,
            include_data: bool = True) -> GetResponse:
        """
        Retrieves a record.

        Args:
            identifier (str): The identifier of the record.
            include_data (bool, optional): Whether the payload should be
                included in the response. Defaults to True.

        Returns:
            GetResponse: The receipt and, if requested, the payload.
        """
        if not isinstance(identifier, str) or not identifier:
            raise MalformedIdentifierError(CLASS_NAME, identifier)
        res = self._request(
            "GET",
            "gettingFailed",
            identifier=identifier,
            params={INCLUDE_DATA_PARAM: "true" if include_data else "false"})
        try:
            return from_get_response_json(res)
        except ValueError as exc:
            raise StorageOperationError(
                CLASS_NAME, "gettingFailed", f"{exc}") from exc

    def remove(self, identifier: str) -> None:
        """
        Removes a record. Only the creator of a record can remove it.

        Args:
            identifier (str): The identifier of the record.
        """
        Urn.parse_immutable(identifier)
        self._request(
            "DELETE",
            "removingFailed",
            identifier=identifier,
            with_controller=True)
