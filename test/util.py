# Immustore stores immutable records behind a REST surface.
# Copyright (C) 2024 Josua Krause
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.
"""Utility functions for unit tests."""
import json
from typing import Any
from urllib.parse import unquote, urlsplit

from immustore.app.handlers import handle_get, handle_remove, handle_store
from immustore.system.error import ImmutableStorageError
from immustore.system.service import ImmutableStorageService


TEST_URL = "http://immustore.test"
"""The base url used by the fake session."""
TEST_PREFIX = "/immutable"
"""The url prefix used by the fake session."""


class FakeResponse:
    """A minimal stand-in for `requests.Response`."""
    def __init__(
            self,
            status_code: int,
            reason: str,
            body: Any) -> None:
        self.status_code = status_code
        self.reason = reason
        self._text = "" if body is None else json.dumps(body)

    @property
    def ok(self) -> bool:
        """
        Whether the request succeeded.

        Returns:
            bool: True, if the status code is below 400.
        """
        return self.status_code < 400

    def json(self) -> Any:
        """
        Parses the body.

        Returns:
            Any: The JSON body.
        """
        return json.loads(self._text)


class FakeSession:
    """Routes client requests directly to the REST handlers of a service. The
    request and response bodies go through JSON to match the wire format."""
    def __init__(
            self,
            service: ImmutableStorageService,
            *,
            reason_codes: bool = True) -> None:
        """
        Creates a fake session.

        Args:
            service (ImmutableStorageService): The service.
            reason_codes (bool, optional): Whether to send error codes as
                reason phrase. Defaults to True.
        """
        self._service = service
        self._reason_codes = reason_codes
        self.requests: list[tuple[str, str, dict[str, str]]] = []

    def request(
            self,
            method: str,
            url: str,
            *,
            headers: dict[str, str],
            json: Any,  # pylint: disable=redefined-outer-name
            params: dict[str, str] | None,
            timeout: float) -> FakeResponse:
        """
        Performs a request.

        Args:
            method (str): The HTTP method.
            url (str): The url.
            headers (dict[str, str]): The headers.
            json (Any): The JSON body.
            params (dict[str, str] | None): The query parameters.
            timeout (float): The timeout.

        Returns:
            FakeResponse: The response.
        """
        assert timeout > 0
        self.requests.append((method, url, headers))
        path = urlsplit(url).path
        assert path.startswith(TEST_PREFIX)
        paths = [
            unquote(seg)
            for seg in path.removeprefix(TEST_PREFIX).split("/")
        ]
        controller = headers.get("X-Controller", "").strip()
        post = None if json is None else _wire(json)
        try:
            if method == "POST":
                return FakeResponse(
                    200, "OK", handle_store(self._service, controller, post))
            if method == "GET":
                return FakeResponse(
                    200,
                    "OK",
                    handle_get(self._service, paths, params or {}))
            if method == "DELETE":
                handle_remove(self._service, controller, paths)
                return FakeResponse(200, "OK", None)
        except ImmutableStorageError as exc:
            reason = exc.code if self._reason_codes else "Error"
            return FakeResponse(exc.http_status(), reason, None)
        return FakeResponse(405, "Method Not Allowed", None)


def _wire(obj: Any) -> Any:
    return json.loads(json.dumps(obj))
