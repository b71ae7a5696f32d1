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
"""Request handlers of the REST surface. The handlers translate requests into
service calls and raise `ImmutableStorageError`s for invalid requests."""
from collections.abc import Mapping
from typing import Any

from immustore.api.api import (
    GetResponseJSON,
    INCLUDE_DATA_PARAM,
    StoreResponse,
    to_get_response_json,
)
from immustore.system.error import (
    InvalidArgumentError,
    MalformedIdentifierError,
)
from immustore.system.service import ImmutableStorageService
from immustore.system.util import from_base64, to_bool


CLASS_NAME = "ImmutableStorageServer"
"""Component name reported in errors."""


def get_identifier(paths: list[str]) -> str:
    """
    Extracts the identifier from the request path.

    Args:
        paths (list[str]): The decoded path segments after the prefix.

    Raises:
        MalformedIdentifierError: If the path does not contain exactly one
            segment after the prefix.

    Returns:
        str: The identifier.
    """
    segments = [seg for seg in paths if seg]
    if len(segments) != 1:
        raise MalformedIdentifierError(CLASS_NAME, "/".join(segments))
    return segments[0]


def get_payload(post: Mapping[str, Any] | None) -> bytes:
    """
    Reads the base64 encoded payload of a store request.

    Args:
        post (Mapping[str, Any] | None): The request body.

    Raises:
        InvalidArgumentError: If the payload is missing or not base64.

    Returns:
        bytes: The payload.
    """
    data = None if post is None else post.get("data")
    if not isinstance(data, str) or not data:
        raise InvalidArgumentError(CLASS_NAME, "data", data)
    try:
        return from_base64(data)
    except ValueError as exc:
        raise InvalidArgumentError(CLASS_NAME, "data", data) from exc


def get_include_data(query: Mapping[str, Any]) -> bool:
    """
    Whether the payload was requested.

    Args:
        query (Mapping[str, Any]): The query parameters.

    Returns:
        bool: True, unless `includeData` is set to a false value.
    """
    value = query.get(INCLUDE_DATA_PARAM)
    if isinstance(value, list):
        value = value[-1] if value else None
    if value is None:
        return True
    return to_bool(f"{value}")


def handle_store(
        service: ImmutableStorageService,
        controller: str,
        post: Mapping[str, Any] | None) -> StoreResponse:
    """
    Handles `POST <prefix>`.

    Args:
        service (ImmutableStorageService): The service.
        controller (str): The identity of the caller.
        post (Mapping[str, Any] | None): The request body.

    Returns:
        StoreResponse: The identifier and receipt.
    """
    return service.store(controller, get_payload(post))


def handle_get(
        service: ImmutableStorageService,
        paths: list[str],
        query: Mapping[str, Any]) -> GetResponseJSON:
    """
    Handles `GET <prefix>/<id>`.

    Args:
        service (ImmutableStorageService): The service.
        paths (list[str]): The path segments after the prefix.
        query (Mapping[str, Any]): The query parameters.

    Returns:
        GetResponseJSON: The receipt and optionally the base64 payload.
    """
    return to_get_response_json(service.get(
        get_identifier(paths), include_data=get_include_data(query)))


def handle_remove(
        service: ImmutableStorageService,
        controller: str,
        paths: list[str]) -> dict[str, Any]:
    """
    Handles `DELETE <prefix>/<id>`.

    Args:
        service (ImmutableStorageService): The service.
        controller (str): The identity of the caller.
        paths (list[str]): The path segments after the prefix.

    Returns:
        dict[str, Any]: An empty object.
    """
    service.remove(controller, get_identifier(paths))
    return {}
