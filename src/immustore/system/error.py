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
"""The error taxonomy of immutable storage. Every failure is an
`ImmutableStorageError` carrying exactly one `ErrorCode`. Errors caused by a
backing store keep the original exception as cause."""
from collections.abc import Mapping
from typing import Any, cast, get_args, Literal


ErrorCode = Literal[
    "invalidArgument",
    "malformedIdentifier",
    "namespaceMismatch",
    "notFound",
    "notAuthorized",
    "storingFailed",
    "gettingFailed",
    "removingFailed",
]
"""The kind of error."""


ERROR_CODES: set[ErrorCode] = set(get_args(ErrorCode))
"""All kinds of errors."""


StorageOperation = Literal["storingFailed", "gettingFailed", "removingFailed"]
"""Error codes of failed backing store operations."""


def to_error_code(text: str) -> ErrorCode:
    """
    Convert a string to an error code.

    Args:
        text (str): The error code.

    Raises:
        ValueError: If the provided string is not an error code.

    Returns:
        ErrorCode: The error code.
    """
    if text not in ERROR_CODES:
        raise ValueError(f"invalid error code {text}")
    return cast(ErrorCode, text)


class ImmutableStorageError(Exception):
    """Base class of all immutable storage errors."""
    def __init__(
            self,
            source: str,
            code: ErrorCode,
            message: str,
            *,
            properties: Mapping[str, Any] | None = None) -> None:
        """
        Creates an error.

        Args:
            source (str): The name of the component that raised the error.
            code (ErrorCode): The kind of error.
            message (str): A human readable message.
            properties (Mapping[str, Any] | None, optional): Additional
                structured details. Defaults to None.
        """
        super().__init__(f"{source} ({code}): {message}")
        self.source = source
        self.code = code
        self.message = message
        self.properties: dict[str, Any] = \
            {} if properties is None else dict(properties)

    @property
    def cause(self) -> BaseException | None:
        """
        The original exception that caused this error.

        Returns:
            BaseException | None: The cause or None.
        """
        return self.__cause__

    def http_status(self) -> int:
        """
        The HTTP status code used when reporting the error via REST.

        Returns:
            int: The status code.
        """
        return HTTP_STATUS[self.code]


class InvalidArgumentError(ImmutableStorageError, ValueError):
    """An argument is empty or has the wrong type."""
    def __init__(
            self,
            source: str,
            name: str,
            value: Any,
            *,
            message: str | None = None) -> None:
        super().__init__(
            source,
            "invalidArgument",
            (
                f"{name} must be a non-empty value, got {value!r}"
                if message is None
                else message
            ),
            properties={"argument": name})


class MalformedIdentifierError(ImmutableStorageError, ValueError):
    """The input is not a structured identifier."""
    def __init__(self, source: str, identifier: Any) -> None:
        super().__init__(
            source,
            "malformedIdentifier",
            f"invalid identifier: {identifier!r}",
            properties={"id": identifier})


class NamespaceMismatchError(ImmutableStorageError):
    """The method of the identifier does not belong to the backend."""
    def __init__(self, source: str, namespace: str, identifier: str) -> None:
        super().__init__(
            source,
            "namespaceMismatch",
            f"{identifier} is not addressed to {namespace}",
            properties={"namespace": namespace, "id": identifier})


class NotFoundError(ImmutableStorageError):
    """No record exists for the identifier."""
    def __init__(self, source: str, identifier: str) -> None:
        super().__init__(
            source,
            "notFound",
            f"{identifier} does not exist",
            properties={"id": identifier})


class NotAuthorizedError(ImmutableStorageError):
    """The record exists but the caller is not its controller."""
    def __init__(self, source: str, identifier: str) -> None:
        super().__init__(
            source,
            "notAuthorized",
            f"only the controller of {identifier} may remove it",
            properties={"id": identifier})


class StorageOperationError(ImmutableStorageError):
    """The backing store failed unexpectedly. The original exception is
    available as `cause`."""
    def __init__(
            self,
            source: str,
            code: StorageOperation,
            message: str | None = None,
            *,
            properties: Mapping[str, Any] | None = None) -> None:
        super().__init__(
            source,
            code,
            code if message is None else message,
            properties=properties)


HTTP_STATUS: dict[ErrorCode, int] = {
    "invalidArgument": 400,
    "malformedIdentifier": 400,
    "namespaceMismatch": 400,
    "notFound": 404,
    "notAuthorized": 403,
    "storingFailed": 500,
    "gettingFailed": 500,
    "removingFailed": 500,
}
"""HTTP status codes of the error kinds."""


def error_from_code(
        source: str,
        code: ErrorCode,
        message: str,
        identifier: str | None) -> ImmutableStorageError:
    """
    Recreates the typed error for an error code, e.g., when it was reported by
    a remote endpoint.

    Args:
        source (str): The component that observed the error.
        code (ErrorCode): The error code.
        message (str): A description of the reported failure. Used by
            errors that do not refer to an identifier.
        identifier (str | None): The identifier the request was about.

    Returns:
        ImmutableStorageError: The error.
    """
    id_str = "" if identifier is None else identifier
    if code == "invalidArgument":
        return InvalidArgumentError(
            source, "request", None, message=f"invalid request: {message}")
    if code == "malformedIdentifier":
        return MalformedIdentifierError(source, identifier)
    if code == "namespaceMismatch":
        return NamespaceMismatchError(source, "remote", id_str)
    if code == "notFound":
        return NotFoundError(source, id_str)
    if code == "notAuthorized":
        return NotAuthorizedError(source, id_str)
    return StorageOperationError(
        source, cast(StorageOperation, code), message)


def ensure_str(source: str, name: str, value: Any) -> str:
    """
    Ensures that the value is a non-empty string.

    Args:
        source (str): The component that checks the value.
        name (str): The name of the argument.
        value (Any): The value.

    Raises:
        InvalidArgumentError: If the value is not a non-empty string.

    Returns:
        str: The value.
    """
    if not isinstance(value, str) or not value:
        raise InvalidArgumentError(source, name, value)
    return value


def ensure_bytes(source: str, name: str, value: Any) -> bytes:
    """
    Ensures that the value is a non-empty byte sequence.

    Args:
        source (str): The component that checks the value.
        name (str): The name of the argument.
        value (Any): The value.

    Raises:
        InvalidArgumentError: If the value is not a non-empty byte sequence.

    Returns:
        bytes: The value.
    """
    if not isinstance(value, (bytes, bytearray, memoryview)) or not value:
        raise InvalidArgumentError(source, name, value)
    return bytes(value)
