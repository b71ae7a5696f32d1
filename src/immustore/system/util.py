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
"""This module provides some utility functions."""
import base64
import binascii
import json
from datetime import datetime, timezone
from typing import Any, NoReturn


def is_partial_match(target: str, pattern: str) -> bool:
    """
    Checks whether pattern is a partial match of target. Target is a string
    denoting a hierarchy path separated by '.'. If pattern starts with a '.'
    the check is for any full path segment. Otherwise the pattern is checked
    from the beginning of target and only matches full path segments.

    Examples:
    | Target        | Pattern | Match   |
    | ------------- | ------- | ------- |
    | `foo.bar`     | `foo`   | `True`  |
    | `foobar`      | `foo`   | `False` |
    | `foo.bar`     | `bar`   | `False` |
    | `foo.bar`     | `.bar`  | `True`  |
    | `foo.bar.baz` | `.bar`  | `True`  |
    | `foo.barbaz`  | `.bar`  | `False` |

    Args:
        target (str): The target.
        pattern (str): The pattern.

    Returns:
        bool: Whether the target matches the pattern.
    """
    if pattern.startswith("."):
        if target.endswith(pattern):
            return True
        return target.find(f"{pattern}.") >= 0
    if target == pattern:
        return True
    return target.startswith(f"{pattern}.")


def full_name(cls: type) -> str:
    """
    Return the fully qualified name of the given type.
    Examples: `str`, `immustore.system.error.NotFoundError`

    Args:
        cls (type): The type.

    Returns:
        str: The fully qualified name of the type.
    """
    module = cls.__module__
    qualname = cls.__qualname__
    if module == "builtins":
        return qualname
    return f"{module}.{qualname}"


def now() -> datetime:
    """
    Computes the current time with UTC timezone.

    Returns:
        datetime: A timezone aware instance of now.
    """
    return datetime.now(timezone.utc).astimezone()


def fmt_time(when: datetime) -> str:
    """
    Formats a timestamp as ISO formatted string.

    Args:
        when (datetime): The timestamp.

    Returns:
        str: The formatted string.
    """
    return when.isoformat()


def to_bool(text: str | None) -> bool:
    """
    Makes a best effort conversion of the value to a boolean. If the value is
    None it is interpreted as False. If the value is a number or can be parsed
    as number it is interpreted as False exactly if the number is 0. Otherwise,
    any string except for case insensitive `true` values is interpreted as
    False.

    Args:
        text (str | None): The value to convert.

    Returns:
        bool: The converted boolean.
    """
    if text is None:
        return False
    try:
        return int(text) > 0
    except ValueError:
        pass
    return f"{text}".lower() == "true"


def as_base64(value: bytes) -> str:
    """
    Converts a byte sequence into a base 64 encoded string.

    Args:
        value (bytes): The byte sequence.

    Returns:
        str: The base 64 encoded string.
    """
    return base64.b64encode(value).decode("ascii")


def from_base64(text: str) -> bytes:
    """
    Converts a base 64 encoded string into a byte sequence.

    Args:
        text (str): The base 64 encoded string.

    Raises:
        ValueError: If the string is not valid base 64.

    Returns:
        bytes: The byte sequence.
    """
    try:
        return base64.b64decode(text.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as err:
        raise ValueError(f"invalid base64 value: {text!r}") from err


def report_json_error(err: json.JSONDecodeError) -> NoReturn:
    """
    Reports a JSON error by adding additional information about where the
    error is located in the JSON.

    Args:
        err (json.JSONDecodeError): The original error.

    Raises:
        ValueError: The amended error.
    """
    raise ValueError(
        f"JSON parse error ({err.lineno}:{err.colno}): "
        f"{repr(err.doc)}") from err


def json_compact(obj: Any) -> str:
    """
    Creates a compact JSON from the given object.

    Args:
        obj (Any): The object.

    Returns:
        str: A JSON without any spaces or new lines.
    """
    return json.dumps(
        obj,
        sort_keys=True,
        indent=None,
        separators=(",", ":"))


def json_read(data: str) -> Any:
    """
    Parses data as JSON.

    Args:
        data (str): The JSON string.

    Raises:
        ValueError: If the data is not valid JSON.

    Returns:
        Any: The parsed object.
    """
    try:
        return json.loads(data)
    except json.JSONDecodeError as e:
        report_json_error(e)
