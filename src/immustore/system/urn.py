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
"""Structured identifiers (URNs) for immutable records. An identifier consists
of a namespace, a method naming the storage backend, and the method specific
id, joined by `:`. For example:
`immutable:entity-storage:4f0c...e1` (64 hex characters)."""
import secrets

from immustore.system.error import MalformedIdentifierError


URN_SEP = ":"
"""Separator of the identifier segments."""
IMMUTABLE_NAMESPACE = "immutable"
"""The namespace of all immutable storage identifiers."""
RAW_ID_BYTES = 32
"""Number of random bytes of a raw id."""
INVALID_CHARACTERS = {
    " ",
    "\n",
    "\r",
    "\t",
    "\0",
    "\\",
    "\'",
    "\"",
    "\a",
    "\b",
    "\f",
    "\v",
    "/",
    "?",
    "#",
    "%",
    URN_SEP,
}
"""Characters that are forbidden anywhere in an identifier."""
CLASS_NAME = "Urn"
"""Component name reported in errors."""


def generate_id() -> str:
    """
    Generates a fresh raw id. The id consists of 256 random bits from a
    cryptographically secure source, hex encoded.

    Returns:
        str: The raw id (64 hex characters).
    """
    return secrets.token_hex(RAW_ID_BYTES)


def format_urn(namespace: str, method: str, raw_id: str) -> str:
    """
    Formats an identifier.

    Args:
        namespace (str): The namespace.
        method (str): The method, i.e., the storage backend tag.
        raw_id (str): The method specific id.

    Returns:
        str: The identifier string.
    """
    return f"{namespace}{URN_SEP}{method}{URN_SEP}{raw_id}"


class Urn:
    """A parsed structured identifier."""
    def __init__(self, namespace: str, method: str, specific: str) -> None:
        """
        Creates an identifier. Use `parse` or `create` instead.

        Args:
            namespace (str): The namespace.
            method (str): The method.
            specific (str): The method specific part.
        """
        self._namespace = namespace
        self._method = method
        self._specific = specific

    @staticmethod
    def is_valid_segment(segment: str) -> bool:
        """
        Whether the string can be used as identifier segment.

        Args:
            segment (str): The segment.

        Returns:
            bool: True, if the segment is not empty and contains no forbidden
                characters.
        """
        return (
            len(segment) > 0
            and not set(segment).intersection(INVALID_CHARACTERS)
            and segment.isprintable()
        )

    @staticmethod
    def parse(text: str) -> 'Urn':
        """
        Parses an identifier string. The method specific part is everything
        after the second separator.

        Args:
            text (str): The identifier string.

        Raises:
            MalformedIdentifierError: If the string is not a structured
                identifier.

        Returns:
            Urn: The identifier.
        """
        if not isinstance(text, str):
            raise MalformedIdentifierError(CLASS_NAME, text)
        segments = text.split(URN_SEP)
        if len(segments) < 3:
            raise MalformedIdentifierError(CLASS_NAME, text)
        if not all(Urn.is_valid_segment(seg) for seg in segments):
            raise MalformedIdentifierError(CLASS_NAME, text)
        namespace, method, *specific = segments
        return Urn(namespace, method, URN_SEP.join(specific))

    @staticmethod
    def parse_immutable(text: str) -> 'Urn':
        """
        Parses an identifier string and ensures it is in the immutable storage
        namespace.

        Args:
            text (str): The identifier string.

        Raises:
            MalformedIdentifierError: If the string is not an immutable storage
                identifier.

        Returns:
            Urn: The identifier.
        """
        res = Urn.parse(text)
        if res.namespace_identifier() != IMMUTABLE_NAMESPACE:
            raise MalformedIdentifierError(CLASS_NAME, text)
        return res

    @staticmethod
    def create(method: str, raw_id: str) -> 'Urn':
        """
        Creates an immutable storage identifier.

        Args:
            method (str): The method.
            raw_id (str): The raw id.

        Returns:
            Urn: The identifier.
        """
        return Urn.parse_immutable(
            format_urn(IMMUTABLE_NAMESPACE, method, raw_id))

    def namespace_identifier(self) -> str:
        """
        The namespace, e.g., `immutable`.

        Returns:
            str: The namespace.
        """
        return self._namespace

    def namespace_method(self) -> str:
        """
        The method, i.e., the tag of the storage backend.

        Returns:
            str: The method.
        """
        return self._method

    def namespace_specific(self, index: int | None = None) -> str:
        """
        The method specific part. With an index only that segment of the part
        after the namespace is returned. Index 0 is the method.

        Args:
            index (int | None, optional): The segment index. Defaults to None.

        Raises:
            IndexError: If the index is out of range.

        Returns:
            str: The method specific part or the selected segment.
        """
        if index is None:
            return self._specific
        return [self._method, *self._specific.split(URN_SEP)][index]

    def to_parseable(self) -> str:
        """
        Creates the identifier string.

        Returns:
            str: A string that can be parsed by `parse`.
        """
        return format_urn(self._namespace, self._method, self._specific)

    def __eq__(self, other: object) -> bool:
        if other is self:
            return True
        if not isinstance(other, Urn):
            return False
        return self.to_parseable() == other.to_parseable()

    def __ne__(self, other: object) -> bool:
        return not self.__eq__(other)

    def __hash__(self) -> int:
        return hash(self.to_parseable())

    def __str__(self) -> str:
        return self.to_parseable()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}[{self.to_parseable()}]"
