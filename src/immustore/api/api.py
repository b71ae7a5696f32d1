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
"""Request and response types of the immutable storage API as well as their
JSON representation used by the REST surface."""
from collections.abc import Mapping
from typing import Any, TypedDict

from typing_extensions import NotRequired

from immustore.system.immutable.connector import Receipt
from immustore.system.util import as_base64, from_base64


StoreResponse = TypedDict('StoreResponse', {
    "id": str,
    "receipt": Receipt,
})
"""The result of storing a record."""


GetResponse = TypedDict('GetResponse', {
    "data": NotRequired[bytes],
    "receipt": Receipt,
})
"""The result of retrieving a record. `data` is missing if it was not
requested."""


StoreRequestJSON = TypedDict('StoreRequestJSON', {
    "data": str,
})
"""The body of a store request. `data` is base64 encoded."""


GetResponseJSON = TypedDict('GetResponseJSON', {
    "data": NotRequired[str],
    "receipt": Receipt,
})
"""The body of a get response. `data` is base64 encoded."""


def to_get_response_json(response: GetResponse) -> GetResponseJSON:
    """
    Converts a get response into its JSON representation.

    Args:
        response (GetResponse): The response.

    Returns:
        GetResponseJSON: The JSONable object.
    """
    res: GetResponseJSON = {
        "receipt": response["receipt"],
    }
    data = response.get("data")
    if data is not None:
        res["data"] = as_base64(data)
    return res


def from_get_response_json(obj: Mapping[str, Any]) -> GetResponse:
    """
    Parses the JSON representation of a get response.

    Args:
        obj (Mapping[str, Any]): The JSON object.

    Raises:
        ValueError: If the object is not a valid get response.

    Returns:
        GetResponse: The response.
    """
    receipt = obj.get("receipt")
    if not isinstance(receipt, dict):
        raise ValueError(f"missing receipt in {obj}")
    res: GetResponse = {
        "receipt": receipt,
    }
    data = obj.get("data")
    if data is not None:
        res["data"] = from_base64(data)
    return res


def from_store_response_json(obj: Mapping[str, Any]) -> StoreResponse:
    """
    Parses the JSON representation of a store response.

    Args:
        obj (Mapping[str, Any]): The JSON object.

    Raises:
        ValueError: If the object is not a valid store response.

    Returns:
        StoreResponse: The response.
    """
    urn = obj.get("id")
    receipt = obj.get("receipt")
    if not isinstance(urn, str) or not isinstance(receipt, dict):
        raise ValueError(f"invalid store response: {obj}")
    return {
        "id": urn,
        "receipt": receipt,
    }


CONTROLLER_HEADER = "X-Controller"
"""The HTTP header carrying the identity of the caller."""
INCLUDE_DATA_PARAM = "includeData"
"""The query parameter controlling whether a get response contains the
payload."""
