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
"""The persisted layout of immutable records."""
from typing import TypedDict

from immustore.system.entity.storage import EntitySchema


ImmutableItem = TypedDict('ImmutableItem', {
    "id": str,
    "controller": str,
    "data": str,
})
"""An immutable record. `id` is the raw id (64 hex characters), `controller`
is the identity of the creator, and `data` is the base64 encoded payload."""


IMMUTABLE_ITEM_SCHEMA: EntitySchema = {
    "type": "ImmutableItem",
    "properties": [
        {
            "property": "id",
            "type": "string",
            "is_primary": True,
        },
        {
            "property": "controller",
            "type": "string",
        },
        {
            "property": "data",
            "type": "string",
        },
    ],
}
"""The entity schema of `ImmutableItem`."""
