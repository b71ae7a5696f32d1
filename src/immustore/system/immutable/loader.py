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
"""Loads immutable storage connectors from a given configuration."""
from typing import Literal, TypedDict

from typing_extensions import NotRequired

from immustore.system.entity.loader import (
    EntityStorageModule,
    load_entity_storage,
)
from immustore.system.immutable.connector import ImmutableStorageConnector
from immustore.system.immutable.schema import IMMUTABLE_ITEM_SCHEMA
from immustore.system.plugins import create_plugin, is_plugin_name


EntityStorageConnectorModule = TypedDict('EntityStorageConnectorModule', {
    "name": Literal["entity-storage"],
    "entity_storage": EntityStorageModule,
    "namespace": NotRequired[str],
})
"""A connector storing records in an entity storage. `namespace` overrides
the method tag of created identifiers."""


ConnectorModule = EntityStorageConnectorModule
"""Configuration of an immutable storage connector."""


def load_connector(module: ConnectorModule) -> ImmutableStorageConnector:
    """
    Loads the immutable storage connector for the given configuration. The
    entity storage is created first and handed to the connector.

    Args:
        module (ConnectorModule): The connector configuration.

    Raises:
        ValueError: If the configuration is invalid.

    Returns:
        ImmutableStorageConnector: The connector.
    """
    # pylint: disable=import-outside-toplevel
    if is_plugin_name(module["name"]):
        return create_plugin(ImmutableStorageConnector, module)
    if module["name"] == "entity-storage":
        from immustore.system.immutable.entity_storage import (
            EntityStorageImmutableStorageConnector,
        )
        entity_storage = load_entity_storage(
            module["entity_storage"], IMMUTABLE_ITEM_SCHEMA)
        return EntityStorageImmutableStorageConnector(
            entity_storage,
            namespace=module.get(
                "namespace",
                EntityStorageImmutableStorageConnector.NAMESPACE))
    raise ValueError(f"unknown connector: {module['name']}")
