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
"""Loads a configuration from a JSON file."""
import json
from typing import cast, TypedDict

from typing_extensions import NotRequired

from immustore.system.config.config import Config
from immustore.system.entity.loader import EntityStorageModule
from immustore.system.immutable.loader import ConnectorModule, load_connector
from immustore.system.logger.loader import (
    EventListenerDef,
    load_event_listener,
)
from immustore.system.logger.log import EventStream


ServerDef = TypedDict('ServerDef', {
    "address": str,
    "port": int,
    "prefix": NotRequired[str],
})
"""Address at which the REST surface is exposed. `prefix` defaults to
`/immutable`."""


LoggerDef = TypedDict('LoggerDef', {
    "listeners": list[EventListenerDef],
    "disable_events": list[str],
})
"""Define the logger. `listeners` is a list of all listeners that process the
logs. `disable_events` is list of patterns to filter or include certain log
types."""


ConfigJSON = TypedDict('ConfigJSON', {
    "connectors": list[ConnectorModule],
    "logger": LoggerDef,
    "server": NotRequired[ServerDef],
})
"""The configuration JSON."""


DEFAULT_PREFIX = "/immutable"
"""The default URL prefix of the REST surface."""


def load_config(config_obj: ConfigJSON) -> Config:
    """
    Load a configuration from a JSON.

    Args:
        config_obj (ConfigJSON): The configuration JSON.

    Returns:
        Config: The configuration.
    """
    config = Config()
    logger = EventStream()
    logger_obj = config_obj["logger"]
    for listener_def in logger_obj["listeners"]:
        logger.add_listener(
            load_event_listener(listener_def, logger_obj["disable_events"]))
    config.set_logger(logger)
    for connector_obj in config_obj["connectors"]:
        config.add_connector(load_connector(connector_obj))
    server = config_obj.get("server")
    if server is not None:
        config.set_server(
            server["address"],
            server["port"],
            server.get("prefix", DEFAULT_PREFIX))
    return config


def load_config_file(config_file: str) -> Config:
    """
    Load a configuration from a JSON file.

    Args:
        config_file (str): The file name.

    Returns:
        Config: The configuration.
    """
    with open(config_file, "rb") as fin:
        config_obj = cast(ConfigJSON, json.load(fin))
    return load_config(config_obj)


def load_test(
        *,
        is_redis: bool,
        namespaces: list[str] | None = None,
        show_events: bool = False) -> Config:
    """
    Load a configuration for unit tests.

    Args:
        is_redis (bool): Whether to use the redis entity storage. Tests run
            it with the in-process redipy backend.
        namespaces (list[str] | None, optional): The method tags of the
            connectors. Each tag gets its own connector with its own entity
            storage. Defaults to a single `entity-storage` connector.
        show_events (bool, optional): Whether to print events to stdout.
            Defaults to False.

    Returns:
        Config: The configuration.
    """
    if namespaces is None:
        namespaces = ["entity-storage"]
    entity_storage: EntityStorageModule
    if is_redis:
        entity_storage = {
            "name": "redis",
            "cfg": {
                "host": "localhost",
                "port": 6379,
                "passwd": "",
                "prefix": "test",
                "path": "userdata/test/",
            },
            "backend": "memory",
        }
    else:
        entity_storage = {
            "name": "memory",
        }
    disable_events: list[str] = (
        [] if show_events else ["immutable", "error"])
    test_config: ConfigJSON = {
        "connectors": [
            {
                "name": "entity-storage",
                "entity_storage": entity_storage,
                "namespace": namespace,
            }
            for namespace in namespaces
        ],
        "logger": {
            "listeners": [
                {
                    "name": "stdout",
                    "show_debug": True,
                },
            ],
            "disable_events": disable_events,
        },
    }
    return load_config(test_config)
