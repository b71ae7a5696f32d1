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
"""Provides functionality to allow loading custom implementations via plugin.
A module configuration whose `name` is a fully qualified python module (i.e.,
it contains a `.`) is loaded as plugin instead of a builtin implementation.
"""
import importlib
import threading
from collections.abc import Mapping
from typing import Any, TypeVar

from immustore.system.util import full_name


T = TypeVar('T')


PLUGIN_LOCK = threading.RLock()
"""Lock for updating the plugin cache."""
PLUGIN_CACHE: dict[tuple[str, str], type] = {}
"""Caches previously loaded types by base type and module name."""


def is_plugin_name(name: str) -> bool:
    """
    Whether the module name refers to a plugin.

    Args:
        name (str): The `name` field of a module configuration.

    Returns:
        bool: True, if the name is a fully qualified python module.
    """
    return "." in name


def load_plugin(base: type[T], name: str) -> type[T]:
    """
    Loads custom code as plugin. For a plugin to be loadable it must be visible
    as python module to the current process. The module must contain exactly
    one sub-class of the base class. Other classes and symbols are allowed.

    Args:
        base (type[T]): The expected base type.
        name (str): The fully qualified name of the plugin to load. The plugin
            must be accessible as python module from the cwd.

    Raises:
        ValueError: If the module cannot be loaded. There might be no sub-class
            of the base class in the module or there might be multiple
            sub-classes.

    Returns:
        type[T]: The loaded plugin.
    """
    key = (full_name(base), name)
    res = PLUGIN_CACHE.get(key)
    if res is not None:
        return res
    mod = importlib.import_module(name)
    candidates = [
        cls
        for cls in mod.__dict__.values()
        if isinstance(cls, type)
        and cls.__module__ == name
        and issubclass(cls, base)
    ]
    if len(candidates) != 1:
        cands = [
            can.__name__ for can in candidates
        ]
        raise ValueError(
            f"ambiguous or missing plugin for {key[0]}: {cands}")
    res = candidates[0]
    with PLUGIN_LOCK:
        PLUGIN_CACHE[key] = res
    return res


def create_plugin(base: type[T], module: Mapping[str, Any], **kwargs: Any) -> T:
    """
    Instantiates the plugin described by a module configuration. All fields of
    the configuration except `name` are passed as keyword arguments.

    Args:
        base (type[T]): The expected base type.
        module (Mapping[str, Any]): The module configuration.
        **kwargs (Any): Additional keyword arguments that are not part of the
            configuration (e.g., already loaded dependencies).

    Returns:
        T: The plugin instance.
    """
    args = dict(module)
    plugin = load_plugin(base, f"{args.pop('name')}")
    args.update(kwargs)
    return plugin(**args)
