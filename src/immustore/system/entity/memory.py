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
"""An in-memory entity storage."""
import threading
from typing import Any

from immustore.system.entity.storage import EntitySchema, EntityStorage


class MemoryEntityStorage(EntityStorage):
    """An in-memory entity storage. The content is lost when the process
    ends."""
    def __init__(self, schema: EntitySchema) -> None:
        super().__init__(schema)
        self._entities: dict[str, dict[str, Any]] = {}
        self._lock = threading.RLock()

    def do_set(self, key: str, entity: dict[str, Any]) -> None:
        with self._lock:
            self._entities[key] = entity.copy()

    def do_get(self, key: str) -> dict[str, Any] | None:
        with self._lock:
            res = self._entities.get(key)
            return None if res is None else res.copy()

    def do_remove(self, key: str) -> bool:
        with self._lock:
            return self._entities.pop(key, None) is not None

    def size(self) -> int:
        """
        The number of stored entities.

        Returns:
            int: The number of entities.
        """
        with self._lock:
            return len(self._entities)
