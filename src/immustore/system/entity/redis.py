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
"""An entity storage using redis."""
from typing import Any, Literal

from redipy import Redis, RedisConfig

from immustore.system.entity.storage import (
    EntitySchema,
    EntityStorage,
    validate_entity,
)
from immustore.system.util import json_compact, json_read


RedisBackend = Literal["redis", "memory"]
"""The redipy backend. `memory` runs redis semantics in the current process
which is useful for tests."""


class RedisEntityStorage(EntityStorage):
    """An entity storage using redis. Each entity is stored as compact JSON
    under a key combining the schema type and the primary key."""
    def __init__(
            self,
            schema: EntitySchema,
            cfg: RedisConfig | None,
            *,
            backend: RedisBackend = "redis") -> None:
        """
        Creates a redis entity storage.

        Args:
            schema (EntitySchema): The schema of the stored entities.
            cfg (RedisConfig | None): The redis connection settings. Only
                used for the `redis` backend.
            backend (RedisBackend, optional): The redipy backend. Defaults to
                "redis".
        """
        super().__init__(schema)
        if backend == "redis":
            self._redis = Redis("redis", cfg=cfg, redis_module="entity")
        elif backend == "memory":
            self._redis = Redis("memory")
        else:
            raise ValueError(f"unknown redis backend: {backend}")

    def _entity_key(self, key: str) -> str:
        if not key:
            raise ValueError(f"invalid {key=}")
        return f"{self.get_schema()['type']}:{key}"

    def do_set(self, key: str, entity: dict[str, Any]) -> None:
        self._redis.set_value(self._entity_key(key), json_compact(entity))

    def do_get(self, key: str) -> dict[str, Any] | None:
        res = self._redis.get_value(self._entity_key(key))
        if res is None:
            return None
        return validate_entity(self.get_schema(), json_read(res))

    def do_remove(self, key: str) -> bool:
        return self._redis.delete(self._entity_key(key)) > 0
