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
"""Event types for the logging system."""
import datetime
from typing import Literal, TypedDict

from typing_extensions import NotRequired

from immustore.system.error import ErrorCode
from immustore.system.logger.context import ContextInfo


ErrorEvent = TypedDict('ErrorEvent', {
    "name": Literal["error"],
    "message": str,
    "traceback": list[str],
    "code": ErrorCode,
})
"""An event to report errors."""


RecordEvent = TypedDict('RecordEvent', {
    "name": Literal["record"],
    "action": Literal["store", "get", "remove"],
    "urn": str,
    "size": NotRequired[int],
})
"""Event to report a successful operation on an immutable record."""


ServerEvent = TypedDict('ServerEvent', {
    "name": Literal["server"],
    "action": Literal["start", "stop", "slow"],
    "address": str,
    "duration": NotRequired[float],
})
"""Event to indicate that the REST server has been started or stopped or that
a request was slow."""


AnyEvent = ErrorEvent | RecordEvent | ServerEvent
"""An event that can be logged to the event stream."""


EventInfo = TypedDict('EventInfo', {
    "when": datetime.datetime,
    "name": str,
    "ctx": ContextInfo,
    "event": AnyEvent,
})
"""Full information and context for events that can be logged to the event
stream."""
