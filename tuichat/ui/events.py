# Copyright 2024 TuiChat contributors
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

"""UI event system for testing and debugging."""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class UIEventType(Enum):
    """Types of UI events for logging and testing."""
    # Lifecycle
    APP_STARTED = auto()
    APP_STOPPED = auto()

    # Display updates
    CONVERSATION_UPDATED = auto()
    HEADER_RESOLVED = auto()

    # LLM interaction
    MESSAGE_SENT = auto()
    RESPONSE_COMPLETE = auto()
    RESPONSE_FAILED = auto()


@dataclass
class UIEvent:
    """A single UI event with timestamp and data."""
    type: UIEventType
    timestamp: str
    data: dict = field(default_factory=dict)

    def to_log_line(self) -> str:
        """Format as a parseable log line."""
        data_json = json.dumps(self.data, default=str)
        return f"UI_EVENT|{self.timestamp}|{self.type.name}|{data_json}"

    @classmethod
    def from_log_line(cls, line: str) -> Optional['UIEvent']:
        """Parse from log line format."""
        if not line.startswith("UI_EVENT|"):
            return None
        try:
            parts = line.split("|", 3)
            if len(parts) != 4:
                return None
            _, timestamp, event_name, data_json = parts
            return cls(
                type=UIEventType[event_name],
                timestamp=timestamp,
                data=json.loads(data_json)
            )
        except (KeyError, json.JSONDecodeError):
            return None


class UIEventEmitter:
    """Emits and tracks UI events for testing and debugging."""

    def __init__(self, log_events: bool = False):
        self._listeners: list[Callable[[UIEvent], None]] = []
        self._event_log: list[UIEvent] = []
        self._log_events = log_events
        self._max_log_size = 1000

    def add_listener(self, callback: Callable[[UIEvent], None]):
        self._listeners.append(callback)

    def remove_listener(self, callback: Callable[[UIEvent], None]):
        if callback in self._listeners:
            self._listeners.remove(callback)

    def emit(self, event_type: UIEventType, **data):
        """Emit a UI event."""
        event = UIEvent(
            type=event_type,
            timestamp=datetime.now().isoformat(),
            data=data
        )

        self._event_log.append(event)
        if len(self._event_log) > self._max_log_size:
            self._event_log = self._event_log[-self._max_log_size:]

        if self._log_events:
            logger.info(event.to_log_line())

        for listener in self._listeners:
            try:
                listener(event)
            except Exception as e:
                logger.debug(f"Event listener error: {e}")

    def get_events(self, event_type: Optional[UIEventType] = None) -> list[UIEvent]:
        """Get events, optionally filtered by type."""
        events = self._event_log
        if event_type is not None:
            events = [e for e in events if e.type == event_type]
        return list(events)

    def count(self, event_type: UIEventType) -> int:
        return len(self.get_events(event_type))

    def get_last_event(self, event_type: Optional[UIEventType] = None) -> Optional[UIEvent]:
        events = self.get_events(event_type)
        return events[-1] if events else None

    def clear(self):
        self._event_log.clear()


@dataclass
class UIState:
    """Snapshot of UI state for testing."""
    conversation_text: str
    transcript_length: int
    history_length: int
    header_text: str
    header_status: str
    input_text: str
    waiting: bool
    error: Optional[str]
    viewport_offset: int


def parse_ui_events_from_log(log_content: str) -> list[UIEvent]:
    """Parse UI events from log file content."""
    events = []
    for line in log_content.splitlines():
        start = line.find("UI_EVENT|")
        if start >= 0:
            event = UIEvent.from_log_line(line[start:])
            if event:
                events.append(event)
    return events
