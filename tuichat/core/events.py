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

"""Events consumed by the chat state machine.

The set is closed: every event the loop can receive is one of the
dataclasses below. Keystrokes come from the front end, ticks from the
scheduler, and results from dispatched commands.
"""

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class KeyEvent:
    """A keystroke, with a snapshot of the input box at the time."""
    key: str  # prompt_toolkit key name, e.g. "enter", "c-c", or "edit"
    text: str = ""


@dataclass(frozen=True)
class TickEvent:
    """Spinner animation tick for the spinner identified by `spinner_id`."""
    spinner_id: int
    tag: int = 0


@dataclass(frozen=True)
class StatusResult:
    """Result of the startup connectivity probe."""
    err: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.err is None


@dataclass(frozen=True)
class ChatResult:
    """Result of a chat completion request."""
    text: str = ""
    err: Optional[Exception] = None


@dataclass(frozen=True)
class ErrorEvent:
    """An error raised outside of a command result."""
    err: Exception


Event = Union[KeyEvent, TickEvent, StatusResult, ChatResult, ErrorEvent]
