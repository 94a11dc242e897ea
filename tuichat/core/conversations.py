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

"""Conversation history sent to the chat backend."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Message:
    """A single message in the conversation history."""
    role: str  # "user" or "assistant"
    content: str

    def to_payload(self) -> dict:
        return {"role": self.role, "content": self.content}


def history_payload(history: list[Message]) -> list[dict]:
    """Convert history to the chat completions `messages` array."""
    return [msg.to_payload() for msg in history]
