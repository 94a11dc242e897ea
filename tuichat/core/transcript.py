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

"""Transcript store: the ordered, rendered lines shown in the viewport."""

from dataclasses import dataclass
from typing import Iterator, Optional

from .render import (
    PROMPT_COLOR, PROMPT_PREFIX, PROMPT_TEXT_COLOR,
    RESPONSE_COLOR, RESPONSE_PREFIX, RESPONSE_TEXT_COLOR,
    colorize, wordwrap,
)


@dataclass(frozen=True)
class TranscriptEntry:
    """One displayed message."""
    role: str  # "user" or "assistant"
    text: str  # Raw text before wrapping
    rendered: str  # Wrapped and styled form
    pending: bool = False  # True for the assistant placeholder


def user_entry(text: str, width: int) -> TranscriptEntry:
    wrapped = wordwrap(text, width)
    rendered = colorize(PROMPT_PREFIX, PROMPT_COLOR) + colorize(wrapped, PROMPT_TEXT_COLOR)
    return TranscriptEntry(role='user', text=text, rendered=rendered)


def reply_entry(text: str, width: int) -> TranscriptEntry:
    wrapped = wordwrap(text, width)
    rendered = colorize(RESPONSE_PREFIX, RESPONSE_COLOR) + colorize(wrapped, RESPONSE_TEXT_COLOR)
    return TranscriptEntry(role='assistant', text=text, rendered=rendered)


def placeholder_entry(spinner_view: str) -> TranscriptEntry:
    rendered = colorize(RESPONSE_PREFIX, RESPONSE_COLOR) + spinner_view
    return TranscriptEntry(role='assistant', text="", rendered=rendered, pending=True)


class Transcript:
    """Append-only list of entries.

    The only in-place edit allowed is replacing the trailing placeholder,
    and at most one placeholder exists at a time.
    """

    def __init__(self):
        self._entries: list[TranscriptEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[TranscriptEntry]:
        return iter(self._entries)

    @property
    def entries(self) -> tuple[TranscriptEntry, ...]:
        return tuple(self._entries)

    @property
    def placeholder(self) -> Optional[TranscriptEntry]:
        """The pending placeholder, if the last entry is one."""
        if self._entries and self._entries[-1].pending:
            return self._entries[-1]
        return None

    def append(self, entry: TranscriptEntry) -> None:
        if self.placeholder is not None:
            raise ValueError("Cannot append after a pending placeholder")
        self._entries.append(entry)

    def replace_placeholder(self, entry: TranscriptEntry) -> None:
        """Replace the trailing placeholder with `entry`."""
        if self.placeholder is None:
            raise ValueError("No pending placeholder to replace")
        self._entries[-1] = entry
