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

"""Transcript rendering: word wrapping, styling and markdown to ANSI."""

import re
import textwrap
from typing import Iterable, Protocol

# ANSI codes
BOLD = '\033[1m'
CYAN = '\033[96m'
RESET = '\033[0m'

# Palette
PROMPT_COLOR = "#cda9d6"
PROMPT_TEXT_COLOR = "#fcfcfc"
RESPONSE_COLOR = "#b7e4cf"
RESPONSE_TEXT_COLOR = "#e2cdb5"
SPINNER_COLOR = "#FF00FF"
HEADER_COLOR = "#636363"

PROMPT_PREFIX = "> "
RESPONSE_PREFIX = "> "

# Columns reserved for the prefix and border glyphs
WRAP_MARGIN = 3

# Keeps trailing blank lines from being trimmed by the markdown pass
ZERO_WIDTH_MARKER = "\u200e"


class Rendered(Protocol):
    rendered: str


def wrap_width(text_width: int) -> int:
    return max(1, text_width - WRAP_MARGIN)


def colorize(text: str, color: str) -> str:
    """Wrap each line of `text` in a 24-bit foreground colour.

    Lines are coloured separately so that a viewport starting mid-message
    still shows the right colour.
    """
    if not color:
        return text
    hex_value = color.lstrip('#')
    r, g, b = (int(hex_value[i:i + 2], 16) for i in (0, 2, 4))
    start = f'\033[38;2;{r};{g};{b}m'
    return '\n'.join(f"{start}{line}{RESET}" if line else line for line in text.split('\n'))


def wordwrap(text: str, width: int) -> str:
    """Wrap text at word boundaries, preserving existing line breaks.

    Words longer than `width` are left intact rather than split. Wrapping
    already wrapped text at the same width returns it unchanged.
    """
    if width < 1:
        return text
    wrapped_lines = []
    for line in text.split('\n'):
        wrapped = textwrap.wrap(
            line,
            width=width,
            break_long_words=False,
            break_on_hyphens=False,
        )
        wrapped_lines.extend(wrapped or [''])
    return '\n'.join(wrapped_lines)


def markdown_to_ansi(text: str) -> str:
    """Convert basic markdown formatting to ANSI codes.

    Supports:
    - # Header -> ANSI bold (up to 6 levels)
    - **bold** -> ANSI bold
    - `code` -> ANSI cyan
    """
    # Headers may follow a colour code when the line is already styled
    text = re.sub(r'^((?:\033\[[0-9;]*m)*)(#{1,6})\s+(.+)$', rf'\1{BOLD}\3{RESET}', text, flags=re.MULTILINE)
    text = re.sub(r'\*\*([^*\n]+)\*\*', rf'{BOLD}\1{RESET}', text)
    text = re.sub(r'`([^`\n]+)`', rf'{CYAN}\1{RESET}', text)
    return text


def render_transcript(entries: Iterable[Rendered], renderer=markdown_to_ansi) -> str:
    """Render transcript entries into viewport content.

    Joins the rendered entries with newlines, appends the zero-width marker
    and passes the result through the markdown renderer. Pure: the same
    entries always produce the same output.
    """
    to_display = '\n'.join(entry.rendered for entry in entries) + '\n' + ZERO_WIDTH_MARKER
    return renderer(to_display)
