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

"""Scrollable viewport over rendered transcript content."""

from dataclasses import dataclass, field


@dataclass
class Viewport:
    """Fixed-size window onto a list of lines.

    `y_offset` is the index of the first visible line, clamped to
    [0, total_line_count - height].
    """
    width: int
    height: int
    y_offset: int = 0
    lines: list[str] = field(default_factory=list)

    def set_content(self, content: str) -> None:
        self.lines = content.split('\n')
        if self.y_offset > len(self.lines) - 1:
            self.goto_bottom()

    @property
    def total_line_count(self) -> int:
        return len(self.lines)

    @property
    def max_y_offset(self) -> int:
        return max(0, len(self.lines) - self.height)

    @property
    def at_top(self) -> bool:
        return self.y_offset <= 0

    @property
    def at_bottom(self) -> bool:
        return self.y_offset >= self.max_y_offset

    def set_y_offset(self, offset: int) -> None:
        self.y_offset = min(max(0, offset), self.max_y_offset)

    def goto_top(self) -> None:
        self.y_offset = 0

    def goto_bottom(self) -> None:
        self.y_offset = self.max_y_offset

    def line_up(self, n: int = 1) -> None:
        self.set_y_offset(self.y_offset - n)

    def line_down(self, n: int = 1) -> None:
        self.set_y_offset(self.y_offset + n)

    def page_up(self) -> None:
        self.line_up(self.height)

    def page_down(self) -> None:
        self.line_down(self.height)

    def visible_lines(self) -> list[str]:
        return self.lines[self.y_offset:self.y_offset + self.height]

    def view(self) -> str:
        return '\n'.join(self.visible_lines())
