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

"""Frame-based spinners driven by tick events."""

import itertools
from dataclasses import dataclass, field
from typing import Optional

from .commands import Tick
from .events import TickEvent
from .render import colorize

MINI_DOT = ("⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏")
LINE = ("|", "/", "-", "\\")

_spinner_ids = itertools.count(1)


def _next_id() -> int:
    return next(_spinner_ids)


@dataclass
class Spinner:
    """An animated spinner.

    `id` tells this spinner's ticks apart from any other spinner's on the
    shared event channel. `tag` counts frames; a tick carrying an older tag
    belongs to a superseded tick chain and is dropped.
    """
    frames: tuple[str, ...] = MINI_DOT
    interval: float = 0.1
    color: Optional[str] = None
    id: int = field(default_factory=_next_id)
    frame: int = 0
    tag: int = 0

    def current_frame(self) -> str:
        return self.frames[self.frame]

    def view(self) -> str:
        return colorize(self.current_frame(), self.color) if self.color else self.current_frame()

    def tick(self) -> Tick:
        """Command that delivers this spinner's next tick."""
        return Tick(spinner_id=self.id, tag=self.tag, delay=self.interval)

    def owns(self, event: TickEvent) -> bool:
        return event.spinner_id == self.id

    def is_current(self, event: TickEvent) -> bool:
        return self.owns(event) and event.tag == self.tag

    def advance(self) -> None:
        self.frame = (self.frame + 1) % len(self.frames)
        self.tag += 1
