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

"""Header bar showing the model name and the connectivity probe status."""

from dataclasses import dataclass
from enum import Enum, auto

from .render import HEADER_COLOR, colorize
from .spinner import Spinner

SUCCESS_ICON = "✔"
FAILURE_ICON = "✘"


class HeaderStatus(Enum):
    PENDING = auto()
    SUCCEEDED = auto()
    FAILED = auto()


@dataclass
class Header:
    """Header state. The probe status moves out of PENDING exactly once."""
    model_name: str
    spinner: Spinner
    width: int
    status: HeaderStatus = HeaderStatus.PENDING

    @property
    def pending(self) -> bool:
        return self.status is HeaderStatus.PENDING

    def resolve(self, ok: bool) -> bool:
        """Record the probe result. Returns False if already resolved."""
        if not self.pending:
            return False
        self.status = HeaderStatus.SUCCEEDED if ok else HeaderStatus.FAILED
        return True

    def icon(self) -> str:
        if self.status is HeaderStatus.SUCCEEDED:
            return SUCCESS_ICON
        if self.status is HeaderStatus.FAILED:
            return FAILURE_ICON
        return self.spinner.current_frame()

    def view(self) -> str:
        """Model name on the left, status icon on the right."""
        icon = self.icon()
        padding = " " * max(1, self.width - len(self.model_name) - len(icon))
        return colorize(self.model_name + padding + icon, HEADER_COLOR)
