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

"""Commands returned by the state machine and the work they perform.

A command is a description of deferred work. The dispatcher runs it off the
event loop and feeds exactly one resulting event back in (`Quit` excepted,
which ends the loop).
"""

import logging
from dataclasses import dataclass, field
from typing import Protocol, Union

from .conversations import Message
from .events import ChatResult, StatusResult, TickEvent

logger = logging.getLogger(__name__)


class ChatBackend(Protocol):
    def probe(self) -> None: ...

    def complete(self, history: list[Message]) -> Message: ...


@dataclass(frozen=True)
class Tick:
    """Deliver a TickEvent for a spinner after `delay` seconds."""
    spinner_id: int
    tag: int
    delay: float

    def event(self) -> TickEvent:
        return TickEvent(spinner_id=self.spinner_id, tag=self.tag)


@dataclass(frozen=True)
class RunConnectivityProbe:
    """Check backend reachability once; resolves to a StatusResult."""


@dataclass(frozen=True)
class RunChatCompletion:
    """Request a completion for `history`; resolves to a ChatResult."""
    history: tuple[Message, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Quit:
    """Terminate the loop, handing `output` to the caller."""
    output: str = ""


Command = Union[Tick, RunConnectivityProbe, RunChatCompletion, Quit]


def run_connectivity_probe(client: ChatBackend) -> StatusResult:
    """Run the probe and wrap its outcome in a StatusResult."""
    try:
        client.probe()
    except Exception as e:
        logger.warning("Connectivity probe failed: %s", e)
        return StatusResult(err=e)
    return StatusResult()


def run_chat_completion(client: ChatBackend, history: tuple[Message, ...]) -> ChatResult:
    """Run one completion round trip and wrap its outcome in a ChatResult."""
    try:
        reply = client.complete(list(history))
    except Exception as e:
        logger.exception("Chat error")
        return ChatResult(err=e)
    return ChatResult(text=reply.content)
