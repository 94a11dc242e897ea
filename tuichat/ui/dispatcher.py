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

"""Runs commands produced by the state machine without blocking the loop."""

import asyncio
import logging
import threading
from typing import Callable, Iterable, Optional

from ..core.commands import (
    ChatBackend, Command, Quit, RunChatCompletion, RunConnectivityProbe, Tick,
    run_chat_completion, run_connectivity_probe,
)
from ..core.events import Event

logger = logging.getLogger(__name__)


class CommandDispatcher:
    """Turn commands into events delivered back through `send`.

    Blocking backend calls run on daemon threads and post their result to
    the loop with `call_soon_threadsafe`. Ticks are timers on the loop.
    `send` is only ever called on the loop thread.
    """

    def __init__(
        self,
        client: ChatBackend,
        send: Callable[[Event], None],
        on_quit: Callable[[str], None],
    ):
        self.client = client
        self.send = send
        self.on_quit = on_quit
        self.loop: Optional[asyncio.AbstractEventLoop] = None

    def bind(self, loop: asyncio.AbstractEventLoop) -> None:
        """Attach to the running event loop. Must precede `dispatch`."""
        self.loop = loop

    def dispatch(self, commands: Iterable[Command]) -> None:
        if self.loop is None:
            raise RuntimeError("Dispatcher is not bound to an event loop")
        for command in commands:
            if isinstance(command, Tick):
                self.loop.call_later(command.delay, self.send, command.event())
            elif isinstance(command, RunConnectivityProbe):
                self._run_in_thread("connectivity-probe", lambda: run_connectivity_probe(self.client))
            elif isinstance(command, RunChatCompletion):
                history = command.history
                self._run_in_thread("chat-completion", lambda: run_chat_completion(self.client, history))
            elif isinstance(command, Quit):
                self.on_quit(command.output)
            else:
                logger.warning("Unknown command ignored: %r", command)

    def _run_in_thread(self, name: str, work: Callable[[], Event]) -> None:
        loop = self.loop

        def runner():
            event = work()
            try:
                loop.call_soon_threadsafe(self.send, event)
            except RuntimeError:
                # Loop closed after quit; the result has nowhere to go
                logger.debug("Dropping %s result after shutdown", name)

        threading.Thread(target=runner, daemon=True, name=name).start()
