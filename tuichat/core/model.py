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

"""Root state machine for the chat client.

`update` takes the current model and one event and returns the model along
with the commands to run next. It performs no I/O: network calls and timers
are described by commands and come back as events.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Optional

from .commands import Command, Quit, RunChatCompletion, RunConnectivityProbe
from .config import Config
from .conversations import Message
from .events import ChatResult, ErrorEvent, Event, KeyEvent, StatusResult, TickEvent
from .header import Header
from .render import SPINNER_COLOR, render_transcript, wrap_width
from .spinner import MINI_DOT, LINE, Spinner
from .transcript import Transcript, placeholder_entry, reply_entry, user_entry
from .viewport import Viewport

logger = logging.getLogger(__name__)

QUIT_KEYS = ('c-c', 'c-d', 'escape')
SUBMIT_KEY = 'enter'
EDIT_KEY = 'edit'  # Input box text changed


@dataclass
class ChatModel:
    """Complete state of the chat client."""
    header: Header
    spinner: Spinner
    viewport: Viewport
    text_width: int
    char_limit: int
    transcript: Transcript = field(default_factory=Transcript)
    history: list[Message] = field(default_factory=list)
    input_text: str = ""
    waiting: bool = False
    pending_prompt: Optional[str] = None  # User text of the outstanding request
    err: Optional[Exception] = None

    @property
    def wrap_width(self) -> int:
        return wrap_width(self.text_width)


def new_model(config: Config) -> ChatModel:
    """Build the initial state: empty transcript, not waiting, probe pending."""
    header_spinner = Spinner(frames=LINE, interval=config.tick_interval)
    return ChatModel(
        header=Header(model_name=config.model_name, spinner=header_spinner, width=config.text_width),
        spinner=Spinner(frames=MINI_DOT, interval=config.tick_interval, color=SPINNER_COLOR),
        viewport=Viewport(width=config.text_width, height=config.viewport_height),
        text_width=config.text_width,
        char_limit=config.char_limit,
    )


def init(model: ChatModel) -> list[Command]:
    """Commands to run once at startup."""
    return [RunConnectivityProbe(), model.header.spinner.tick()]


def refresh_viewport(model: ChatModel) -> None:
    """Re-derive viewport content from the transcript."""
    model.viewport.set_content(render_transcript(model.transcript))


def update(model: ChatModel, event: Event) -> tuple[ChatModel, list[Command]]:
    """Apply one event to the model."""
    if isinstance(event, KeyEvent):
        return _handle_key(model, event)
    if isinstance(event, TickEvent):
        return _handle_tick(model, event)
    if isinstance(event, ChatResult):
        return _handle_chat_result(model, event)
    if isinstance(event, StatusResult):
        return _handle_status_result(model, event)
    if isinstance(event, ErrorEvent):
        logger.error("Error event: %s", event.err)
        model.err = event.err
        return model, []

    logger.debug("Ignoring unknown event: %r", event)
    return model, []


def _handle_key(model: ChatModel, event: KeyEvent) -> tuple[ChatModel, list[Command]]:
    model.input_text = event.text[:model.char_limit]

    if event.key in QUIT_KEYS:
        return model, [Quit(output=model.input_text)]

    if event.key == SUBMIT_KEY:
        return _submit(model)

    if event.key == 'up':
        model.viewport.line_up()
    elif event.key == 'down':
        model.viewport.line_down()
    elif event.key == 'pageup':
        model.viewport.page_up()
    elif event.key == 'pagedown':
        model.viewport.page_down()

    return model, []


def _submit(model: ChatModel) -> tuple[ChatModel, list[Command]]:
    message = model.input_text.strip()
    if not message:
        return model, []

    if model.waiting:
        logger.debug("Submit ignored while waiting for a reply")
        return model, []

    logger.debug("Message: %s", message)

    model.transcript.append(user_entry(message, model.wrap_width))
    model.transcript.append(placeholder_entry(model.spinner.view()))
    refresh_viewport(model)

    logger.debug("Viewport line count: %d", model.viewport.total_line_count)

    model.input_text = ""
    model.viewport.goto_bottom()
    model.waiting = True
    model.pending_prompt = message

    request = tuple(model.history) + (Message(role='user', content=message),)
    return model, [model.spinner.tick(), RunChatCompletion(history=request)]


def _handle_tick(model: ChatModel, event: TickEvent) -> tuple[ChatModel, list[Command]]:
    if model.spinner.owns(event):
        if not model.waiting or not model.spinner.is_current(event):
            return model, []

        model.spinner.advance()
        model.transcript.replace_placeholder(placeholder_entry(model.spinner.view()))
        refresh_viewport(model)
        model.viewport.goto_bottom()
        return model, [model.spinner.tick()]

    header_spinner = model.header.spinner
    if header_spinner.owns(event):
        if not model.header.pending or not header_spinner.is_current(event):
            return model, []

        header_spinner.advance()
        return model, [header_spinner.tick()]

    return model, []


def _handle_chat_result(model: ChatModel, event: ChatResult) -> tuple[ChatModel, list[Command]]:
    if not model.waiting:
        logger.warning("Chat result arrived with no request outstanding; ignoring")
        return model, []

    model.waiting = False
    prompt = model.pending_prompt
    model.pending_prompt = None

    if event.err is not None:
        # The placeholder stays so the failed turn remains visible
        model.transcript.replace_placeholder(replace(model.transcript.placeholder, pending=False))
        model.err = event.err
        return model, []

    logger.debug("Reply line count: %d", event.text.count('\n') + 1)

    model.transcript.replace_placeholder(reply_entry(event.text, model.wrap_width))
    model.history.append(Message(role='user', content=prompt))
    model.history.append(Message(role='assistant', content=event.text))
    refresh_viewport(model)

    logger.debug("Viewport line count: %d", model.viewport.total_line_count)

    model.viewport.goto_bottom()
    return model, []


def _handle_status_result(model: ChatModel, event: StatusResult) -> tuple[ChatModel, list[Command]]:
    if not model.header.resolve(event.ok):
        logger.debug("Connectivity status already resolved; ignoring %r", event)
        return model, []

    if not event.ok:
        logger.warning("Connectivity check failed: %s", event.err)
    return model, []
