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

"""Terminal UI for TuiChat using prompt_toolkit."""

import asyncio
import logging
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from prompt_toolkit.input import Input
    from prompt_toolkit.output import Output

from prompt_toolkit import Application
from prompt_toolkit.buffer import Buffer
from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import ANSI
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.layout import HSplit, Layout, VSplit, Window, FormattedTextControl
from prompt_toolkit.layout.controls import BufferControl
from prompt_toolkit.styles import Style

from ..core.commands import ChatBackend
from ..core.config import Config
from ..core.events import ChatResult, Event, KeyEvent
from ..core.model import EDIT_KEY, QUIT_KEYS, SUBMIT_KEY, init, new_model, update
from .dispatcher import CommandDispatcher
from .events import UIEventEmitter, UIEventType, UIState

logger = logging.getLogger(__name__)

INPUT_PROMPT = "┃ "
SCROLL_KEYS = ('up', 'down', 'pageup', 'pagedown')
HELP_TEXT = "enter: send | up/down: scroll | esc, ctrl+c: quit"

APP_STYLE = Style.from_dict({
    'border': 'fg:#636363',
    'prompt': 'fg:#cda9d6',
    'status': 'fg:ansigray',
    'status-error': 'fg:ansired',
})


class TuiChatUI:
    """Terminal user interface for TuiChat.

    Owns the chat model and feeds it one event at a time: keystrokes from
    the key bindings, ticks from loop timers and backend results from the
    dispatcher. The model is only touched on the event loop thread.
    """

    def __init__(
        self,
        config: Config,
        client: ChatBackend,
        log_ui_events: bool = False,
        input: 'Input | None' = None,
        output: 'Output | None' = None,
    ):
        """Initialize the UI.

        Args:
            config: Application configuration
            client: Chat backend used by dispatched commands
            log_ui_events: Whether to log UI events to the logger
            input: Optional custom input (for headless testing)
            output: Optional custom output (for headless testing)
        """
        self.config = config
        self.model = new_model(config)
        self.events = UIEventEmitter(log_events=log_ui_events)
        self.dispatcher = CommandDispatcher(client, send=self.send, on_quit=self._quit)
        self._syncing_input = False
        self._exiting = False

        self.input_buffer = Buffer(multiline=False)
        self.input_buffer.on_text_changed += self._on_input_changed

        self.layout = self._create_layout()
        self.kb = self._create_key_bindings()

        app_kwargs = {
            'layout': self.layout,
            'key_bindings': self.kb,
            'style': APP_STYLE,
            'full_screen': True,
            'mouse_support': False,  # Disabled to allow terminal-native mouse selection
        }
        if input is not None:
            app_kwargs['input'] = input
        if output is not None:
            app_kwargs['output'] = output

        self.app = Application(**app_kwargs)

    def _create_layout(self) -> Layout:  # pragma: no cover - UI layout wiring
        """Header, transcript viewport, input line and status line."""
        header_window = Window(
            content=FormattedTextControl(text=lambda: ANSI(self.model.header.view())),
            height=1
        )

        self.viewport_window = Window(
            content=FormattedTextControl(text=lambda: ANSI(self.model.viewport.view())),
            height=self.config.viewport_height
        )

        prompt_window = Window(
            content=FormattedTextControl(text=[('class:prompt', INPUT_PROMPT)]),
            width=len(INPUT_PROMPT),
            dont_extend_width=True
        )

        self.input_window = Window(
            content=BufferControl(buffer=self.input_buffer),
            height=1
        )

        status_window = Window(
            content=FormattedTextControl(text=self._get_status_line),
            height=1
        )

        root_container = HSplit([
            header_window,
            Window(char='─', height=1, style='class:border'),
            self.viewport_window,
            Window(char='─', height=1, style='class:border'),
            VSplit([prompt_window, self.input_window], height=1),
            status_window,
        ])

        return Layout(root_container, focused_element=self.input_window)

    def _create_key_bindings(self) -> KeyBindings:  # pragma: no cover - interactive key handling
        """Translate key presses into KeyEvents for the model."""
        kb = KeyBindings()

        def forward(key: str):
            def handler(event):
                self.send(KeyEvent(key=key, text=self.input_buffer.text))
            return handler

        kb.add('enter')(forward(SUBMIT_KEY))
        for key in QUIT_KEYS:
            kb.add(key, eager=(key == 'escape'))(forward(key))
        for key in SCROLL_KEYS:
            kb.add(key)(forward(key))

        return kb

    def _get_status_line(self):
        """Last error if any, otherwise key help."""
        if self.model.err is not None:
            return [('class:status-error', f"Error: {self.model.err}")]
        return [('class:status', HELP_TEXT)]

    def _on_input_changed(self, buffer: Buffer) -> None:
        if self._syncing_input:
            return
        self.send(KeyEvent(key=EDIT_KEY, text=buffer.text))

    def _sync_input(self) -> None:
        """Write the model's input text back into the input box."""
        text = self.model.input_text
        if self.input_buffer.text == text:
            return
        self._syncing_input = True
        try:
            self.input_buffer.set_document(Document(text=text, cursor_position=len(text)), bypass_readonly=True)
        finally:
            self._syncing_input = False

    def send(self, event: Event) -> None:
        """Process one event to completion and dispatch its commands."""
        was_waiting = self.model.waiting
        was_pending = self.model.header.pending

        self.model, commands = update(self.model, event)

        self._sync_input()
        self._emit_changes(event, was_waiting, was_pending)
        self.dispatcher.dispatch(commands)
        self.app.invalidate()

    def _emit_changes(self, event: Event, was_waiting: bool, was_pending: bool) -> None:
        model = self.model
        if not was_waiting and model.waiting:
            self.events.emit(UIEventType.MESSAGE_SENT, content=(model.pending_prompt or "")[:100])
            self.events.emit(UIEventType.CONVERSATION_UPDATED, message_count=len(model.transcript))
        elif was_waiting and not model.waiting:
            if isinstance(event, ChatResult) and event.err is not None:
                self.events.emit(UIEventType.RESPONSE_FAILED, error=str(event.err))
            else:
                self.events.emit(UIEventType.RESPONSE_COMPLETE, history_length=len(model.history))
                self.events.emit(UIEventType.CONVERSATION_UPDATED, message_count=len(model.transcript))
        if was_pending and not model.header.pending:
            self.events.emit(UIEventType.HEADER_RESOLVED, status=model.header.status.name)

    def get_ui_state(self) -> UIState:
        """Get complete UI state snapshot for testing."""
        model = self.model
        return UIState(
            conversation_text=model.viewport.view(),
            transcript_length=len(model.transcript),
            history_length=len(model.history),
            header_text=model.header.view(),
            header_status=model.header.status.name,
            input_text=self.input_buffer.text,
            waiting=model.waiting,
            error=str(model.err) if model.err is not None else None,
            viewport_offset=model.viewport.y_offset,
        )

    def _quit(self, output: str) -> None:
        if self._exiting:
            return
        self._exiting = True
        logger.info("Quit requested")
        self.app.exit(result=output)

    def _on_start(self) -> None:
        """Bind the dispatcher to the running loop and start the probe."""
        self.dispatcher.bind(asyncio.get_running_loop())
        self.dispatcher.dispatch(init(self.model))
        self.events.emit(
            UIEventType.APP_STARTED,
            model=self.config.model_name
        )

    def run(self) -> str:
        """Run the application. Returns the input text at quit time."""
        try:
            output = self.app.run(pre_run=self._on_start)
        finally:
            self.events.emit(UIEventType.APP_STOPPED)
        return output or ""


def run_ui(config: Config, client: ChatBackend, log_ui_events: bool = False) -> str:  # pragma: no cover - interactive UI loop
    """Run the terminal UI.

    Args:
        config: Application configuration
        client: Chat backend
        log_ui_events: Whether to log UI events to the logger

    Returns:
        The input box contents when the user quit
    """
    ui = TuiChatUI(config, client, log_ui_events=log_ui_events)
    return ui.run()
