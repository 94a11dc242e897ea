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

"""OpenAI-compatible chat client."""

import logging
import re
from typing import Optional

import requests

from .config import Config
from .conversations import Message, history_payload
from .errors import CompletionError, ConnectivityError, TuiChatError

logger = logging.getLogger(__name__)


class OpenAIChatClient:
    """Client for OpenAI-compatible chat completions.

    Exposes the two operations the UI needs: a one-shot reachability/auth
    probe and a single blocking completion round trip.
    """

    # Common stop tokens that may leak through from various models
    STOP_TOKENS = [
        "<|im_end|>",
        "<|endoftext|>",
        "<|im_start|>",
        "<|end|>",
        "</s>",
        "<|eot_id|>",
    ]

    def __init__(self, config: Config, session: Optional[requests.Session] = None):
        self.config = config
        self.session = session or requests.Session()
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {config.api_key}",
        }
        if config.headers:
            headers.update(config.headers)
        self.session.headers.update(headers)

    def _strip_stop_tokens(self, content: str) -> str:
        """Strip common stop tokens from the end of model output."""
        if not content:
            return content
        for token in self.STOP_TOKENS:
            if content.endswith(token):
                content = content[:-len(token)].rstrip()
        return content

    def _build_url(self, endpoint: str) -> str:
        """Build URL for API endpoint, avoiding duplicate version prefixes.

        If api_url already ends with a version (e.g., /v1, /v2), and endpoint
        starts with the same version, don't duplicate it.
        """
        base = self.config.api_url.rstrip('/')
        version_match = re.search(r'/v\d+$', base)
        if version_match:
            base_version = version_match.group()
            if endpoint.startswith(base_version):
                endpoint = endpoint[len(base_version):]
        return f"{base}{endpoint}"

    def _http_error_message(self, resp: requests.Response) -> str:
        detail_msg = None
        code = None
        try:
            err = resp.json().get("error", {})
            if isinstance(err, dict):
                detail_msg = err.get("message")
                code = err.get("code")
        except ValueError:
            pass

        msg_parts = [f"HTTP error {resp.status_code}: {resp.reason}"]
        if detail_msg:
            msg_parts.append(f"Message: {detail_msg}")
        if code:
            msg_parts.append(f"Code: {code}")
        return "; ".join(msg_parts)

    def _request(self, method: str, endpoint: str, error_cls: type[TuiChatError], **kwargs) -> requests.Response:
        """Send a request and map transport failures onto `error_cls`."""
        url = self._build_url(endpoint)
        timeout = self.config.timeout
        logger.debug("%s %s", method, url)
        try:
            resp = self.session.request(method, url, timeout=timeout, **kwargs)
            resp.raise_for_status()
            return resp
        except requests.Timeout as e:
            raise error_cls(
                f"Request timed out after {timeout} seconds. "
                "Increase the timeout in config.toml."
            ) from e
        except requests.ConnectionError as e:
            raise error_cls(
                f"Failed to connect to provider at {self.config.api_url}. "
                "Check your network or provider URL."
            ) from e
        except requests.HTTPError as e:
            raise error_cls(self._http_error_message(e.response)) from e

    def _log_response_metadata(self, resp: requests.Response, data: dict) -> None:
        """Log response metadata without message content."""
        headers = getattr(resp, 'headers', None) or {}
        interesting_headers = {
            k: v for k, v in headers.items()
            if any(x in k.lower() for x in ['x-request', 'x-ratelimit', 'openai'])
        }
        metadata = {
            "status": getattr(resp, 'status_code', None),
            "model": data.get("model"),
            "id": data.get("id"),
            "usage": data.get("usage"),
            "headers": interesting_headers,
        }
        metadata = {k: v for k, v in metadata.items() if v}
        logger.debug("Response metadata: %s", metadata)

    def probe(self) -> None:
        """Check that the provider is reachable and accepts our key.

        Raises:
            ConnectivityError: If the models listing cannot be fetched
        """
        self._request("GET", "/v1/models", ConnectivityError)
        logger.info("Connectivity probe succeeded for %s", self.config.api_url)

    def complete(self, history: list[Message]) -> Message:
        """Send the conversation and return the assistant's reply.

        Args:
            history: Full conversation, ending with the new user message

        Returns:
            The assistant message

        Raises:
            CompletionError: On transport errors or a malformed response
        """
        payload = {
            "model": self.config.model_name,
            "messages": history_payload(history),
        }
        logger.debug("Chat request: model=%s messages=%d", payload["model"], len(history))
        resp = self._request("POST", "/v1/chat/completions", CompletionError, json=payload)

        try:
            data = resp.json()
        except ValueError as e:
            raise CompletionError(f"Invalid JSON in completion response: {e}") from e

        choices = data.get("choices") or []
        if not choices or not isinstance(choices[0].get("message"), dict):
            raise CompletionError("Completion response contained no choices")

        message = choices[0]["message"]
        content = message.get("content") or ""
        if not content:
            logger.warning("Empty content in response. Message keys: %s", list(message.keys()))

        self._log_response_metadata(resp, data)

        return Message(
            role=message.get("role") or "assistant",
            content=self._strip_stop_tokens(content),
        )
