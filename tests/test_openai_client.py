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

import unittest

import requests

from tuichat.core.config import Config
from tuichat.core.conversations import Message
from tuichat.core.errors import CompletionError, ConnectivityError
from tuichat.core.openai_client import OpenAIChatClient


def make_config(api_url="https://api.openai.com/v1", headers=None):
    return Config(
        api_url=api_url,
        api_key="sk-test",
        model_name="gpt-4o",
        timeout=7,
        log_level="INFO",
        log_file=None,
        headers=headers or {},
    )


class FakeResponse:
    def __init__(self, status_code=200, payload=None, reason="OK", text=""):
        self.status_code = status_code
        self._payload = payload if payload is not None else {}
        self.reason = reason
        self.text = text
        self.headers = {"x-request-id": "req-1"}

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError("err", response=self)


class FakeSession:
    def __init__(self, response=None, exc=None):
        self.headers = {}
        self.response = response or FakeResponse()
        self.exc = exc
        self.calls = []

    def request(self, method, url, timeout=None, **kwargs):
        self.calls.append({"method": method, "url": url, "timeout": timeout, **kwargs})
        if self.exc is not None:
            raise self.exc
        return self.response


def reply_payload(content, role="assistant"):
    return {
        "id": "chatcmpl-1",
        "model": "gpt-4o",
        "choices": [{"index": 0, "message": {"role": role, "content": content}}],
        "usage": {"total_tokens": 12},
    }


class OpenAIClientTests(unittest.TestCase):
    def test_session_headers_carry_key_and_extra_headers(self):
        session = FakeSession()
        OpenAIChatClient(make_config(headers={"X-Team": "chat"}), session=session)
        self.assertEqual(session.headers["Authorization"], "Bearer sk-test")
        self.assertEqual(session.headers["X-Team"], "chat")

    def test_build_url_avoids_duplicate_version(self):
        client = OpenAIChatClient(make_config(), session=FakeSession())
        self.assertEqual(client._build_url("/v1/models"), "https://api.openai.com/v1/models")

        client = OpenAIChatClient(make_config(api_url="http://localhost:8080/"), session=FakeSession())
        self.assertEqual(client._build_url("/v1/models"), "http://localhost:8080/v1/models")

    def test_complete_posts_history_and_returns_reply(self):
        session = FakeSession(FakeResponse(payload=reply_payload("Hello there")))
        client = OpenAIChatClient(make_config(), session=session)

        history = [
            Message(role="user", content="hi"),
            Message(role="assistant", content="hey"),
            Message(role="user", content="how are you?"),
        ]
        reply = client.complete(history)

        self.assertEqual(reply, Message(role="assistant", content="Hello there"))
        call = session.calls[0]
        self.assertEqual(call["method"], "POST")
        self.assertEqual(call["url"], "https://api.openai.com/v1/chat/completions")
        self.assertEqual(call["timeout"], 7)
        self.assertEqual(call["json"]["model"], "gpt-4o")
        self.assertEqual(
            call["json"]["messages"],
            [
                {"role": "user", "content": "hi"},
                {"role": "assistant", "content": "hey"},
                {"role": "user", "content": "how are you?"},
            ],
        )

    def test_complete_strips_stop_tokens(self):
        session = FakeSession(FakeResponse(payload=reply_payload("Done.<|im_end|>")))
        client = OpenAIChatClient(make_config(), session=session)
        reply = client.complete([Message(role="user", content="go")])
        self.assertEqual(reply.content, "Done.")

    def test_complete_http_error_includes_provider_detail(self):
        payload = {"error": {"message": "bad key", "code": "invalid_api_key"}}
        session = FakeSession(FakeResponse(status_code=401, payload=payload, reason="Unauthorized"))
        client = OpenAIChatClient(make_config(), session=session)

        with self.assertRaises(CompletionError) as ctx:
            client.complete([Message(role="user", content="hi")])

        message = str(ctx.exception)
        self.assertIn("HTTP error 401: Unauthorized", message)
        self.assertIn("Message: bad key", message)
        self.assertIn("Code: invalid_api_key", message)

    def test_complete_timeout_maps_to_completion_error(self):
        session = FakeSession(exc=requests.Timeout("slow"))
        client = OpenAIChatClient(make_config(), session=session)
        with self.assertRaises(CompletionError) as ctx:
            client.complete([Message(role="user", content="hi")])
        self.assertIn("timed out after 7 seconds", str(ctx.exception))

    def test_complete_without_choices_raises(self):
        session = FakeSession(FakeResponse(payload={"choices": []}))
        client = OpenAIChatClient(make_config(), session=session)
        with self.assertRaises(CompletionError):
            client.complete([Message(role="user", content="hi")])

    def test_complete_invalid_json_raises(self):
        session = FakeSession(FakeResponse(payload=ValueError("not json")))
        client = OpenAIChatClient(make_config(), session=session)
        with self.assertRaises(CompletionError):
            client.complete([Message(role="user", content="hi")])

    def test_probe_lists_models(self):
        session = FakeSession(FakeResponse(payload={"data": []}))
        client = OpenAIChatClient(make_config(), session=session)
        client.probe()
        self.assertEqual(session.calls[0]["method"], "GET")
        self.assertEqual(session.calls[0]["url"], "https://api.openai.com/v1/models")

    def test_probe_connection_failure_raises_connectivity_error(self):
        session = FakeSession(exc=requests.ConnectionError("refused"))
        client = OpenAIChatClient(make_config(), session=session)
        with self.assertRaises(ConnectivityError) as ctx:
            client.probe()
        self.assertIn("Failed to connect", str(ctx.exception))

    def test_probe_http_error_raises_connectivity_error(self):
        session = FakeSession(FakeResponse(status_code=500, payload={}, reason="Server Error"))
        client = OpenAIChatClient(make_config(), session=session)
        with self.assertRaises(ConnectivityError) as ctx:
            client.probe()
        self.assertIn("HTTP error 500", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()
