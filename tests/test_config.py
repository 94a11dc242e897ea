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

import logging
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from tuichat.core.config import DEFAULT_API_URL, DEFAULT_MODEL, load_config
from tuichat.core.errors import ConfigurationError


def write_config(text: str, dirpath: Path) -> Path:
    cfg_dir = dirpath / ".tuichat"
    cfg_dir.mkdir(exist_ok=True)
    path = cfg_dir / "config.toml"
    path.write_text(text, encoding="utf-8")
    return path


class ConfigTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmpdir = Path(self._tmp.name)
        self.env_file = self.tmpdir / "missing.env"
        patcher = mock.patch.dict(os.environ, {"HOME": str(self.tmpdir)}, clear=True)
        patcher.start()
        self.addCleanup(patcher.stop)

    def tearDown(self):
        root_logger = logging.getLogger()
        for handler in list(root_logger.handlers):
            handler.close()
            root_logger.removeHandler(handler)
        self._tmp.cleanup()

    def test_missing_api_key_is_fatal(self):
        with self.assertRaises(ConfigurationError) as ctx:
            load_config(env_file=self.env_file)
        self.assertIn("OPENAI_API_KEY", str(ctx.exception))

    def test_defaults_with_key_from_environment(self):
        os.environ["OPENAI_API_KEY"] = "sk-env"
        cfg = load_config(env_file=self.env_file)
        self.assertEqual(cfg.api_key, "sk-env")
        self.assertEqual(cfg.api_url, DEFAULT_API_URL)
        self.assertEqual(cfg.model_name, DEFAULT_MODEL)
        self.assertEqual(cfg.tick_interval, 0.1)
        self.assertEqual(cfg.text_width, 80)
        self.assertEqual(cfg.viewport_height, 22)
        self.assertEqual(cfg.char_limit, 280)
        self.assertEqual(cfg.log_file, self.tmpdir / ".tuichat" / "debug.log")

    def test_key_loaded_from_dotenv_file(self):
        env_file = self.tmpdir / ".env"
        env_file.write_text("OPENAI_API_KEY=sk-dotenv\n", encoding="utf-8")
        cfg = load_config(env_file=env_file)
        self.assertEqual(cfg.api_key, "sk-dotenv")

    def test_config_file_values_and_overrides(self):
        write_config("""
[general]
log_level = "debug"
log_file = ""
tick_interval = 0.25
text_width = 60
viewport_height = 10
char_limit = 100

[openai]
api_url = "http://localhost:8080/v1"
api_key = "sk-file"
model = "gpt-4o"
timeout = 5
headers = { "X-Team" = "chat" }
""", self.tmpdir)
        cfg = load_config(env_file=self.env_file, model_override="gpt-4o-mini")
        self.assertEqual(cfg.api_key, "sk-file")
        self.assertEqual(cfg.api_url, "http://localhost:8080/v1")
        self.assertEqual(cfg.model_name, "gpt-4o-mini")
        self.assertEqual(cfg.timeout, 5)
        self.assertEqual(cfg.log_level, "DEBUG")
        self.assertIsNone(cfg.log_file)
        self.assertEqual(cfg.tick_interval, 0.25)
        self.assertEqual(cfg.text_width, 60)
        self.assertEqual(cfg.viewport_height, 10)
        self.assertEqual(cfg.char_limit, 100)
        self.assertEqual(cfg.headers, {"X-Team": "chat"})

    def test_invalid_values_raise(self):
        os.environ["OPENAI_API_KEY"] = "sk-env"
        write_config("[general]\ntext_width = 0\n", self.tmpdir)
        with self.assertRaises(ConfigurationError):
            load_config(env_file=self.env_file)

        write_config("[general]\nlog_level = \"LOUD\"\n", self.tmpdir)
        with self.assertRaises(ConfigurationError):
            load_config(env_file=self.env_file)

    def test_invalid_toml_raises(self):
        os.environ["OPENAI_API_KEY"] = "sk-env"
        write_config("[general\nbroken", self.tmpdir)
        with self.assertRaises(ConfigurationError):
            load_config(env_file=self.env_file)

    def test_explicit_missing_config_path_raises(self):
        os.environ["OPENAI_API_KEY"] = "sk-env"
        with self.assertRaises(ConfigurationError):
            load_config(config_path=self.tmpdir / "nope.toml", env_file=self.env_file)


if __name__ == "__main__":
    unittest.main()
