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

"""Configuration loading and management for TuiChat."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import toml
from dotenv import load_dotenv

from .errors import ConfigurationError

API_KEY_ENV_VAR = "OPENAI_API_KEY"
DEFAULT_API_URL = "https://api.openai.com/v1"
DEFAULT_MODEL = "gpt-3.5-turbo"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def default_config_dir() -> Path:
    return Path.home() / ".tuichat"


@dataclass
class Config:
    """Application configuration."""
    api_url: str
    api_key: str
    model_name: str
    timeout: int  # API request timeout in seconds
    log_level: str  # Logging level: DEBUG, INFO, WARNING, ERROR
    log_file: Optional[Path]  # Path to log file (None = stderr)
    tick_interval: float = 0.1  # Spinner cadence in seconds
    text_width: int = 80  # Viewport text width in columns
    viewport_height: int = 22
    char_limit: int = 280  # Max characters in the input box
    headers: dict = field(default_factory=dict)


def _resolve_api_key(openai_section: dict) -> Optional[str]:
    """Resolve API key from config or environment variable.

    Checks in order:
    1. api_key in the [openai] section of config.toml
    2. OPENAI_API_KEY env var (a .env file is loaded beforehand)
    """
    if openai_section.get('api_key'):
        return openai_section['api_key']
    return os.environ.get(API_KEY_ENV_VAR) or None


def _positive(value, name: str, kind=int):
    try:
        converted = kind(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Invalid value for '{name}': {value!r}")
    if converted <= 0:
        raise ConfigurationError(f"'{name}' must be positive, got {value!r}")
    return converted


def _setup_logging(config: Config) -> None:
    """Configure logging based on config settings.

    Args:
        config: Configuration object with logging settings
    """
    # Convert log level string to logging constant
    numeric_level = getattr(logging, config.log_level, logging.INFO)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    # The full-screen UI owns the terminal, so a log file is the default
    if config.log_file:
        config.log_file.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(config.log_file, encoding='utf-8')
    else:
        handler = logging.StreamHandler()

    handler.setLevel(numeric_level)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    logging.info(f"Logging initialized: level={config.log_level}, file={config.log_file}")


def load_config(
    config_path: Optional[Path] = None,
    env_file: Optional[Path] = None,
    model_override: Optional[str] = None,
    log_level_override: Optional[str] = None,
) -> Config:
    """Load configuration from ~/.tuichat/config.toml and the environment.

    The config file is optional; every setting has a default except the API
    key, which must come from the file, the environment, or a .env file.

    Args:
        config_path: Explicit config file (must exist when given)
        env_file: Explicit .env file; defaults to ./.env when present
        model_override: Model name from the command line
        log_level_override: Log level from the command line

    Returns:
        Config object with loaded or default values

    Raises:
        ConfigurationError: If the API key is missing or a value is invalid
    """
    load_dotenv(dotenv_path=env_file or Path.cwd() / ".env", override=False)

    if config_path is not None:
        config_path = Path(config_path).expanduser()
        if not config_path.exists():
            raise ConfigurationError(f"Configuration file not found at {config_path}")
    else:
        config_path = default_config_dir() / "config.toml"

    data: dict = {}
    if config_path.exists():
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                data = toml.load(f)
        except toml.TomlDecodeError as e:
            raise ConfigurationError(f"Invalid TOML in {config_path}: {e}") from e

    general_section = data.get('general', {})
    openai_section = data.get('openai', {})

    api_key = _resolve_api_key(openai_section)
    if not api_key:
        raise ConfigurationError(
            f"{API_KEY_ENV_VAR} is not set. Export it, add it to a .env file, "
            f"or set api_key under [openai] in {config_path}."
        )

    log_level = (log_level_override or general_section.get('log_level', 'INFO')).upper()
    if log_level not in LOG_LEVELS:
        raise ConfigurationError(f"Invalid log_level '{log_level}'. Options: {list(LOG_LEVELS)}")

    log_file_str = general_section.get('log_file', str(default_config_dir() / "debug.log"))
    log_file = Path(log_file_str).expanduser() if log_file_str else None

    headers = openai_section.get('headers', {})
    if not isinstance(headers, dict):
        raise ConfigurationError("[openai] headers must be a table")

    config = Config(
        api_url=openai_section.get('api_url', DEFAULT_API_URL),
        api_key=api_key,
        model_name=model_override or openai_section.get('model', DEFAULT_MODEL),
        timeout=_positive(openai_section.get('timeout', 60), 'timeout'),
        log_level=log_level,
        log_file=log_file,
        tick_interval=_positive(general_section.get('tick_interval', 0.1), 'tick_interval', float),
        text_width=_positive(general_section.get('text_width', 80), 'text_width'),
        viewport_height=_positive(general_section.get('viewport_height', 22), 'viewport_height'),
        char_limit=_positive(general_section.get('char_limit', 280), 'char_limit'),
        headers=headers,
    )

    _setup_logging(config)

    return config
