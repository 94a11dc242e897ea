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

"""Main entry point for TuiChat."""

import argparse
import logging
import sys
from pathlib import Path

from .core.config import load_config
from .core.errors import ConfigurationError
from .core.openai_client import OpenAIChatClient
from .ui.app import run_ui

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="TuiChat: a terminal chat client for OpenAI-compatible APIs",
        prog="python -m tuichat"
    )
    parser.add_argument(
        '--config',
        metavar='PATH',
        type=Path,
        help='Config file to use instead of ~/.tuichat/config.toml'
    )
    parser.add_argument(
        '--env-file',
        metavar='PATH',
        type=Path,
        help='.env file to load OPENAI_API_KEY from (default: ./.env)'
    )
    parser.add_argument('--model', help='Model name to chat with')
    parser.add_argument('--log-level', help='DEBUG, INFO, WARNING or ERROR')
    parser.add_argument(
        '--log-ui-events',
        action='store_true',
        help='Write UI_EVENT lines to the log for debugging'
    )
    return parser


def main(argv: list[str] | None = None):
    """Main entry point for the application."""
    args = build_parser().parse_args(argv)

    try:
        # Load configuration (this also initializes logging)
        config = load_config(
            config_path=args.config,
            env_file=args.env_file,
            model_override=args.model,
            log_level_override=args.log_level,
        )
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    logger.info("=== TuiChat starting ===")
    logger.info(f"Configuration loaded: api_url={config.api_url}, model={config.model_name}")

    client = OpenAIChatClient(config)

    try:
        output = run_ui(config, client, log_ui_events=args.log_ui_events)
    except KeyboardInterrupt:
        logger.info("Application terminated by user (Ctrl+C)")
        sys.exit(0)
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        print(f"Unexpected error: {e}", file=sys.stderr)
        sys.exit(1)

    logger.info("=== TuiChat stopped ===")
    # Whatever was left in the input box goes to stdout
    if output:
        print(output)


if __name__ == '__main__':
    main()
