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

"""Error types raised by TuiChat."""


class TuiChatError(Exception):
    """Base class for TuiChat errors."""


class ConfigurationError(TuiChatError, ValueError):
    """Configuration is missing or invalid. Fatal before the UI starts."""


class ConnectivityError(TuiChatError, ConnectionError):
    """The startup connectivity probe failed. Shown in the header only."""


class CompletionError(TuiChatError, RuntimeError):
    """A chat completion request failed. Recorded in the error slot."""
