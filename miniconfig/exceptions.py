# Copyright 2025 Roger Cibrian
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

"""Exception hierarchy for miniconfig.

This module defines a small exception hierarchy that allows library users
to distinguish between a misused API and a configuration file that could
not be parsed. All exceptions inherit from MiniConfigError, allowing users
to catch every miniconfig error with a single except clause if needed.

Conditions that are deliberately NOT errors:

- Reading a key that does not exist (returns the MISSING sentinel)
- Adding a target path that does not exist (silently dropped)
- A file whose extension has no registered handler (silently skipped)
- Removing a handler that was never registered (no-op)

Example:
    Catching specific error types:
        ```python
        from miniconfig import Config
        from miniconfig.exceptions import ConfigError, ParseError

        try:
            config = Config(targets=["config/"])
        except ParseError as e:
            print(f"Could not parse {e.path}: {e}")
        except ConfigError as e:
            print(f"Configuration error: {e}")
        ```
"""

from __future__ import annotations

from pathlib import Path

__all__ = [
    "MiniConfigError",
    "ConfigError",
    "ParseError",
]


class MiniConfigError(Exception):
    """Base exception for all miniconfig errors.

    All miniconfig-specific exceptions inherit from this class, allowing
    users to catch all miniconfig errors with a single except clause.
    """

    pass


class ConfigError(MiniConfigError):
    """Raised when the library is used with invalid input.

    This exception is raised when there are problems with:

    - Registering a handler that is neither callable nor has a parse() method
    - Merging a value that is not a mapping into the store
    - Deserializing a store from JSON that is invalid or not an object

    Example:
        Catching configuration errors:
            ```python
            from miniconfig.exceptions import ConfigError

            try:
                config.merge(["not", "a", "mapping"])
            except ConfigError as e:
                print(f"Config error: {e}")
            ```
    """

    pass


class ParseError(MiniConfigError):
    """Raised when a handler fails to parse a configuration file.

    Wraps whatever the handler raised (I/O errors, syntax errors, invalid
    top-level structure). The original exception is available as
    ``__cause__``.

    Attributes:
        path: The file that failed to parse.
        extension: The extension whose handler was invoked.
    """

    def __init__(self, message: str, path: Path, extension: str) -> None:
        super().__init__(message)
        self.path = path
        self.extension = extension
