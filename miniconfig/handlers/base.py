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

"""Handler protocol and registry for miniconfig.

This module defines the foundational components for format dispatch:

- Handler protocol: Interface for objects that parse a file into data
- HandlerRegistry: Mapping of file extensions to handlers

A handler turns one file into a structured value (nested dicts, lists and
scalars). Handlers are selected purely by file extension, so adding a new
format is a matter of registering a function:

    - Plain functions and lambdas: ``handler(path) -> data``
    - Objects implementing the Handler protocol: ``handler.parse(path) -> data``

Both forms are accepted everywhere a handler is expected and can be mixed
freely in one registry.

Design Philosophy:
    - Extensions are matched exactly and case-sensitively ("YML" != "yml")
    - Registering an existing extension overwrites it (last registration wins)
    - One handler may be bound to many extensions in a single call
    - Registry iteration follows registration order, which fixes the order
      in which a directory's files are discovered

Example:
    Registering a custom handler:
        ```python
        from pathlib import Path
        from miniconfig.handlers.base import HandlerRegistry

        def parse_env(path: Path) -> dict:
            pairs = (line.split("=", 1) for line in path.read_text().splitlines() if "=" in line)
            return {"env": dict(pairs)}

        registry = HandlerRegistry()
        registry.register(["env", "dotenv"], parse_env)
        ```

"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from miniconfig.exceptions import ConfigError

ParseFunction = Callable[[Path], Any]

# -------------------------------
# Handler Protocol
# -------------------------------


@runtime_checkable
class Handler(Protocol):
    """Protocol for format handlers.

    Handlers must implement parse(), which reads one file and returns its
    contents as plain Python data.
    """

    def parse(self, path: Path) -> Any:
        """Parse a configuration file.

        Args:
            path: The file to parse.

        Returns:
            A mapping of top-level keys to values. Returning None means the
                file contributes nothing.

        Raises:
            Exception: Any failure (I/O, syntax, structure). The pipeline
                wraps it in ParseError.

        """
        ...


# -------------------------------
# Handler Registry
# -------------------------------


class HandlerRegistry:
    """Extension to handler mapping.

    Handlers are stored as plain parse functions. Objects implementing the
    Handler protocol are stored as their bound parse() method.

    Example:
        Bulk registration and removal:
            ```python
            registry = HandlerRegistry()
            registry.register(("yaml", "yml"), parse_yaml)
            registry.remove("yml")
            print(registry.extensions())  # ['yaml']
            ```

    """

    def __init__(self) -> None:
        self._handlers: dict[str, ParseFunction] = {}

    def register(
        self, extensions: str | Iterable[str], handler: ParseFunction | Handler
    ) -> None:
        """Bind one or more extensions to a handler.

        Args:
            extensions: A single extension (without the leading dot) or an
                iterable of extensions.
            handler: A callable taking a Path, or an object with a parse()
                method.

        Raises:
            ConfigError: If the handler is not usable, or an extension is not
                a string.

        """
        function = _as_parse_function(handler)
        if isinstance(extensions, str):
            extensions = [extensions]
        for ext in extensions:
            if not isinstance(ext, str):
                raise ConfigError(f"Handler extension must be a string, got {ext!r}")
            self._handlers[ext] = function

    def remove(self, extension: str) -> None:
        """Unbind an extension. Unknown extensions are ignored."""
        self._handlers.pop(extension, None)

    def get(self, extension: str) -> ParseFunction | None:
        return self._handlers.get(extension)

    def extensions(self) -> list[str]:
        return list(self._handlers)

    def items(self) -> list[tuple[str, ParseFunction]]:
        """Return (extension, handler) pairs in registration order.

        Returns a snapshot, so the registry may be changed while iterating.
        """
        return list(self._handlers.items())

    def copy(self) -> HandlerRegistry:
        clone = HandlerRegistry()
        clone._handlers = dict(self._handlers)
        return clone

    def __contains__(self, extension: object) -> bool:
        return extension in self._handlers

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._handlers))

    def __len__(self) -> int:
        return len(self._handlers)

    def __repr__(self) -> str:
        return f"HandlerRegistry({', '.join(self._handlers) or '(empty)'})"


def _as_parse_function(handler: ParseFunction | Handler) -> ParseFunction:
    """Normalize a handler to a plain callable."""
    if isinstance(handler, Handler):
        return handler.parse
    if callable(handler):
        return handler
    raise ConfigError(
        f"Handler must be callable or implement parse(path); got {type(handler).__name__}"
    )
