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

"""Parse pipeline for miniconfig.

This module turns a TargetSet and a HandlerRegistry into one merged mapping.
It is what Config.refresh() runs.

Discovery Order:
    Files are parsed, and therefore merged, in this exact order:

    1. Each directory, in the order added
       a. each extension, in handler registration order
          i. each file in the directory named ``*.<extension>``, in
             filesystem enumeration order (NOT sorted)
    2. Each explicitly added file, in the order added, if its extension
       has a handler

    Because colliding values are coalesced in arrival order, this order
    decides the order of elements in every coalesced sequence. Do not rely
    on the relative order of two files from the same directory with the
    same extension.

Failure Policy:
    - strict (default): the first handler failure, or the first directory
      that exists but cannot be read, raises ParseError and nothing is
      returned; the caller's store is left untouched
    - non-strict: the failing file or directory is skipped, a warning is
      logged and the failure is recorded on the RefreshResult

Non-Mapping Results:
    A handler may return None to contribute nothing. Any other value that
    is not a mapping cannot be merged at the top level and is ignored with
    a warning.

Example:
    Running the pipeline by hand:
        ```python
        from miniconfig.handlers import default_registry
        from miniconfig.pipeline import build
        from miniconfig.targets import TargetSet

        targets = TargetSet()
        targets.add(["config/", "local.json"])
        data, result = build(targets, default_registry())
        print(result.parsed)
        ```
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
import os
from pathlib import Path
from typing import Any

from miniconfig.exceptions import ParseError
from miniconfig.handlers.base import HandlerRegistry, ParseFunction
from miniconfig.logging import Logger, get_global_logger
from miniconfig.merge import merge_into
from miniconfig.results import ParseFailure, RefreshResult
from miniconfig.targets import TargetSet

# -------------------------------
# Discovery
# -------------------------------


@dataclass(frozen=True)
class Source:
    """A file paired with the handler that will parse it."""

    path: Path
    extension: str
    handler: ParseFunction


def scan_directory(directory: Path, extension: str) -> list[Path]:
    """Return regular files directly inside ``directory`` named ``*.<extension>``.

    Hidden files (leading dot) are skipped, matching shell glob behavior.
    Enumeration order is whatever the filesystem returns. A directory that
    no longer exists, or has been replaced by a file, yields nothing.

    Raises:
        ParseError: If the directory exists but cannot be read.
    """
    suffix = f".{extension}"
    try:
        with os.scandir(directory) as entries:
            return [
                directory / entry.name
                for entry in entries
                if not entry.name.startswith(".")
                and entry.name.endswith(suffix)
                and entry.is_file()
            ]
    except (FileNotFoundError, NotADirectoryError):
        return []
    except OSError as err:
        raise ParseError(
            f"Failed to scan {directory} for *{suffix}: {err}", directory, extension
        ) from err


def file_extension(path: Path) -> str | None:
    """Return the text after the last dot of the file name, or None.

    A dotfile such as ``.json`` has the extension ``json``.
    """
    name = path.name
    if "." not in name:
        return None
    return name.rsplit(".", 1)[1] or None


def iter_sources(
    targets: TargetSet,
    registry: HandlerRegistry,
    *,
    on_scan_error: Callable[[ParseError], None] | None = None,
) -> Iterator[Source]:
    """Yield every file to parse, in merge order.

    Args:
        targets: Directories and files to scan.
        registry: Extension to handler mapping.
        on_scan_error: Called with the ParseError of a directory that cannot
            be read, after which scanning continues. If None, the error is
            raised.
    """
    for directory in targets.directories:
        for extension, handler in registry.items():
            try:
                paths = scan_directory(directory, extension)
            except ParseError as err:
                if on_scan_error is None:
                    raise
                on_scan_error(err)
                continue
            for path in paths:
                yield Source(path, extension, handler)

    for path in targets.files:
        extension = file_extension(path)
        if extension is None:
            continue
        handler = registry.get(extension)
        if handler is not None:
            yield Source(path, extension, handler)


# -------------------------------
# Parsing
# -------------------------------


def parse_source(source: Source) -> Any:
    """Invoke a source's handler.

    Raises:
        ParseError: Wrapping whatever the handler raised.
    """
    try:
        return source.handler(source.path)
    except Exception as err:
        raise ParseError(
            f"Failed to parse {source.path} as {source.extension}: {err}",
            source.path,
            source.extension,
        ) from err


def build(
    targets: TargetSet,
    registry: HandlerRegistry,
    *,
    strict: bool = True,
    logger: Logger | None = None,
) -> tuple[dict[str, Any], RefreshResult]:
    """Parse every source and merge the results into a fresh mapping.

    Args:
        targets: Directories and files to scan.
        registry: Extension to handler mapping.
        strict: If True, the first failure raises. If False, failures are
            collected and the file is skipped.
        logger: Logger to use; defaults to the global logger.

    Returns:
        A tuple (data, result), where data is the merged mapping and result
            describes which files were parsed, ignored, or failed.

    Raises:
        ParseError: In strict mode, on the first handler failure or the
            first directory that cannot be read.

    """
    if logger is None:
        logger = get_global_logger()

    data: dict[str, Any] = {}
    parsed: list[Path] = []
    ignored: list[Path] = []
    failures: list[ParseFailure] = []

    def record_scan_failure(err: ParseError) -> None:
        logger.warning("REFRESH", str(err))
        failures.append(ParseFailure(err.path, err.extension, str(err.__cause__)))

    on_scan_error = None if strict else record_scan_failure
    for source in iter_sources(targets, registry, on_scan_error=on_scan_error):
        logger.debug("HANDLER", f"Parsing {source.path} ({source.extension})")
        try:
            value = parse_source(source)
        except ParseError as err:
            if strict:
                raise
            logger.warning("REFRESH", str(err))
            failures.append(
                ParseFailure(source.path, source.extension, str(err.__cause__))
            )
            continue

        if value is None:
            logger.debug("HANDLER", f"No contribution from {source.path}")
            ignored.append(source.path)
            continue
        if not isinstance(value, Mapping):
            logger.warning(
                "REFRESH",
                f"Ignoring {source.path}: handler returned {type(value).__name__}, "
                "not a mapping",
            )
            ignored.append(source.path)
            continue

        merge_into(data, value)
        parsed.append(source.path)

    logger.verbose(
        "REFRESH",
        f"Merged {len(parsed)} file(s), ignored {len(ignored)}, failed {len(failures)}",
    )
    return data, RefreshResult(tuple(parsed), tuple(ignored), tuple(failures))
