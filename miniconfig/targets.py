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

"""Scan targets for miniconfig.

A target is a path the Config reads configuration from. Each path is
classified once, when it is added:

- **directory**: rescanned on every refresh for files matching each
  registered extension (non-recursive)
- **file**: parsed on every refresh if its own extension has a handler

Paths that are neither an existing directory nor an existing regular file
are dropped without error, so optional config locations can be listed
before they exist. A dropped path is not remembered: once it has been
created it must be added again.

Classification never changes after the fact. A path that turns from a file
into a directory keeps being treated as a file until it is added again.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
import os
from pathlib import Path
from typing import Literal

from miniconfig.logging import Logger, get_global_logger

TargetKind = Literal["directory", "file"]

PathLike = str | os.PathLike[str]


@dataclass(frozen=True)
class Target:
    """A classified scan target.

    Attributes:
        path: The directory or file path, as given by the caller.
        kind: "directory" or "file".
    """

    path: Path
    kind: TargetKind


class TargetSet:
    """Ordered collection of directories and files to scan.

    Directories and files are processed in two phases: every directory
    first, then every file, each in the order added. Duplicates are kept
    and scanned twice.
    """

    def __init__(self, logger: Logger | None = None) -> None:
        self._targets: list[Target] = []
        self._logger = logger

    @property
    def logger(self) -> Logger:
        return self._logger or get_global_logger()

    def add(self, paths: PathLike | Iterable[PathLike]) -> list[Target]:
        """Classify and add one path or many.

        Args:
            paths: A path, or an iterable of paths.

        Returns:
            The targets that were actually added (missing paths excluded).

        """
        if isinstance(paths, (str, os.PathLike)):
            paths = [paths]

        added: list[Target] = []
        for raw in paths:
            target = classify(raw)
            if target is None:
                self.logger.verbose("TARGET", f"Skipping missing path: {raw}")
                continue
            self.logger.verbose("TARGET", f"Added {target.kind}: {target.path}")
            self._targets.append(target)
            added.append(target)
        return added

    @property
    def directories(self) -> list[Path]:
        return [t.path for t in self._targets if t.kind == "directory"]

    @property
    def files(self) -> list[Path]:
        return [t.path for t in self._targets if t.kind == "file"]

    def copy(self) -> TargetSet:
        clone = TargetSet(self._logger)
        clone._targets = list(self._targets)
        return clone

    def __iter__(self) -> Iterator[Target]:
        return iter(list(self._targets))

    def __len__(self) -> int:
        return len(self._targets)

    def __repr__(self) -> str:
        return (
            f"TargetSet(directories={len(self.directories)}, files={len(self.files)})"
        )


def classify(path: PathLike) -> Target | None:
    """Classify a path as a directory or file target.

    Returns:
        A Target, or None if the path is neither an existing directory nor
            an existing regular file.
    """
    p = Path(path)
    if p.is_dir():
        return Target(p, "directory")
    if p.is_file():
        return Target(p, "file")
    return None
