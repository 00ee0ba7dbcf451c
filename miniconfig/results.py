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

"""Public API return types for miniconfig.

All dataclasses are frozen (immutable) to prevent accidental mutation of
return values.

Example:
    Inspecting a refresh:
        ```python
        from miniconfig import Config

        config = Config(targets=["config/"], strict=False)
        result = config.last_refresh
        for failure in result.failures:
            print(f"{failure.path}: {failure.error}")
        ```
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ParseFailure:
    """A file that failed to parse, or a directory that could not be read,
    during a non-strict refresh.

    Attributes:
        path: The file or directory that failed.
        extension: The extension whose handler was invoked.
        error: The handler's error message.
    """

    path: Path
    extension: str
    error: str


@dataclass(frozen=True)
class RefreshResult:
    """Result from rebuilding the store.

    Attributes:
        parsed: Files whose contents were merged, in merge order.
        ignored: Files whose handler returned no usable mapping.
        failures: Files skipped because their handler raised (only ever
            populated when strict mode is off).
    """

    parsed: tuple[Path, ...] = ()
    ignored: tuple[Path, ...] = ()
    failures: tuple[ParseFailure, ...] = ()

    @property
    def ok(self) -> bool:
        """True if no file failed to parse."""
        return not self.failures
