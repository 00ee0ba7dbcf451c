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

"""INI format handler.

Each section header becomes a top-level key whose value is a mapping of the
section's options. Values stay strings; no type coercion is applied.

Parsing rules:
    - Option names keep their case (``User`` and ``user`` are distinct)
    - Interpolation is disabled, so ``%`` and ``$`` are literal
    - Values wrapped in double quotes have the quotes removed
    - Options before the first section header are rejected
    - ``[DEFAULT]`` is an ordinary section; nothing is inherited from it
    - A repeated section is merged into the first one, and a repeated
      option keeps its last value

Example:
    A ``database.ini`` file:
        ```ini
        [db]
        user = app
        password = "s3cr%t"
        ```

    parses to ``{"db": {"user": "app", "password": "s3cr%t"}}``.
"""

from __future__ import annotations

import configparser
from pathlib import Path

# configparser treats this section as the defaults of every other section
_NO_DEFAULT_SECTION = "\x00miniconfig:no-default"


def parse_ini(path: Path) -> dict[str, dict[str, str]]:
    """Load an INI file with sections as top-level keys.

    Args:
        path: The INI file to read.

    Returns:
        A mapping of section name to option mapping.

    Raises:
        OSError: If the file cannot be read.
        configparser.Error: If the file is malformed (e.g. missing section
            header).

    """
    parser = configparser.ConfigParser(
        interpolation=None, strict=False, default_section=_NO_DEFAULT_SECTION
    )
    parser.optionxform = str  # type: ignore[assignment,method-assign]
    with open(path, encoding="utf-8") as f:
        parser.read_file(f, source=str(path))

    return {
        section: {key: _unquote(value) for key, value in parser.items(section)}
        for section in parser.sections()
    }


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return value[1:-1]
    return value
