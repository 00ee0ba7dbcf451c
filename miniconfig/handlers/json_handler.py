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

"""JSON format handler.

The document's top-level object becomes the mapping that is merged into the
store; nested objects are categories.

Example:
    A ``database.json`` file:
        ```json
        {"db": {"user": "app", "port": 5432}}
        ```

    parses to ``{"db": {"user": "app", "port": 5432}}``.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any


def parse_json(path: Path) -> dict[str, Any]:
    """Load a JSON file whose top level is an object.

    Args:
        path: The JSON file to read.

    Returns:
        The decoded top-level object.

    Raises:
        OSError: If the file cannot be read.
        json.JSONDecodeError: If the file is not valid JSON.
        ValueError: If the top level is not an object.

    """
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(
            f"top-level JSON must be an object, got {type(data).__name__}: {path}"
        )
    return data
