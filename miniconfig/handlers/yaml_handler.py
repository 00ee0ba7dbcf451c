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

"""YAML data-file handler.

YAML is the data-literal format: a file that simply *is* a mapping of
settings. It is parsed with ``yaml.safe_load`` and never executed, so no
arbitrary objects can be constructed from it.

A document that does not produce a mapping (an empty file, a bare scalar,
a top-level list) contributes nothing; the handler returns None and the
file is ignored during merging. Syntax errors still raise.

Example:
    A ``cache.yaml`` file:
        ```yaml
        cache:
          ttl: 300
          backends: [redis, memory]
        ```

    parses to ``{"cache": {"ttl": 300, "backends": ["redis", "memory"]}}``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml


def parse_yaml(path: Path) -> dict[str, Any] | None:
    """Load a YAML file that should evaluate to a mapping.

    Args:
        path: The YAML file to read.

    Returns:
        The parsed mapping, or None if the document is not a mapping.

    Raises:
        OSError: If the file cannot be read.
        yaml.YAMLError: If the file is not valid YAML.

    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        return None
    return data
