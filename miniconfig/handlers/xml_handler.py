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

"""XML format handler.

The root element itself is discarded; its children become the top-level
keys of the result.

Conversion rules:
    - Element with child elements -> mapping keyed by child tag
    - Element with only text -> the stripped text (a string)
    - Empty element -> empty mapping
    - Attributes -> an ``"@attributes"`` mapping on the element; if such an
      element has no children, its text is kept under ``"#text"``
    - Sibling elements sharing a tag are folded together with the same
      coalescing merge used for whole files: two text leaves become a
      sequence, two elements with children are merged key by key

Example:
    A ``servers.xml`` file:
        ```xml
        <config>
          <db><user>app</user></db>
          <host>a</host>
          <host>b</host>
        </config>
        ```

    parses to ``{"db": {"user": "app"}, "host": ["a", "b"]}``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any
import xml.etree.ElementTree as ET

from miniconfig.merge import merge_into


def parse_xml(path: Path) -> dict[str, Any]:
    """Load an XML file as nested mappings.

    Args:
        path: The XML file to read.

    Returns:
        A mapping built from the root element's children.

    Raises:
        OSError: If the file cannot be read.
        xml.etree.ElementTree.ParseError: If the document is not well-formed.

    """
    root = ET.parse(path).getroot()
    return _children_to_mapping(root)


def element_to_value(element: ET.Element) -> Any:
    """Convert one element into a string or a mapping."""
    text = (element.text or "").strip()
    if len(element) == 0 and not element.attrib:
        return text if text else {}

    value = _children_to_mapping(element)
    if element.attrib:
        value = {"@attributes": dict(element.attrib), **value}
        if len(element) == 0 and text:
            value["#text"] = text
    return value


def _children_to_mapping(element: ET.Element) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for child in element:
        # Comments and processing instructions have a non-string tag
        if not isinstance(child.tag, str):
            continue
        merge_into(result, {child.tag: element_to_value(child)})
    return result
