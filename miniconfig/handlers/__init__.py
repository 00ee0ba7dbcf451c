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

"""Format handlers for miniconfig.

This package provides the extension-based dispatch used to parse
configuration files, plus the built-in handlers every Config starts with.

Built-in Handlers:
    xml : parse_xml
        Root element's children become top-level keys. Repeated sibling
        tags are coalesced.
    yaml, yml : parse_yaml
        Data-literal files. Parsed with safe_load, never executed; a
        document that is not a mapping contributes nothing.
    ini : parse_ini
        Sections become top-level keys; values stay strings.
    json : parse_json
        Top-level object becomes the mapping.

Example:
    Build a registry with the built-ins plus a custom format:

        from miniconfig.handlers import default_registry

        registry = default_registry()
        registry.register("toml", my_toml_parser)

"""

from .base import Handler, HandlerRegistry, ParseFunction
from .ini_handler import parse_ini
from .json_handler import parse_json
from .xml_handler import parse_xml
from .yaml_handler import parse_yaml

# Registration order fixes the per-directory discovery order.
DEFAULT_HANDLERS: tuple[tuple[tuple[str, ...], ParseFunction], ...] = (
    (("xml",), parse_xml),
    (("yaml", "yml"), parse_yaml),
    (("ini",), parse_ini),
    (("json",), parse_json),
)


def default_registry() -> HandlerRegistry:
    """Return a new registry holding only the built-in handlers."""
    registry = HandlerRegistry()
    for extensions, handler in DEFAULT_HANDLERS:
        registry.register(extensions, handler)
    return registry


__all__ = [
    "DEFAULT_HANDLERS",
    "Handler",
    "HandlerRegistry",
    "ParseFunction",
    "default_registry",
    "parse_ini",
    "parse_json",
    "parse_xml",
    "parse_yaml",
]
