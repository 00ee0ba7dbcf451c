"""
miniconfig - file-based configuration aggregation

miniconfig collects configuration files from directories and explicit file
paths, parses each with a handler chosen by file extension, and merges the
results into one dict-like store.

miniconfig provides:
  - Built-in handlers for XML, YAML, INI and JSON
  - Pluggable handlers: any callable or object with parse(path)
  - Recursive merging where colliding values accumulate into sequences
    instead of overwriting each other
  - Atomic refresh: a failed strict refresh leaves the store untouched
  - JSON serialization of the merged store

Quick Start
-----------
    from miniconfig import Config

    config = Config(targets=["/etc/myapp/conf.d", "local.json"])
    print(config["db"]["user"])
    print(config.get_path("db.port"))

Package Structure
-----------------
config : module
    The Config store and refresh orchestration.
merge : module
    Recursive merge engine (coalescing and overwrite modes).
handlers : package
    Handler registry and built-in format handlers.
targets : module
    Directory/file target classification.
pipeline : module
    Discovery order and handler invocation.
results : module
    Result dataclasses returned by refresh().
exceptions : module
    Exception hierarchy.
logging : module
    Prefix-style logger used by the library.

Project Information
-------------------
Author: Roger Cibrian
License: Apache-2.0
"""

__version__ = "0.1.0"
__author__ = "Roger Cibrian"
__license__ = "Apache-2.0"
__description__ = "Merge configuration files from many formats into one store"

from miniconfig.config import MISSING, Config
from miniconfig.exceptions import ConfigError, MiniConfigError, ParseError
from miniconfig.handlers import Handler, HandlerRegistry
from miniconfig.merge import Coalesced, coalesce, deep_merge, merge_into
from miniconfig.results import ParseFailure, RefreshResult

__all__ = [
    "__version__",
    "__author__",
    "__license__",
    "__description__",
    "Config",
    "MISSING",
    "Coalesced",
    "coalesce",
    "deep_merge",
    "merge_into",
    "Handler",
    "HandlerRegistry",
    "MiniConfigError",
    "ConfigError",
    "ParseError",
    "ParseFailure",
    "RefreshResult",
]
