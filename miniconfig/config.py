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

"""The Config store.

Config gathers configuration files from registered directories and files,
parses each one with the handler registered for its extension, and merges
everything into a single mapping you read like a dict.

Merge Behavior:
    Colliding values are NOT overwritten. Mappings under the same key are
    merged recursively, and any other collision turns the value into a
    sequence in arrival order:

        a.json  {"db": {"user": "alice"}}
        b.json  {"db": {"user": "bob"}}
        result  {"db": {"user": ["alice", "bob"]}}

    See miniconfig.merge for the full rules.

Refresh:
    refresh() rebuilds the store from nothing: targets and handlers are
    re-read, files are parsed, and the merged result replaces the previous
    store. The swap happens only after every file has been processed, so a
    strict refresh that fails leaves the previous store untouched.

    Anything put in with set() or merge() is NOT a source and is wiped by the
    next refresh. Re-apply programmatic overlays after refreshing.

Missing Keys:
    get() never raises. It returns the MISSING sentinel for absent keys, so a
    key explicitly stored as None can be told apart from one that is not
    there. Indexing (``config["key"]``) raises KeyError like a dict.

Thread Safety:
    Every public method takes the same reentrant lock, so concurrent calls
    from several threads are serialized. Values handed out by get() are live
    references into the store and are not protected once returned.

Example:
    Basic usage:
        ```python
        from miniconfig import Config, MISSING

        config = Config(targets=["config/", "local.json"])
        user = config.get_path("db.user")
        if config.get("cache") is MISSING:
            config.set("cache", {"ttl": 60})
        ```

    Custom handlers:
        ```python
        import tomllib

        def parse_toml(path):
            with open(path, "rb") as f:
                return tomllib.load(f)

        config = Config(targets="config/", handlers={"toml": parse_toml})
        ```
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, MutableMapping
import json
from pathlib import Path
import threading
from typing import Any

from miniconfig.exceptions import ConfigError
from miniconfig.handlers import default_registry
from miniconfig.handlers.base import Handler, HandlerRegistry, ParseFunction
from miniconfig.logging import Logger, get_global_logger
from miniconfig.merge import merge_into, plain
from miniconfig.pipeline import build
from miniconfig.results import RefreshResult
from miniconfig.targets import PathLike, Target, TargetSet


class _Missing:
    """Type of the MISSING sentinel."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()
"""Returned by Config.get() and friends when a key is absent."""


class Config(MutableMapping[str, Any]):
    """Merged configuration from files, with dict-style access.

    Attributes:
        strict: If True, refresh() raises on the first file that fails to
            parse. If False, failing files are skipped and reported on
            last_refresh.
        last_refresh: The result of the most recent refresh(), or None
            before the first one.

    """

    def __init__(
        self,
        targets: PathLike | Iterable[PathLike] | None = None,
        handlers: Mapping[str | tuple[str, ...], ParseFunction | Handler] | None = None,
        *,
        strict: bool = True,
        logger: Logger | None = None,
        auto_refresh: bool = True,
    ) -> None:
        """Create a Config and (by default) load it.

        Built-in handlers are registered first, then ``handlers``, so a
        caller-supplied handler for a built-in extension wins.

        Args:
            targets: A directory or file path, or an iterable of them.
                Paths that don't exist are ignored.
            handlers: Mapping of extension (or tuple of extensions) to
                handler.
            strict: See the class attribute.
            logger: Logger for this instance. Defaults to the global logger
                at the time of each call.
            auto_refresh: If False, skip the initial refresh().

        Raises:
            ParseError: If the initial refresh fails in strict mode.
            ConfigError: If a handler is not usable.

        """
        self._lock = threading.RLock()
        self._logger = logger
        self._data: dict[str, Any] = {}
        self._registry: HandlerRegistry = default_registry()
        self._targets = TargetSet(logger)
        self.strict = strict
        self.last_refresh: RefreshResult | None = None

        for extensions, handler in (handlers or {}).items():
            self.register_handler(extensions, handler)
        if targets is not None:
            self.add_target(targets)
        if auto_refresh:
            self.refresh()

    @property
    def logger(self) -> Logger:
        return self._logger or get_global_logger()

    # -------------------------------
    # Targets and handlers
    # -------------------------------

    def add_target(self, target: PathLike | Iterable[PathLike]) -> list[Target]:
        """Add a directory or file (or many) to scan on refresh.

        Does not refresh by itself.

        Returns:
            The targets that were added. Missing paths are left out.
        """
        with self._lock:
            return self._targets.add(target)

    @property
    def targets(self) -> list[Target]:
        with self._lock:
            return list(self._targets)

    def register_handler(
        self, extension: str | Iterable[str], handler: ParseFunction | Handler
    ) -> None:
        """Bind one or more extensions to a handler, replacing existing bindings.

        Extensions are given without the leading dot and are case-sensitive.
        Takes effect on the next refresh().
        """
        with self._lock:
            self._registry.register(extension, handler)
            self.logger.debug("HANDLER", f"Registered handler for {extension!r}")

    def remove_handler(self, extension: str) -> None:
        """Stop parsing files with ``extension``. Unknown extensions are ignored."""
        with self._lock:
            self._registry.remove(extension)
            self.logger.debug("HANDLER", f"Removed handler for {extension!r}")

    @property
    def handlers(self) -> HandlerRegistry:
        """A copy of the current handler registry."""
        with self._lock:
            return self._registry.copy()

    # -------------------------------
    # Building
    # -------------------------------

    def refresh(self) -> RefreshResult:
        """Rebuild the store from every target.

        Returns:
            What was parsed, ignored, and (in non-strict mode) what failed.

        Raises:
            ParseError: In strict mode, if any file fails to parse or a
                directory cannot be read. The store keeps its previous
                contents.

        """
        with self._lock:
            self.logger.verbose(
                "REFRESH",
                f"Scanning {len(self._targets)} target(s) with handlers: "
                f"{', '.join(self._registry.extensions()) or '(none)'}",
            )
            data, result = build(
                self._targets, self._registry, strict=self.strict, logger=self.logger
            )
            self._data = data
            self.last_refresh = result
            return result

    def merge(self, value: Mapping[str, Any], *, overwrite: bool = False) -> None:
        """Fold a mapping into the store as if it were one more parsed file.

        Args:
            value: The mapping to merge.
            overwrite: If True, incoming values replace colliding ones
                instead of being coalesced.

        Raises:
            ConfigError: If value is not a mapping.

        Note:
            Merged values are wiped by the next refresh().
        """
        if not isinstance(value, Mapping):
            raise ConfigError(
                f"Can only merge a mapping into the config, got {type(value).__name__}"
            )
        with self._lock:
            merge_into(self._data, value, overwrite=overwrite)

    # -------------------------------
    # Access
    # -------------------------------

    def get(self, key: str, default: Any = MISSING) -> Any:
        """Return the top-level value for key, or ``default`` (MISSING)."""
        with self._lock:
            return self._data.get(key, default)

    def has(self, key: str) -> bool:
        return key in self

    def set(self, key: str, value: Any) -> None:
        """Bind key to value directly, replacing any existing value."""
        self[key] = value

    def delete(self, key: str) -> None:
        """Remove key. Absent keys are ignored."""
        del self[key]

    def lookup(self, *keys: Any) -> Any:
        """Follow keys through nested mappings and sequences.

        Sequence steps take integer indexes. Returns MISSING as soon as a
        step does not exist or the current value cannot be indexed.

        Example:
            ```python
            config.lookup("db", "user")     # config["db"]["user"]
            config.lookup("db", "user", 0)  # first value of a coalesced key
            ```
        """
        with self._lock:
            current: Any = self._data
            for key in keys:
                if isinstance(current, Mapping):
                    if key not in current:
                        return MISSING
                    current = current[key]
                elif isinstance(current, list) and isinstance(key, int):
                    if not -len(current) <= key < len(current):
                        return MISSING
                    current = current[key]
                else:
                    return MISSING
            return current

    def get_path(self, path: str, default: Any = MISSING, *, sep: str = ".") -> Any:
        """Return the value at a separator-joined path like ``"db.user"``.

        Each segment is resolved against the value reached so far. On a
        mapping the segment is used as a string key, falling back to an
        integer key when it is made of ASCII digits (YAML ``80:`` keys). On
        a sequence an ASCII-digit segment is an index.
        """
        with self._lock:
            current: Any = self._data
            for part in path.split(sep):
                numeric = part.isascii() and part.isdecimal()
                if isinstance(current, Mapping):
                    if part in current:
                        current = current[part]
                    elif numeric and int(part) in current:
                        current = current[int(part)]
                    else:
                        return default
                elif isinstance(current, list) and numeric:
                    index = int(part)
                    if index >= len(current):
                        return default
                    current = current[index]
                else:
                    return default
            return current

    def __getitem__(self, key: str) -> Any:
        with self._lock:
            return self._data[key]

    def __setitem__(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = value

    def __delitem__(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._data

    def __iter__(self) -> Iterator[str]:
        with self._lock:
            return iter(list(self._data))

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def __repr__(self) -> str:
        return f"Config(keys={list(self)!r}, targets={len(self._targets)})"

    # -------------------------------
    # Serialization
    # -------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Return a deep copy of the store using plain dicts and lists."""
        with self._lock:
            return plain(self._data)

    def to_json(self, indent: int | None = 2) -> str:
        """Serialize the store to a JSON string.

        Raises:
            ConfigError: If the store holds values JSON cannot represent.
        """
        try:
            return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)
        except (TypeError, ValueError) as err:
            raise ConfigError(f"Config cannot be serialized to JSON: {err}") from err

    def save(self, path: Path) -> None:
        """Write the store to a JSON file, creating parent directories."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.to_json())
            f.write("\n")

    @classmethod
    def from_json(cls, text: str, **kwargs: Any) -> Config:
        """Create a Config holding a previously serialized store.

        The returned Config has no targets, so calling refresh() on it
        empties it. Keyword arguments are passed to the constructor.
        Coalesced sequences come back as ordinary lists: a later merge()
        collision wraps them instead of appending to them.

        Raises:
            ConfigError: If text is not JSON or not a JSON object.
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as err:
            raise ConfigError(f"Invalid serialized config: {err}") from err
        if not isinstance(data, dict):
            raise ConfigError(
                f"Serialized config must be a JSON object, got {type(data).__name__}"
            )
        kwargs.setdefault("auto_refresh", False)
        config = cls(**kwargs)
        config._data = data
        return config

    @classmethod
    def load_json(cls, path: Path, **kwargs: Any) -> Config:
        """Read a store written by save()."""
        return cls.from_json(path.read_text(encoding="utf-8"), **kwargs)
