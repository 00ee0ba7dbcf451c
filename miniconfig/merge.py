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

"""Recursive merge engine for miniconfig.

Every parsed configuration file, and every mapping handed to Config.merge(),
is folded into the store with the functions in this module.

Merge Behavior:
    The default mode is "append, don't overwrite":

    - **Key only in incoming**: inserted as-is (deep-copied)
    - **Mapping + Mapping**: merged recursively, in place
    - **Anything else**: the two values are coalesced into a sequence.
      The first collision replaces the existing value with
      ``Coalesced([old, new])``; every later collision appends to it.
      Values are never deduplicated and never overwritten.

    This is the opposite of the usual "last wins" override. A key defined
    in three files ends up as a three-element sequence in arrival order.

    Overwrite mode (``overwrite=True``) shares the same recursion but lets
    the incoming value win outright whenever the two sides are not both
    mappings.

Coalesced vs. ordinary lists:
    Only a sequence that was *produced by a collision* is appended to. A list
    that came from a file (e.g. a JSON array) is a plain value: when it
    collides it is wrapped like any scalar. Coalesced is a list subclass, so
    it indexes, iterates and serializes like a normal list.

Example:
    Coalescing colliding leaves:
        ```python
        from miniconfig.merge import coalesce

        merged = coalesce({"k": 1}, {"k": 2}, {"k": 3})
        print(merged)  # {'k': [1, 2, 3]}
        ```

    Overwrite mode:
        ```python
        from miniconfig.merge import deep_merge

        merged = deep_merge({"db": {"user": "a"}}, {"db": {"user": "b"}}, overwrite=True)
        print(merged)  # {'db': {'user': 'b'}}
        ```
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

__all__ = [
    "Coalesced",
    "merge_into",
    "deep_merge",
    "coalesce",
    "plain",
]


class Coalesced(list):
    """A sequence created by merging colliding values.

    Later collisions on the same key append to it instead of wrapping it
    again.
    """

    def __repr__(self) -> str:
        return f"Coalesced({list.__repr__(self)})"


def merge_into(
    target: dict[str, Any], incoming: Mapping[str, Any], *, overwrite: bool = False
) -> dict[str, Any]:
    """Merge ``incoming`` into ``target`` in place.

    Args:
        target: The accumulator. Mutated and returned.
        incoming: The mapping to fold in. Never mutated; values are
            deep-copied on insertion.
        overwrite: If True, non-mapping collisions are resolved by letting
            the incoming value win. If False (default), they are coalesced
            into a Coalesced sequence.

    Returns:
        The same ``target`` object, for chaining.
    """
    for key, value in incoming.items():
        if key not in target:
            target[key] = _copy_value(value)
            continue

        current = target[key]
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            if not isinstance(current, dict):
                current = target[key] = dict(current)
            merge_into(current, value, overwrite=overwrite)
        elif overwrite:
            target[key] = _copy_value(value)
        elif isinstance(current, Coalesced):
            current.append(_copy_value(value))
        else:
            target[key] = Coalesced([current, _copy_value(value)])
    return target


def deep_merge(
    base: Mapping[str, Any], overlay: Mapping[str, Any], *, overwrite: bool = False
) -> dict[str, Any]:
    """Merge two mappings without mutating either.

    Args:
        base: The mapping whose values arrive first.
        overlay: The mapping merged on top of ``base``.
        overwrite: Passed through to merge_into().

    Returns:
        A new dict holding the merged contents.
    """
    result = merge_into({}, base, overwrite=overwrite)
    return merge_into(result, overlay, overwrite=overwrite)


def coalesce(*mappings: Mapping[str, Any]) -> dict[str, Any]:
    """Fold any number of mappings left to right with coalescing semantics."""
    result: dict[str, Any] = {}
    for mapping in mappings:
        merge_into(result, mapping)
    return result


def plain(value: Any) -> Any:
    """Return a deep copy of ``value`` using only dict and list containers.

    Coalesced sequences become ordinary lists and mappings become dicts.
    Useful for comparisons and for handing data to code that type-checks
    containers strictly.
    """
    if isinstance(value, Mapping):
        return {k: plain(v) for k, v in value.items()}
    if isinstance(value, list):
        return [plain(v) for v in value]
    return value


def _copy_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: _copy_value(v) for k, v in value.items()}
    if isinstance(value, list):
        # Keep the Coalesced marker on copies
        return type(value)(_copy_value(v) for v in value)
    return value
