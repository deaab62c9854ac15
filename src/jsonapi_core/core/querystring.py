"""Bracket-notation query-string codec.

JSON:API query parameters are nested (``filter[author][name]=john``,
``fields[articles]=title``), which ``application/x-www-form-urlencoded`` has no
notion of. This module maps such strings to nested dicts/lists and back.

See https://jsonapi.org/format/#appendix-query-details
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

from starlette.datastructures import QueryParams

logger = logging.getLogger(__name__)

_KEY_RE = re.compile(r"^([^\[\]]+)((?:\[[^\[\]]*\])*)$")
_SEGMENT_RE = re.compile(r"\[([^\[\]]*)\]")
_INDEX_RE = re.compile(r"^(?:0|[1-9][0-9]*)$")
_TAIL_RE = re.compile(r"^(?:\[[^\[\]]*\])+$")

_KEY_SAFE = "[]"
_VALUE_SAFE = ","

# Decoded tree nodes before finalization: dicts may carry int keys for list slots.
_Node = dict[str | int, Any]


def split_key(key: str, max_depth: int = 10) -> list[str]:
    """Split ``a[b][c]`` into ``["a", "b", "c"]``.

    Segments beyond ``max_depth`` are kept together as one literal key; keys that
    are not well-formed bracket expressions are returned unsplit.
    """
    match = _KEY_RE.match(key)
    if match is None:
        return [key]
    root, rest = match.groups()
    segments = [root, *_SEGMENT_RE.findall(rest)]
    if len(segments) - 1 > max_depth:
        tail = "".join(f"[{s}]" for s in segments[max_depth + 1 :])
        return [*segments[: max_depth + 1], tail]
    return segments


def _slot(node: _Node, segment: str) -> str | int:
    if segment == "":
        indices = [k for k in node if isinstance(k, int)]
        return max(indices) + 1 if indices else 0
    if _INDEX_RE.match(segment):
        return int(segment)
    return segment


def _assign(tree: _Node, segments: list[str], value: str) -> None:
    root, *rest = segments
    if not rest:
        _store(tree, root, value)
        return

    child = tree.get(root)
    if not isinstance(child, dict):
        if child is not None:
            logger.debug("Replacing scalar %r under %r with a nested structure", child, root)
        child = {}
        tree[root] = child
    node: _Node = child

    for segment in rest[:-1]:
        key = _slot(node, segment)
        nested = node.get(key)
        if not isinstance(nested, dict):
            if nested is not None:
                logger.debug("Replacing scalar %r under %r with a nested structure", nested, key)
            nested = {}
            node[key] = nested
        node = nested

    _store(node, _slot(node, rest[-1]), value)


def _store(node: _Node, key: str | int, value: str) -> None:
    if key not in node:
        node[key] = value
        return
    existing = node[key]
    if isinstance(existing, str):
        node[key] = [existing, value]
    elif isinstance(existing, list):
        existing.append(value)
    else:
        logger.debug("Ignoring scalar for %r, a nested structure is already present", key)


def _finalize(node: Any) -> Any:
    if isinstance(node, dict):
        items = {k: _finalize(v) for k, v in node.items()}
        if items and all(isinstance(k, int) for k in items):
            return [items[k] for k in sorted(items)]
        return {str(k): v for k, v in items.items()}
    if isinstance(node, list):
        return [_finalize(v) for v in node]
    return node


def decode(raw: str, *, max_depth: int = 10, parameter_limit: int = 1000) -> dict[str, Any]:
    """Decode a query string (leading ``?`` optional) into a nested mapping.

    Values are always strings; repeated keys collect into lists, ``[]`` appends
    and ``[0]``-style indices build lists.
    """
    params = QueryParams(raw.lstrip("?"))
    pairs = params.multi_items()
    if len(pairs) > parameter_limit:
        logger.debug("Query string has %d parameters, reading the first %d", len(pairs), parameter_limit)
        pairs = pairs[:parameter_limit]

    tree: _Node = {}
    for key, value in pairs:
        if not key:
            continue
        _assign(tree, split_key(key, max_depth), value)

    return {str(k): _finalize(v) for k, v in tree.items()}


def _flatten(prefix: str, value: Any, out: list[tuple[str, str]], literal: bool = False) -> None:
    """Append ``(key, value)`` pairs for ``value`` under ``prefix``.

    ``literal`` marks a prefix that decodes as one unsplit key (ill-formed, or
    carrying a tail beyond the depth cap); lists under it repeat the key.
    """
    if value is None:
        return
    if isinstance(value, Mapping):
        for key, item in value.items():
            if _TAIL_RE.match(str(key)):
                # A depth-capped tail is already in bracket form.
                _flatten(f"{prefix}{key}", item, out, literal=True)
            else:
                _flatten(f"{prefix}[{key}]", item, out)
    elif isinstance(value, list | tuple):
        if literal or _KEY_RE.match(prefix) is None:
            for item in value:
                _flatten(prefix, item, out, literal=True)
        else:
            for index, item in enumerate(value):
                _flatten(f"{prefix}[{index}]", item, out)
    elif isinstance(value, bool):
        out.append((prefix, "true" if value else "false"))
    else:
        out.append((prefix, str(value)))


def encode(data: Mapping[str, Any]) -> str:
    """Encode a nested mapping as a bracket-notation query string (no leading ``?``)."""
    pairs: list[tuple[str, str]] = []
    for key, value in data.items():
        _flatten(key, value, pairs)
    return "&".join(f"{quote(k, safe=_KEY_SAFE)}={quote(v, safe=_VALUE_SAFE)}" for k, v in pairs)
