"""Shard parsing.

Two shard formats are understood:

1. JSON, one object per shard::

       {"read_1": ["READ_1", [["../struct_a.html#a6b5d", "BamTools::BamAlignment"]]]}

   An occurrence descriptor may also carry the target flag in the middle:
   ``[url, 1, owner]``.

2. The documentation generator's JavaScript output::

       var searchData=
       [
         ['read_5f1',['READ_1',['../struct_a.html#a6b5d',1,'BamTools::BamAlignment::READ_1()']]]
       ];

   Keys are escaped (see :mod:`..core.keys`) and labels carry HTML entities.

Both are turned into the typed records of :mod:`..core.records`.
"""

import html
import json
import logging
import posixpath
import re
from typing import Any

from ...errors import ShardParseError
from ..core.keys import decode_symbol_key, normalize_symbol_key
from ..core.records import Entry, Occurrence, Shard

logger = logging.getLogger(__name__)

_JS_PREAMBLE = re.compile(r"^\s*var\s+searchData\s*=\s*")
_JS_TOKEN = re.compile(
    r"""\s*(?:
        (?P<open>\[)
      | (?P<close>\])
      | (?P<comma>,)
      | '(?P<sq>(?:[^'\\]|\\.)*)'
      | "(?P<dq>(?:[^"\\]|\\.)*)"
      | (?P<num>-?\d+(?:\.\d+)?)
      | (?P<word>true|false|null)
    )""",
    re.VERBOSE | re.DOTALL,
)
_JS_ESCAPE = re.compile(r"\\(u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|.)", re.DOTALL)
_JS_SIMPLE_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", "0": "\0"}
_JS_WORDS = {"true": True, "false": False, "null": None}

# searchData rows go four arrays deep (rows, row, body, descriptor)
MAX_NESTING_DEPTH = 8


class _Malformed(ValueError):
    """Internal signal, converted to ShardParseError at the boundary."""


# ============ ENTRY POINT ============


def parse_shard(shard_key: str, raw: bytes) -> Shard:
    """Parse raw shard bytes into a :class:`Shard`.

    Args:
        shard_key: Key the shard was fetched under
        raw: Shard file content

    Returns:
        The parsed, validated shard

    Raises:
        ShardParseError: If the content is not a well-formed index
    """
    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ShardParseError(shard_key, f"not valid UTF-8 ({e.reason})") from e

    try:
        # JSON descriptors name the owner; generator labels name the symbol itself
        is_json = text.lstrip().startswith("{")
        rows = _rows_from_json(text) if is_json else _rows_from_js(text)
        entries = tuple(
            _build_entry(key, value, derive_owner=not is_json) for key, value in rows
        )
        shard = Shard(key=shard_key, entries=entries)
    except ValueError as e:
        raise ShardParseError(shard_key, str(e)) from e

    logger.debug(f"Parsed shard {shard_key!r}: {len(shard)} entries")
    return shard


# ============ FORMAT READERS ============


def _rows_from_json(text: str) -> list[tuple[str, Any]]:
    """Read a JSON shard, keeping duplicate keys visible."""
    try:
        pairs = json.loads(text, object_pairs_hook=_keep_pairs)
    except json.JSONDecodeError as e:
        raise _Malformed(f"invalid JSON at line {e.lineno} column {e.colno}") from e
    except RecursionError as e:
        raise _Malformed("JSON nested too deeply") from e
    if not isinstance(pairs, list):
        raise _Malformed("top level must be an object")
    rows = []
    for key, value in pairs:
        if not isinstance(value, list) or len(value) != 2 or not isinstance(value[1], list):
            raise _Malformed(f"entry {key!r} must be [display_name, [occurrences...]]")
        rows.append((normalize_symbol_key(key), [value[0], *value[1]]))
    return rows


def _keep_pairs(pairs: list[tuple[str, Any]]) -> list[tuple[str, Any]]:
    return pairs


def _rows_from_js(text: str) -> list[tuple[str, Any]]:
    """Read a generator ``var searchData=[...];`` shard."""
    preamble = _JS_PREAMBLE.match(text)
    if preamble is None:
        raise _Malformed("expected 'var searchData=' preamble")
    value, pos = _read_js_value(text, preamble.end())
    rest = text[pos:].strip()
    if rest not in ("", ";"):
        raise _Malformed(f"unexpected trailing content at offset {pos}")
    if not isinstance(value, list):
        raise _Malformed("searchData must be an array")

    rows = []
    for row in value:
        if not isinstance(row, list) or len(row) != 2:
            raise _Malformed("each row must be [key, [display_name, occurrences...]]")
        key, body = row
        if not isinstance(key, str) or not isinstance(body, list):
            raise _Malformed(f"row {key!r} is missing its key or body")
        rows.append((normalize_symbol_key(decode_symbol_key(key)), body))
    return rows


def _read_js_value(text: str, pos: int, depth: int = 0) -> tuple[Any, int]:
    token = _JS_TOKEN.match(text, pos)
    if token is None:
        raise _Malformed(f"unexpected character at offset {pos}")
    kind = token.lastgroup
    pos = token.end()

    if kind == "open":
        if depth >= MAX_NESTING_DEPTH:
            raise _Malformed(
                f"arrays nested deeper than {MAX_NESTING_DEPTH} at offset {token.start()}"
            )
        items: list[Any] = []
        while True:
            closing = _JS_TOKEN.match(text, pos)
            if closing is not None and closing.lastgroup == "close":
                return items, closing.end()
            item, pos = _read_js_value(text, pos, depth + 1)
            items.append(item)
            separator = _JS_TOKEN.match(text, pos)
            if separator is None:
                raise _Malformed(f"unterminated array at offset {pos}")
            if separator.lastgroup == "close":
                return items, separator.end()
            if separator.lastgroup != "comma":
                raise _Malformed(f"expected ',' or ']' at offset {pos}")
            pos = separator.end()
    if kind == "sq" or kind == "dq":
        return _JS_ESCAPE.sub(_unescape_js, token.group(kind)), pos
    if kind == "num":
        number = token.group(kind)
        return (float(number) if "." in number else int(number)), pos
    if kind == "word":
        return _JS_WORDS[token.group(kind)], pos
    raise _Malformed(f"unexpected {token.group().strip()!r} at offset {token.start()}")


def _unescape_js(match: re.Match) -> str:
    escape = match.group(1)
    if escape[0] in "ux" and len(escape) > 1:
        return chr(int(escape[1:], 16))
    return _JS_SIMPLE_ESCAPES.get(escape, escape)


# ============ RECORD BUILDING ============


def _build_entry(key: str, body: list[Any], derive_owner: bool = True) -> Entry:
    """Build an Entry from ``[display_name, descriptor, descriptor, ...]``."""
    if not key:
        raise _Malformed("empty symbol key")
    if not body or not isinstance(body[0], str):
        raise _Malformed(f"entry {key!r} is missing its display name")
    display_name = html.unescape(body[0])
    descriptors = body[1:]
    if not descriptors:
        raise _Malformed(f"entry {key!r} has no occurrences")
    occurrences = tuple(_build_occurrence(key, display_name, d, derive_owner) for d in descriptors)
    return Entry(key=key, occurrences=occurrences)


def _build_occurrence(
    key: str, display_name: str, descriptor: Any, derive_owner: bool = True
) -> Occurrence:
    if not isinstance(descriptor, list) or len(descriptor) not in (2, 3):
        raise _Malformed(f"entry {key!r} has a malformed occurrence descriptor")
    url = descriptor[0]
    label = descriptor[-1]
    flag = descriptor[1] if len(descriptor) == 3 else 1
    if not isinstance(url, str) or not url:
        raise _Malformed(f"entry {key!r} has an occurrence without a URL")
    if not isinstance(label, str):
        raise _Malformed(f"entry {key!r} has an occurrence without an owner label")

    page, _, anchor = url.partition("#")
    label = html.unescape(label)
    return Occurrence(
        display_name=display_name,
        target_page=_site_relative(page),
        anchor=anchor,
        owner=owner_from_label(label, display_name) if derive_owner else label,
        label=label,
        opens_in_parent=bool(flag),
    )


def _site_relative(page: str) -> str:
    """Rebase a page written relative to the shard directory onto the site root."""
    if not page or "://" in page or page.startswith("/"):
        return page
    page = posixpath.normpath(page)
    while page.startswith("../"):
        page = page[3:]
    return page


def owner_from_label(label: str, display_name: str) -> str:
    """Derive the enclosing scope from a generator label.

    ``BamTools::BamAlignment::REVERSE()`` with display name ``REVERSE``
    gives ``BamTools::BamAlignment``. Labels that already name the scope
    (``nvbio::io``) are returned unchanged; a bare global gives "".
    """
    scope = label[:-2] if label.endswith("()") else label
    if scope == display_name:
        return ""
    suffix = f"::{display_name}"
    if scope.endswith(suffix):
        return scope[: -len(suffix)]
    return label
