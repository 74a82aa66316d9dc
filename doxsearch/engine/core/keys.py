"""Shard routing and symbol key encoding.

The documentation generator writes keys with every character outside
``[a-z0-9]`` escaped as ``_XX`` (two lowercase hex digits per UTF-8 byte),
so ``read_1`` is stored as ``read_5f1``. Shard files are named after the
category and the hex code of the leading character, e.g. ``enumvalues_72.js``
for shard ``r``.
"""

import re

from ...models.enums import ShardNaming

_ESCAPE = re.compile(r"_([0-9a-fA-F]{2})")

# Characters that may appear verbatim in a plain ``<key>.json`` filename
_SAFE_FILENAME_CHARS = frozenset("abcdefghijklmnopqrstuvwxyz0123456789_$~")


def normalize_symbol_key(symbol_key: str) -> str:
    """Strip surrounding whitespace and lowercase a symbol key."""
    return symbol_key.strip().lower()


def shard_key_for(symbol_key: str) -> str:
    """Return the shard a symbol key belongs to.

    The shard key is the first significant (non-whitespace) character,
    lowercased. The result depends only on ``symbol_key``.

    Raises:
        ValueError: If the key is empty or whitespace only
    """
    normalized = normalize_symbol_key(symbol_key)
    if not normalized:
        raise ValueError("Cannot route an empty symbol key")
    return normalized[0]


def encode_symbol_key(symbol_key: str) -> str:
    """Escape a plain key the way the generator writes it."""
    parts: list[str] = []
    for char in symbol_key.lower():
        if char.isascii() and char.isalnum():
            parts.append(char)
        else:
            parts.extend(f"_{byte:02x}" for byte in char.encode("utf-8"))
    return "".join(parts)


def decode_symbol_key(encoded: str) -> str:
    """Reverse :func:`encode_symbol_key`.

    Raises:
        ValueError: If the escaped bytes are not valid UTF-8
    """
    if "_" not in encoded:
        return encoded

    buffer = bytearray()
    pos = 0
    for match in _ESCAPE.finditer(encoded):
        buffer.extend(encoded[pos : match.start()].encode("utf-8"))
        buffer.append(int(match.group(1), 16))
        pos = match.end()
    buffer.extend(encoded[pos:].encode("utf-8"))
    return buffer.decode("utf-8")


def shard_code(shard_key: str) -> str:
    """Hex code of a shard key, as used in generator filenames."""
    return "".join(f"{byte:02x}" for byte in shard_key.encode("utf-8"))


def shard_filename(
    shard_key: str,
    category: str = "all",
    naming: ShardNaming = ShardNaming.GENERATOR,
) -> str:
    """Return the filename a shard is published under.

    Args:
        shard_key: Single-character shard key
        category: Index category (``all``, ``functions``, ``enumvalues``...)
        naming: Filename convention of the index

    Returns:
        ``<category>_<hex>.js`` for generator output, ``<key>.json`` otherwise
    """
    if len(shard_key) != 1:
        raise ValueError(f"Shard key must be a single character, got {shard_key!r}")
    if naming == ShardNaming.GENERATOR:
        return f"{category}_{shard_code(shard_key)}.js"
    if shard_key in _SAFE_FILENAME_CHARS:
        return f"{shard_key}.json"
    return f"_{shard_code(shard_key)}.json"
