"""Enumeration types for the symbol search service."""

from enum import IntEnum, StrEnum


class MatchTier(IntEnum):
    """How a symbol key matched the query text. Higher ranks first."""

    SUBSTRING = 1
    PREFIX = 2
    EXACT = 3


class IndexCategory(StrEnum):
    """Index categories published by the documentation generator."""

    ALL = "all"
    CLASSES = "classes"
    NAMESPACES = "namespaces"
    FILES = "files"
    FUNCTIONS = "functions"
    VARIABLES = "variables"
    TYPEDEFS = "typedefs"
    ENUMS = "enums"
    ENUMVALUES = "enumvalues"
    RELATED = "related"
    DEFINES = "defines"
    GROUPS = "groups"
    PAGES = "pages"


class ShardNaming(StrEnum):
    """Filename convention used by a published index."""

    GENERATOR = "generator"  # <category>_<hex>.js
    JSON = "json"  # <key>.json
