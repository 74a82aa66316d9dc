"""Index data structures for the symbol search engine.

These records are produced once when a shard is parsed and are never
mutated afterwards. All of them are frozen dataclasses.
"""

from dataclasses import dataclass, field

from ...models.enums import MatchTier
from .keys import shard_key_for


@dataclass(frozen=True)
class Occurrence:
    """One concrete definition site of a symbol.

    Attributes:
        display_name: Symbol as shown to the user (e.g. ``READ_1``)
        target_page: Documentation page, relative to the site root
        anchor: In-page fragment identifier (may be empty)
        owner: Enclosing namespace/class/group (e.g. ``BamTools::BamAlignment``)
        label: Full scope label as written by the generator
        opens_in_parent: Whether the link targets the parent frame
    """

    display_name: str
    target_page: str
    anchor: str
    owner: str
    label: str = ""
    opens_in_parent: bool = True

    @property
    def target(self) -> "NavigationTarget":
        return NavigationTarget(page=self.target_page, anchor=self.anchor)


@dataclass(frozen=True)
class NavigationTarget:
    """Where the UI should navigate for a chosen occurrence."""

    page: str
    anchor: str

    @property
    def url(self) -> str:
        """Page URL with the fragment appended when present."""
        return f"{self.page}#{self.anchor}" if self.anchor else self.page


@dataclass(frozen=True)
class Entry:
    """A unique searchable symbol key and every place it is defined.

    Attributes:
        key: Normalised (lowercase) symbol key
        occurrences: Definition sites in generator order, never empty
    """

    key: str
    occurrences: tuple[Occurrence, ...]

    def __post_init__(self) -> None:
        if not self.key:
            raise ValueError("Entry key must not be empty")
        if not self.occurrences:
            raise ValueError(f"Entry {self.key!r} has no occurrences")

    @property
    def display_name(self) -> str:
        return self.occurrences[0].display_name


@dataclass(frozen=True)
class Shard:
    """All entries whose key starts with the same character.

    Entries keep their generator order, which is the tie-break order used
    when ranking query results.
    """

    key: str
    entries: tuple[Entry, ...]
    _by_key: dict[str, Entry] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        by_key: dict[str, Entry] = {}
        for entry in self.entries:
            if entry.key in by_key:
                raise ValueError(f"Duplicate key {entry.key!r}")
            if shard_key_for(entry.key) != self.key:
                raise ValueError(f"Key {entry.key!r} does not belong to shard {self.key!r}")
            by_key[entry.key] = entry
        object.__setattr__(self, "_by_key", by_key)

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, symbol_key: object) -> bool:
        return symbol_key in self._by_key

    def get(self, symbol_key: str) -> Entry | None:
        """Exact lookup by normalised key."""
        return self._by_key.get(symbol_key)


@dataclass(frozen=True)
class SearchHit:
    """One ranked query result."""

    entry: Entry
    tier: MatchTier

    @property
    def score(self) -> float:
        return float(self.tier)
