"""Query normalisation and match classification."""

from ...models.enums import MatchTier


def normalize_query(text: str) -> str:
    """Trim and lowercase user-typed text. Returns "" for blank input."""
    return text.strip().lower()


def match_tier(symbol_key: str, needle: str) -> MatchTier | None:
    """Classify how ``symbol_key`` matches a normalised query.

    Args:
        symbol_key: Normalised (lowercase) symbol key
        needle: Normalised, non-empty query text

    Returns:
        The match tier, or None if ``needle`` is not a substring of the key
    """
    if symbol_key == needle:
        return MatchTier.EXACT
    if symbol_key.startswith(needle):
        return MatchTier.PREFIX
    if needle in symbol_key:
        return MatchTier.SUBSTRING
    return None
