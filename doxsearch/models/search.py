"""Response models for the search HTTP API."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from ..engine.core.records import NavigationTarget, Occurrence, SearchHit


class OccurrenceInfo(BaseModel):
    """One definition site of a matched symbol."""

    display_name: str = Field(..., description="Symbol as shown to the user")
    owner: str = Field(..., description="Enclosing namespace, class or group")
    label: str = Field(default="", description="Full scope label from the index")
    page: str = Field(..., description="Documentation page relative to the site root")
    anchor: str = Field(default="", description="In-page fragment identifier")
    url: str = Field(..., description="Page with fragment, ready to navigate to")
    opens_in_parent: bool = Field(default=True, description="Target the parent frame")

    @classmethod
    def from_occurrence(cls, occurrence: Occurrence) -> OccurrenceInfo:
        target = occurrence.target
        return cls(
            display_name=occurrence.display_name,
            owner=occurrence.owner,
            label=occurrence.label,
            page=target.page,
            anchor=target.anchor,
            url=target.url,
            opens_in_parent=occurrence.opens_in_parent,
        )


class SearchResultItem(BaseModel):
    """A matched symbol with all its occurrences."""

    key: str = Field(..., description="Normalised symbol key")
    display_name: str = Field(..., description="Symbol as shown to the user")
    score: float = Field(..., ge=0, description="Ranking score (match tier)")
    tier: str = Field(..., description="Match tier: exact, prefix or substring")
    occurrences: list[OccurrenceInfo] = Field(
        default_factory=list, description="Definition sites in index order"
    )

    @classmethod
    def from_hit(cls, hit: SearchHit) -> SearchResultItem:
        return cls(
            key=hit.entry.key,
            display_name=hit.entry.display_name,
            score=hit.score,
            tier=hit.tier.name.lower(),
            occurrences=[OccurrenceInfo.from_occurrence(o) for o in hit.entry.occurrences],
        )


class SearchResponse(BaseModel):
    """Result of GET /v1/search."""

    query: str = Field(..., description="Query text as received")
    seq: int | None = Field(
        default=None,
        description="Caller sequence token, echoed so stale responses can be dropped",
    )
    results: list[SearchResultItem] = Field(default_factory=list)
    total: int = Field(default=0, ge=0, description="Number of results returned")
    latency_ms: float = Field(default=0.0, ge=0, description="Server-side query time")


class NavigationResponse(BaseModel):
    """Result of GET /v1/resolve."""

    key: str = Field(..., description="Resolved symbol key")
    occurrence: int = Field(..., ge=0, description="Occurrence index that was resolved")
    page: str = Field(..., description="Documentation page relative to the site root")
    anchor: str = Field(default="", description="In-page fragment identifier")
    url: str = Field(..., description="Page with fragment")

    @classmethod
    def from_target(cls, key: str, occurrence: int, target: NavigationTarget) -> NavigationResponse:
        return cls(
            key=key,
            occurrence=occurrence,
            page=target.page,
            anchor=target.anchor,
            url=target.url,
        )


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Service status")
    version: str = Field(..., description="Service version")
    timestamp: datetime = Field(..., description="Server time")
    shards_loaded: int = Field(default=0, ge=0, description="Shards currently cached")


class ErrorResponse(BaseModel):
    """Error body returned by every failing endpoint."""

    success: bool = Field(default=False)
    error: str = Field(..., description="Human-readable error message")
    retryable: bool = Field(default=False, description="Whether retrying may succeed")
