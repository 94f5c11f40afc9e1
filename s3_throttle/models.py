from __future__ import annotations
"""Data models for bucket creation and object listings."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class BucketDescriptor:
    """A bucket created through the throttled client."""

    name: str
    region: str = ""
    acl: str = "public-read"
    attempts: int = 1


@dataclass
class ObjectSummary:
    """One entry of a listing page."""

    key: str
    size: int = 0
    last_modified: Optional[datetime] = None
    storage_class: Optional[str] = None
    etag: Optional[str] = None


@dataclass
class ObjectPage:
    """Represents a single page returned by a listing call."""

    items: list[ObjectSummary] = field(default_factory=list)
    truncated: bool = False
    cursor: Optional[str] = None
    requested: int = 1000
    prefixes: list[str] = field(default_factory=list)

    @property
    def has_more(self) -> bool:
        # Older endpoints only signal a further page through a full page.
        if not self.cursor:
            return False
        return self.truncated or len(self.items) == self.requested


@dataclass
class BucketSize:
    """Aggregate size of every object in a bucket."""

    bucket: str
    size: int = 0
    object_count: int = 0
    page_count: int = 0
