from __future__ import annotations
"""Cursor styles for the two S3 listing APIs."""
from typing import Any, Mapping, Optional

from .models import ObjectPage, ObjectSummary

MAX_PAGE_SIZE = 1000


class PaginationStrategy:
    """Builds listing requests and parses their responses.

    Subclasses name the client method and the request/response fields that
    carry the continuation cursor.
    """

    name = ""
    method = ""
    cursor_param = ""
    next_cursor_field = ""

    def build_params(
        self,
        bucket: str,
        *,
        page_size: int = MAX_PAGE_SIZE,
        prefix: Optional[str] = None,
        delimiter: Optional[str] = None,
        cursor: Optional[str] = None,
    ) -> dict[str, Any]:
        params: dict[str, Any] = {"Bucket": bucket, "MaxKeys": page_size}
        if prefix:
            params["Prefix"] = prefix
        if delimiter:
            params["Delimiter"] = delimiter
        if cursor:
            params[self.cursor_param] = cursor
        return params

    def parse_page(self, response: Mapping[str, Any] | None, *, requested: int) -> ObjectPage:
        response = response or {}
        contents = response.get("Contents")
        if not isinstance(contents, list):
            contents = []
        items = [_parse_object(entry) for entry in contents if isinstance(entry, Mapping)]
        prefixes = [
            common["Prefix"]
            for common in response.get("CommonPrefixes") or []
            if isinstance(common, Mapping) and common.get("Prefix")
        ]
        truncated = bool(response.get("IsTruncated", False))
        return ObjectPage(
            items=items,
            truncated=truncated,
            cursor=self.next_cursor(response, items, truncated),
            requested=requested,
            prefixes=prefixes,
        )

    def next_cursor(
        self,
        response: Mapping[str, Any],
        items: list[ObjectSummary],
        truncated: bool,
    ) -> Optional[str]:
        return response.get(self.next_cursor_field) or None


class MarkerPagination(PaginationStrategy):
    """``ListObjects`` (v1): resume after a key given as ``Marker``."""

    name = "marker"
    method = "list_objects"
    cursor_param = "Marker"
    next_cursor_field = "NextMarker"

    def next_cursor(self, response, items, truncated):
        cursor = super().next_cursor(response, items, truncated)
        # NextMarker is only sent when a delimiter was requested.
        if cursor is None and truncated and items:
            cursor = items[-1].key
        return cursor


class TokenPagination(PaginationStrategy):
    """``ListObjectsV2``: resume with an opaque continuation token."""

    name = "token"
    method = "list_objects_v2"
    cursor_param = "ContinuationToken"
    next_cursor_field = "NextContinuationToken"


STRATEGIES: dict[str, type[PaginationStrategy]] = {
    MarkerPagination.name: MarkerPagination,
    TokenPagination.name: TokenPagination,
}


def get_pagination(name: str | PaginationStrategy) -> PaginationStrategy:
    if isinstance(name, PaginationStrategy):
        return name
    try:
        return STRATEGIES[name.strip().lower()]()
    except KeyError:
        raise ValueError(
            f"Unknown pagination '{name}', expected one of: {', '.join(sorted(STRATEGIES))}"
        ) from None


def _parse_object(entry: Mapping[str, Any]) -> ObjectSummary:
    try:
        size = int(entry.get("Size") or 0)
    except (TypeError, ValueError):
        size = 0
    return ObjectSummary(
        key=str(entry.get("Key", "")),
        size=size,
        last_modified=entry.get("LastModified"),
        storage_class=entry.get("StorageClass"),
        etag=entry.get("ETag"),
    )
