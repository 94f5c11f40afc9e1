from __future__ import annotations
"""Loading of throttling settings from JSON."""

from dataclasses import dataclass
import json
from pathlib import Path

from .pagination import MAX_PAGE_SIZE, STRATEGIES


@dataclass
class ThrottleSettings:
    """Tunables for request pacing, bucket naming and listing."""

    base_increment_ms: int = 750
    initial_delay_ms: int = 0
    retry_backoff_ms: int = 1500
    max_retries: int = 3
    page_size: int = MAX_PAGE_SIZE
    bucket_prefix: str = "ecom-"
    pagination: str = "token"


_INT_MINIMUMS = {
    "base_increment_ms": 0,
    "initial_delay_ms": 0,
    "retry_backoff_ms": 0,
    "max_retries": 0,
    "page_size": 1,
}


class SettingsStorage:
    """Reads :class:`ThrottleSettings` from a JSON file, falling back to defaults."""

    def __init__(self, storage_path: str | Path | None = None):
        if storage_path is None:
            storage_path = Path.home() / ".pys3t_settings.json"
        self._path = Path(storage_path)

    def load(self) -> ThrottleSettings:
        if not self._path.exists():
            return ThrottleSettings()
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            return ThrottleSettings()
        if not isinstance(data, dict):
            return ThrottleSettings()

        defaults = ThrottleSettings()
        values = {}
        for name, minimum in _INT_MINIMUMS.items():
            values[name] = _coerce_int(data.get(name), getattr(defaults, name), minimum)
        if values["page_size"] > MAX_PAGE_SIZE:
            values["page_size"] = MAX_PAGE_SIZE

        prefix = data.get("bucket_prefix", defaults.bucket_prefix)
        values["bucket_prefix"] = prefix if isinstance(prefix, str) else defaults.bucket_prefix
        pagination = data.get("pagination", defaults.pagination)
        if not isinstance(pagination, str) or pagination.strip().lower() not in STRATEGIES:
            pagination = defaults.pagination
        values["pagination"] = pagination.strip().lower()
        return ThrottleSettings(**values)


def _coerce_int(value: object, default: int, minimum: int) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    if number < minimum:
        return default
    return number
