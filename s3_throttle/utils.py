from __future__ import annotations
"""Helpers for naming buckets and formatting sizes."""
from dataclasses import dataclass
import random
import string
from importlib.metadata import PackageNotFoundError, metadata, version

DIST_NAME = "pys3-throttle"
BUCKET_PREFIX = "ecom-"
BUCKET_KEY_LENGTH = 8
KEY_ALPHABET = string.ascii_lowercase

_RANDOM = random.SystemRandom()


@dataclass(frozen=True)
class PackageInfo:
    name: str
    version: str
    summary: str


def load_package_info(dist_name: str = DIST_NAME) -> PackageInfo:
    try:
        distribution_metadata = metadata(dist_name)
        package_version = version(dist_name)
    except PackageNotFoundError:
        return PackageInfo(
            name=dist_name,
            version="",
            summary="Rate-limited client for S3-compatible object storage.",
        )
    return PackageInfo(
        name=distribution_metadata.get("Name") or dist_name,
        version=package_version,
        summary=distribution_metadata.get("Summary") or "",
    )


def make_key(length: int, rng: random.Random | None = None) -> str:
    """Return ``length`` random lowercase ASCII letters."""

    if length < 0:
        raise ValueError("length must not be negative")
    chooser = rng or _RANDOM
    return "".join(chooser.choice(KEY_ALPHABET) for _ in range(length))


def generate_bucket_name(prefix: str = BUCKET_PREFIX, rng: random.Random | None = None) -> str:
    return f"{prefix}{make_key(BUCKET_KEY_LENGTH, rng)}"


def format_size(size: int | None) -> str:
    if size is None:
        return "-"
    suffixes = ["B", "KB", "MB", "GB", "TB", "PB"]
    value = float(max(size, 0))
    for suffix in suffixes:
        if value < 1024 or suffix == suffixes[-1]:
            return f"{value:.1f} {suffix}" if suffix != "B" else f"{int(value)} {suffix}"
        value /= 1024
    return f"{size} B"
