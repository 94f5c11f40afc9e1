from __future__ import annotations
"""Throttled bucket creation, listing and size aggregation."""
import logging
import time
from typing import Any, Callable, Optional

import boto3
from botocore.client import Config
from botocore.exceptions import ClientError

from .models import BucketDescriptor, BucketSize, ObjectPage, ObjectSummary
from .pagination import MAX_PAGE_SIZE, PaginationStrategy, get_pagination
from .scheduler import DelayScheduler
from .utils import BUCKET_PREFIX, generate_bucket_name

LOGGER = logging.getLogger(__name__)

BUCKET_ACL = "public-read"
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_BACKOFF_MS = 1500
RETRYABLE_CREATE_CODES = frozenset(
    {
        "BucketAlreadyExists",
        "BucketAlreadyOwnedByYou",
        "OperationAborted",
        "SlowDown",
        "InternalError",
        "ServiceUnavailable",
    }
)
# S3 rejects an explicit LocationConstraint for its default region.
DEFAULT_REGIONS = frozenset({"", "us-east-1"})


def retry_on_transient_error(exc: Exception) -> bool:
    """Retry name collisions and server throttling, not credential or permission errors."""

    if not isinstance(exc, ClientError):
        return False
    code = exc.response.get("Error", {}).get("Code", "")
    return code in RETRYABLE_CREATE_CODES


def retry_on_any_error(exc: Exception) -> bool:
    return True


def build_client(
    endpoint_url: str,
    region: str,
    access_key: str,
    secret_key: str,
    *,
    client_factory: Callable[..., object] | None = None,
):
    """Create the S3 client every throttled call is issued against."""

    factory = client_factory or boto3.client
    LOGGER.info("Setting up S3 client endpoint: %s region %s", endpoint_url, region or "-")
    return factory(
        "s3",
        endpoint_url=endpoint_url or None,
        region_name=region or None,
        aws_access_key_id=access_key,
        aws_secret_access_key=secret_key,
        config=Config(signature_version="s3v4"),
    )


class ThrottledS3Service:
    """Issues S3 calls through a :class:`DelayScheduler`."""

    def __init__(
        self,
        client,
        *,
        scheduler: DelayScheduler | None = None,
        pagination: str | PaginationStrategy = "token",
        page_size: int = MAX_PAGE_SIZE,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_backoff_ms: int = DEFAULT_RETRY_BACKOFF_MS,
        retry_policy: Callable[[Exception], bool] = retry_on_transient_error,
        bucket_prefix: str = BUCKET_PREFIX,
        name_factory: Callable[[], str] | None = None,
        sleep: Callable[[float], None] | None = None,
    ):
        if not 0 < page_size <= MAX_PAGE_SIZE:
            raise ValueError(f"page_size must be between 1 and {MAX_PAGE_SIZE}")
        self._client = client
        self._scheduler = scheduler or DelayScheduler()
        self._pagination = get_pagination(pagination)
        self._page_size = page_size
        self._max_retries = max(int(max_retries), 0)
        self._retry_backoff_ms = max(int(retry_backoff_ms), 0)
        self._retry_policy = retry_policy
        self._name_factory = name_factory or (lambda: generate_bucket_name(bucket_prefix))
        self._sleep = sleep or time.sleep

    @property
    def scheduler(self) -> DelayScheduler:
        return self._scheduler

    @property
    def pagination(self) -> PaginationStrategy:
        return self._pagination

    def run_method(self, method: str, params: dict[str, Any] | None = None) -> Any:
        """Call ``client.<method>(**params)`` once its scheduled delay elapsed."""

        params = dict(params or {})
        operation = getattr(self._client, method)
        return self._scheduler.schedule(
            lambda: operation(**params),
            method=method,
            bucket=params.get("Bucket"),
        )

    def create_bucket(
        self,
        region: str,
        name: Optional[str] = None,
        attempt: int = 0,
    ) -> BucketDescriptor:
        """Create a public-read bucket, picking a new random name on failure.

        Raises:
            ClientError | BotoCoreError: the last error once retries are
            exhausted, or the first error the retry policy rejects.
        """

        bucket_name = name or self._name_factory()
        params: dict[str, Any] = {"Bucket": bucket_name, "ACL": BUCKET_ACL}
        if (region or "") not in DEFAULT_REGIONS:
            params["CreateBucketConfiguration"] = {"LocationConstraint": region}

        try:
            self.run_method("create_bucket", params)
        except Exception as exc:
            if attempt >= self._max_retries or not self._retry_policy(exc):
                raise
            LOGGER.warning(
                "Creating bucket %s failed (attempt %d of %d): %s",
                bucket_name,
                attempt + 1,
                self._max_retries + 1,
                exc,
            )
        else:
            return BucketDescriptor(
                name=bucket_name,
                region=region or "",
                acl=BUCKET_ACL,
                attempts=attempt + 1,
            )

        # The failed name is never reused.
        self._sleep(self._retry_backoff_ms / 1000)
        return self.create_bucket(region, None, attempt + 1)

    def list_objects(
        self,
        bucket: str,
        prefix: Optional[str] = None,
        cursor: Optional[str] = None,
        *,
        delimiter: Optional[str] = None,
    ) -> ObjectPage:
        """Return one page of up to ``page_size`` objects."""

        params = self._pagination.build_params(
            bucket,
            page_size=self._page_size,
            prefix=prefix,
            delimiter=delimiter,
            cursor=cursor,
        )
        response = self.run_method(self._pagination.method, params)
        return self._pagination.parse_page(response, requested=self._page_size)

    def get_bucket_size(self, bucket: str, prefix: Optional[str] = None) -> BucketSize:
        """Follow every listing page of ``bucket`` and sum the object sizes."""

        objects: list[ObjectSummary] = []
        cursor: Optional[str] = None
        page_count = 0
        while True:
            page = self.list_objects(bucket, prefix, cursor)
            page_count += 1
            objects.extend(page.items)
            LOGGER.debug(
                "Listed page %d of %s: %d objects, more=%s",
                page_count,
                bucket,
                len(page.items),
                page.has_more,
            )
            if not page.has_more:
                break
            cursor = page.cursor

        return BucketSize(
            bucket=bucket,
            size=sum(item.size for item in objects),
            object_count=len(objects),
            page_count=page_count,
        )
