from __future__ import annotations
"""Session facade tying settings, the client and the throttled service together."""

from typing import Any, Callable

from .models import BucketDescriptor, BucketSize, ObjectPage
from .scheduler import DelayScheduler
from .services import ThrottledS3Service, build_client
from .settings import ThrottleSettings


class NotConnectedError(RuntimeError):
    """Raised when an S3 operation is attempted before connecting."""


class S3ThrottleController:
    """Coordinates a connection with the :class:`ThrottledS3Service`.

    One :class:`DelayScheduler` is shared by every connection the controller
    opens, so reconnecting does not reset the request pacing.
    """

    def __init__(
        self,
        settings: ThrottleSettings | None = None,
        *,
        client_factory: Callable[..., object] | None = None,
        scheduler: DelayScheduler | None = None,
        sleep: Callable[[float], None] | None = None,
    ):
        self._settings = settings or ThrottleSettings()
        self._client_factory = client_factory
        self._sleep = sleep
        self._scheduler = scheduler or DelayScheduler(
            self._settings.base_increment_ms,
            self._settings.initial_delay_ms,
            sleep=sleep,
        )
        self._service: ThrottledS3Service | None = None
        self._region = ""

    def connect(
        self,
        *,
        endpoint_url: str,
        region: str,
        access_key: str,
        secret_key: str,
    ) -> ThrottledS3Service:
        client = build_client(
            endpoint_url,
            region,
            access_key,
            secret_key,
            client_factory=self._client_factory,
        )
        settings = self._settings
        self._service = ThrottledS3Service(
            client,
            scheduler=self._scheduler,
            pagination=settings.pagination,
            page_size=settings.page_size,
            max_retries=settings.max_retries,
            retry_backoff_ms=settings.retry_backoff_ms,
            bucket_prefix=settings.bucket_prefix,
            sleep=self._sleep,
        )
        self._region = region
        return self._service

    def create_bucket(self, name: str | None = None, *, region: str | None = None) -> BucketDescriptor:
        service = self._require_connection()
        return service.create_bucket(self._region if region is None else region, name)

    def list_objects(
        self,
        bucket_name: str,
        *,
        prefix: str | None = None,
        cursor: str | None = None,
        delimiter: str | None = None,
    ) -> ObjectPage:
        service = self._require_connection()
        return service.list_objects(bucket_name, prefix, cursor, delimiter=delimiter)

    def get_bucket_size(self, bucket_name: str, *, prefix: str | None = None) -> BucketSize:
        service = self._require_connection()
        return service.get_bucket_size(bucket_name, prefix)

    def run_method(self, method: str, params: dict[str, Any] | None = None) -> Any:
        service = self._require_connection()
        return service.run_method(method, params)

    def _require_connection(self) -> ThrottledS3Service:
        if self._service is None:
            raise NotConnectedError("Not connected to S3")
        return self._service
