"""S3 backend built on boto3.

Prefixes are object-key prefixes without the trailing ``/``; listing uses the
``/`` delimiter so common prefixes show up as directories.
"""

from __future__ import annotations

import logging
from pathlib import Path

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from . import (
    Backend,
    BackendError,
    Entry,
    ListResult,
    PreviewBinary,
    PreviewContent,
    PreviewError,
    PreviewText,
    PreviewTooLarge,
    ProgressCallback,
    sort_entries,
)

logger = logging.getLogger(__name__)

CHUNK_SIZE = 256 * 1024
URI_SCHEME = "s3://"


def parse_s3_uri(uri: str) -> tuple[str, str]:
    """Split ``s3://bucket/prefix`` into ``(bucket, prefix)``."""
    if not uri.startswith(URI_SCHEME):
        raise BackendError(f"URI must start with s3://: {uri}")
    bucket, _sep, prefix = uri[len(URI_SCHEME):].partition("/")
    if not bucket:
        raise BackendError(f"URI has no bucket: {uri}")
    return bucket, prefix.strip("/")


def _error_text(exc: Exception) -> str:
    if isinstance(exc, ClientError):
        error = exc.response.get("Error", {})
        code = error.get("Code", "Unknown")
        message = error.get("Message")
        return f"{code}: {message}" if message else str(code)
    return str(exc)


class S3Backend(Backend):
    """Browse one bucket through the S3 API."""

    def __init__(self, bucket: str, client=None) -> None:
        self.bucket = bucket
        if client is None:
            try:
                client = boto3.client("s3")
            except BotoCoreError as exc:
                raise BackendError(f"Cannot create S3 client: {exc}") from exc
        self.client = client

    def list(self, prefix: str) -> ListResult:
        prefix = prefix.strip("/")
        key_prefix = f"{prefix}/" if prefix else ""
        logger.debug("listing s3://%s/%s", self.bucket, key_prefix)
        entries: list[Entry] = []
        seen_dirs: set[str] = set()
        try:
            paginator = self.client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self.bucket, Prefix=key_prefix, Delimiter="/"):
                for common in page.get("CommonPrefixes", []):
                    name = common["Prefix"][len(key_prefix):].rstrip("/")
                    if name and name not in seen_dirs:
                        seen_dirs.add(name)
                        entries.append(Entry(name=name, is_dir=True))
                for obj in page.get("Contents", []):
                    key = obj["Key"]
                    if key == key_prefix:
                        continue
                    name = key[len(key_prefix):]
                    if not name or name.endswith("/"):
                        continue
                    modified = obj.get("LastModified")
                    entries.append(
                        Entry(
                            name=name,
                            is_dir=False,
                            size=obj.get("Size"),
                            modified=modified.strftime("%Y-%m-%d %H:%M:%S") if modified else None,
                        )
                    )
        except (ClientError, BotoCoreError) as exc:
            raise BackendError(f"Failed to list S3 objects: {_error_text(exc)}") from exc
        return ListResult(entries=sort_entries(entries), prefix=prefix)

    def get_preview(self, path: str, max_size: int) -> PreviewContent:
        key = path.lstrip("/")
        try:
            head = self.client.head_object(Bucket=self.bucket, Key=key)
        except (ClientError, BotoCoreError) as exc:
            return PreviewError(f"Failed to access object: {_error_text(exc)}")
        size = int(head.get("ContentLength", 0))
        if size > max_size:
            return PreviewTooLarge(size=size)
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=key)
            body = response["Body"].read()
        except (ClientError, BotoCoreError) as exc:
            return PreviewError(f"Failed to get S3 object: {_error_text(exc)}")
        try:
            return PreviewText(body.decode("utf-8"))
        except UnicodeDecodeError:
            return PreviewBinary(size=size, mime=response.get("ContentType"))

    def download(
        self,
        path: str,
        destination: Path,
        progress: ProgressCallback | None = None,
    ) -> None:
        key = path.lstrip("/")
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=key)
            total = response.get("ContentLength")
            downloaded = 0
            with Path(destination).open("wb") as handle:
                for chunk in response["Body"].iter_chunks(CHUNK_SIZE):
                    handle.write(chunk)
                    downloaded += len(chunk)
                    if progress is not None:
                        progress(downloaded, total)
        except (ClientError, BotoCoreError) as exc:
            raise BackendError(f"Failed to download s3://{self.bucket}/{key}: {_error_text(exc)}") from exc
        except OSError as exc:
            raise BackendError(f"Failed to write {destination}: {exc.strerror or exc}") from exc

    def display_path(self, prefix: str) -> str:
        return f"{URI_SCHEME}{self.bucket}/{prefix.strip('/')}"

    def parent(self, prefix: str) -> str | None:
        prefix = prefix.strip("/")
        if not prefix:
            return None
        head, _sep, _tail = prefix.rpartition("/")
        return head

    def uri_to_prefix(self, uri: str) -> str | None:
        try:
            bucket, prefix = parse_s3_uri(uri)
        except BackendError:
            return None
        if bucket != self.bucket:
            return None
        return prefix
