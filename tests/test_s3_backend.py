"""Tests for the S3 backend against a stub boto3 client."""

from __future__ import annotations

import tempfile
import unittest
from datetime import datetime, timezone
from pathlib import Path
from types import SimpleNamespace

from botocore.exceptions import ClientError

from s3lens.backend import (
    BackendError,
    PreviewBinary,
    PreviewError,
    PreviewText,
    PreviewTooLarge,
)
from s3lens.backend.s3 import S3Backend, parse_s3_uri


def _client_error(code: str, message: str = "") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message}}, "Operation")


class FakeBody:
    def __init__(self, data: bytes) -> None:
        self.data = data

    def read(self) -> bytes:
        return self.data

    def iter_chunks(self, chunk_size: int = 1024):
        for offset in range(0, len(self.data), 3):
            yield self.data[offset : offset + 3]


class FakeS3Client:
    def __init__(self, pages: list[dict] | None = None, objects: dict[str, bytes] | None = None) -> None:
        self.pages = pages or []
        self.objects = objects or {}
        self.paginate_calls: list[dict] = []
        self.list_error: Exception | None = None

    def get_paginator(self, name: str):
        assert name == "list_objects_v2"

        def paginate(**kwargs):
            self.paginate_calls.append(kwargs)
            if self.list_error is not None:
                raise self.list_error
            return iter(self.pages)

        return SimpleNamespace(paginate=paginate)

    def head_object(self, Bucket: str, Key: str) -> dict:
        if Key not in self.objects:
            raise _client_error("404", "Not Found")
        return {"ContentLength": len(self.objects[Key])}

    def get_object(self, Bucket: str, Key: str) -> dict:
        if Key not in self.objects:
            raise _client_error("NoSuchKey", "The specified key does not exist.")
        data = self.objects[Key]
        return {"Body": FakeBody(data), "ContentLength": len(data), "ContentType": "application/octet-stream"}


class ParseS3UriTests(unittest.TestCase):
    def test_bucket_and_prefix(self) -> None:
        self.assertEqual(parse_s3_uri("s3://bucket/a/b/"), ("bucket", "a/b"))
        self.assertEqual(parse_s3_uri("s3://bucket"), ("bucket", ""))

    def test_invalid_uris(self) -> None:
        with self.assertRaises(BackendError):
            parse_s3_uri("http://bucket")
        with self.assertRaises(BackendError):
            parse_s3_uri("s3:///prefix")


class S3BackendTests(unittest.TestCase):
    def test_list_merges_pages_and_strips_prefix(self) -> None:
        stamp = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
        client = FakeS3Client(
            pages=[
                {
                    "CommonPrefixes": [{"Prefix": "logs/2024/"}],
                    "Contents": [
                        {"Key": "logs/", "Size": 0},
                        {"Key": "logs/z.txt", "Size": 10, "LastModified": stamp},
                    ],
                },
                {
                    "CommonPrefixes": [{"Prefix": "logs/2023/"}, {"Prefix": "logs/2024/"}],
                    "Contents": [{"Key": "logs/a.txt", "Size": 3}],
                },
            ]
        )
        backend = S3Backend("bucket", client=client)

        result = backend.list("logs")

        self.assertEqual(client.paginate_calls, [{"Bucket": "bucket", "Prefix": "logs/", "Delimiter": "/"}])
        self.assertEqual([entry.name for entry in result.entries], ["2023", "2024", "a.txt", "z.txt"])
        self.assertEqual(result.entries[3].modified, "2024-05-01 12:30:00")
        self.assertEqual(result.prefix, "logs")

    def test_list_root_uses_empty_prefix(self) -> None:
        client = FakeS3Client(pages=[{"Contents": [{"Key": "top.txt", "Size": 1}]}])

        result = S3Backend("bucket", client=client).list("")

        self.assertEqual(client.paginate_calls[0]["Prefix"], "")
        self.assertEqual([entry.name for entry in result.entries], ["top.txt"])

    def test_list_error_is_wrapped(self) -> None:
        client = FakeS3Client()
        client.list_error = _client_error("AccessDenied", "Access Denied")

        with self.assertRaises(BackendError) as ctx:
            S3Backend("bucket", client=client).list("")

        self.assertIn("AccessDenied: Access Denied", str(ctx.exception))

    def test_preview_variants(self) -> None:
        client = FakeS3Client(objects={"a.txt": b"hi\n", "b.bin": b"\xff\x00", "big.txt": b"x" * 50})
        backend = S3Backend("bucket", client=client)

        self.assertEqual(backend.get_preview("a.txt", 10), PreviewText("hi\n"))
        self.assertEqual(backend.get_preview("b.bin", 10), PreviewBinary(size=2, mime="application/octet-stream"))
        self.assertEqual(backend.get_preview("big.txt", 10), PreviewTooLarge(size=50))
        missing = backend.get_preview("nope", 10)
        self.assertIsInstance(missing, PreviewError)
        self.assertIn("404", missing.message)

    def test_download_streams_chunks_with_progress(self) -> None:
        client = FakeS3Client(objects={"logs/a.txt": b"abcdefgh"})
        backend = S3Backend("bucket", client=client)
        calls: list[tuple[int, int | None]] = []

        with tempfile.TemporaryDirectory() as tmp:
            target = Path(tmp) / "a.txt"
            backend.download("logs/a.txt", target, lambda done, total: calls.append((done, total)))
            data = target.read_bytes()

        self.assertEqual(data, b"abcdefgh")
        self.assertEqual(calls, [(3, 8), (6, 8), (8, 8)])

    def test_download_missing_key_raises(self) -> None:
        backend = S3Backend("bucket", client=FakeS3Client())

        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(BackendError):
                backend.download("nope", Path(tmp) / "nope")

    def test_paths_and_uris(self) -> None:
        backend = S3Backend("bucket", client=FakeS3Client())

        self.assertEqual(backend.display_path("logs/2024"), "s3://bucket/logs/2024")
        self.assertEqual(backend.display_path(""), "s3://bucket/")
        self.assertEqual(backend.parent("logs/2024"), "logs")
        self.assertEqual(backend.parent("logs"), "")
        self.assertIsNone(backend.parent(""))
        self.assertEqual(backend.uri_to_prefix("s3://bucket/logs"), "logs")
        self.assertIsNone(backend.uri_to_prefix("s3://other/logs"))
        self.assertIsNone(backend.uri_to_prefix("local:///tmp"))


if __name__ == "__main__":
    unittest.main()
