"""S3 storage for uploaded HR exports, implementing IFileStore.

Exports live under an optional key prefix so one bucket can serve several
planning cycles. Paths passed in and returned are relative to that prefix.
"""

from __future__ import annotations

import boto3
from botocore.exceptions import ClientError

from meritflow.core.exceptions import StorageError

EXPORT_CONTENT_TYPES = {
    ".csv": "text/csv",
    ".txt": "text/plain",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ".xlsm": "application/vnd.ms-excel.sheet.macroEnabled.12",
}


def content_type_for(path: str) -> str:
    dot = path.rfind(".")
    ext = path[dot:].lower() if dot != -1 else ""
    return EXPORT_CONTENT_TYPES.get(ext, "application/octet-stream")


class S3FileStore:
    """IFileStore over a single bucket."""

    def __init__(self, bucket: str, region: str = "us-east-1",
                 endpoint_url: str | None = None, key_prefix: str = "") -> None:
        self._bucket = bucket
        self._prefix = key_prefix.strip("/") + "/" if key_prefix.strip("/") else ""
        client_args: dict = {"region_name": region}
        if endpoint_url:
            client_args["endpoint_url"] = endpoint_url
        self._client = boto3.client("s3", **client_args)

    def _key(self, path: str) -> str:
        return self._prefix + path.lstrip("/")

    def read(self, path: str) -> bytes:
        try:
            return self._client.get_object(Bucket=self._bucket, Key=self._key(path))["Body"].read()
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code")
            if code in ("NoSuchKey", "404"):
                raise StorageError(f"Export {path!r} not found in s3://{self._bucket}") from exc
            raise StorageError(f"Could not read export {path!r}: {exc}") from exc

    def write(self, path: str, data: bytes, content_type: str | None = None) -> str:
        """Store an export; the content type follows the file extension unless given."""
        try:
            self._client.put_object(
                Bucket=self._bucket,
                Key=self._key(path),
                Body=data,
                ContentType=content_type or content_type_for(path),
            )
        except ClientError as exc:
            raise StorageError(f"Could not store export {path!r}: {exc}") from exc
        return path

    def move(self, src: str, dst: str) -> None:
        """Copy then delete; used to archive exports after a cycle closes."""
        try:
            self._client.copy_object(
                Bucket=self._bucket,
                CopySource={"Bucket": self._bucket, "Key": self._key(src)},
                Key=self._key(dst),
            )
            self._client.delete_object(Bucket=self._bucket, Key=self._key(src))
        except ClientError as exc:
            raise StorageError(f"Could not move export {src!r} to {dst!r}: {exc}") from exc

    def list_files(self, prefix: str) -> list[str]:
        """Sorted export paths under ``prefix``, folder markers excluded."""
        paths: list[str] = []
        try:
            pages = self._client.get_paginator("list_objects_v2").paginate(
                Bucket=self._bucket, Prefix=self._key(prefix),
            )
            for page in pages:
                for obj in page.get("Contents", []):
                    if not obj["Key"].endswith("/"):
                        paths.append(obj["Key"][len(self._prefix):])
        except ClientError as exc:
            raise StorageError(f"Could not list exports under {prefix!r}: {exc}") from exc
        return sorted(paths)
