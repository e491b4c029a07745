# headpress/services/storage.py
"""
Blob storage for uploaded media.

``S3ObjectStore`` targets any S3-compatible service (AWS S3, Cloudflare R2,
MinIO) through boto3. ``LocalObjectStore`` keeps files on disk for
development and tests.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from headpress.core.config import Settings

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when the object store cannot complete an operation."""


@dataclass
class StoredObject:
    body: bytes
    content_type: str


class ObjectStore(ABC):
    @abstractmethod
    def put(self, key: str, data: bytes, content_type: str) -> None:
        ...

    @abstractmethod
    def get(self, key: str) -> Optional[StoredObject]:
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        ...


class S3ObjectStore(ObjectStore):
    def __init__(self, bucket: str, endpoint_url: Optional[str] = None,
                 access_key_id: Optional[str] = None, secret_access_key: Optional[str] = None,
                 region_name: str = "auto", client=None):
        self.bucket = bucket
        self._client = client or boto3.client(
            "s3",
            endpoint_url=endpoint_url,
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
            region_name=region_name,
        )

    def put(self, key: str, data: bytes, content_type: str) -> None:
        try:
            self._client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Object store upload failed for {key}: {e}")
            raise StorageError(str(e)) from e

    def get(self, key: str) -> Optional[StoredObject]:
        try:
            response = self._client.get_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("NoSuchKey", "404"):
                return None
            raise StorageError(str(e)) from e
        except BotoCoreError as e:
            raise StorageError(str(e)) from e
        return StoredObject(
            body=response["Body"].read(),
            content_type=response.get("ContentType") or "application/octet-stream",
        )

    def delete(self, key: str) -> None:
        try:
            self._client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Object store delete failed for {key}: {e}")
            raise StorageError(str(e)) from e


class LocalObjectStore(ObjectStore):
    """Stores each object as a file plus a `.type` sidecar holding its content type."""

    def __init__(self, root: str):
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if self.root.resolve() not in path.parents:
            raise StorageError(f"Invalid object key: {key}")
        return path

    def put(self, key: str, data: bytes, content_type: str) -> None:
        path = self._path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
            path.with_name(path.name + ".type").write_text(content_type)
        except OSError as e:
            raise StorageError(str(e)) from e

    def get(self, key: str) -> Optional[StoredObject]:
        path = self._path(key)
        if not path.is_file():
            return None
        type_file = path.with_name(path.name + ".type")
        content_type = type_file.read_text() if type_file.exists() else "application/octet-stream"
        return StoredObject(body=path.read_bytes(), content_type=content_type)

    def delete(self, key: str) -> None:
        path = self._path(key)
        for target in (path, path.with_name(path.name + ".type")):
            try:
                target.unlink()
            except FileNotFoundError:
                pass
            except OSError as e:
                raise StorageError(str(e)) from e


def build_object_store(settings: Settings) -> ObjectStore:
    if settings.STORAGE_BACKEND == "s3":
        return S3ObjectStore(
            bucket=settings.MEDIA_BUCKET,
            endpoint_url=settings.S3_ENDPOINT_URL,
            access_key_id=settings.S3_ACCESS_KEY_ID,
            secret_access_key=settings.S3_SECRET_ACCESS_KEY,
            region_name=settings.S3_REGION,
        )
    return LocalObjectStore(settings.MEDIA_LOCAL_DIR)
