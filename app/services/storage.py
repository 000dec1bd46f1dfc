# app/services/storage.py
"""
Blob store backed by S3 (or any S3-compatible endpoint such as MinIO).

The store only knows about bytes and keys. Ownership and folder bookkeeping
live in ``app.services.resources``.
"""

import logging
import mimetypes
import secrets
import string
import time
from dataclasses import dataclass
from functools import lru_cache
from pathlib import PurePosixPath
from urllib.parse import quote

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from app.core.config import Settings, get_settings
from app.core.errors import PayloadTooLarge, UploadRejected

logger = logging.getLogger(__name__)

BASE_NAME_MAX_LENGTH = 50
_BASE36 = string.digits + string.ascii_lowercase


@dataclass(frozen=True)
class StoredBlob:
    storage_key: str
    url: str


def to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))


def generate_storage_key(original_name: str, owner_id: int) -> str:
    """
    Build a short, practically unique key for an upload.

    ``u<owner>_<base name, max 50 chars>_<ms timestamp><random>.<ext>``;
    the random part keeps two uploads of the same name in the same
    millisecond apart.
    """
    # browsers may send a full client path
    name = PurePosixPath(original_name.replace("\\", "/")).name or "file"
    path = PurePosixPath(name)
    extension = path.suffix
    base_name = name[: len(name) - len(extension)] if extension else name
    base_name = base_name[:BASE_NAME_MAX_LENGTH]

    unique_id = to_base36(int(time.time() * 1000)) + "".join(secrets.choice(_BASE36) for _ in range(6))
    return f"u{owner_id}_{base_name}_{unique_id}{extension}"


class BlobStore:
    def __init__(self, settings: Settings, client=None):
        self.bucket = settings.aws_s3_bucket_name
        self.region = settings.aws_region
        self.endpoint_url = settings.aws_s3_endpoint_url
        self.public_base_url = settings.public_base_url
        self.max_upload_bytes = settings.max_upload_bytes
        self.client = client or boto3.client(
            "s3",
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
            region_name=settings.aws_region,
            endpoint_url=settings.aws_s3_endpoint_url,
        )

    def url_for(self, storage_key: str) -> str:
        key = quote(storage_key)
        if self.public_base_url:
            return f"{self.public_base_url.rstrip('/')}/{key}"
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket}/{key}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"

    def check_size(self, size: int | None) -> None:
        if size is not None and size > self.max_upload_bytes:
            raise PayloadTooLarge(f"File too large. Maximum size: {self.max_upload_bytes // (1024 * 1024)}MB")

    def upload(self, data: bytes, mime_type: str, suggested_name: str, owner_id: int) -> StoredBlob:
        self.check_size(len(data))

        key = generate_storage_key(suggested_name, owner_id)
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=mime_type or "application/octet-stream",
            )
        except (BotoCoreError, ClientError) as e:
            logger.error("Upload of %s to bucket %s failed: %s", key, self.bucket, e)
            raise UploadRejected() from e

        logger.info("Stored blob %s (%d bytes)", key, len(data))
        return StoredBlob(storage_key=key, url=self.url_for(key))

    def delete(self, storage_key: str) -> bool:
        """Remove a blob; failures are logged and reported, not raised."""
        try:
            self.client.delete_object(Bucket=self.bucket, Key=storage_key)
        except (BotoCoreError, ClientError) as e:
            logger.warning("Could not delete blob %s: %s", storage_key, e)
            return False
        return True

    def ensure_bucket(self) -> None:
        try:
            self.client.head_bucket(Bucket=self.bucket)
        except ClientError:
            logger.info("Creating bucket %s", self.bucket)
            if self.region and self.region != "us-east-1":
                self.client.create_bucket(
                    Bucket=self.bucket,
                    CreateBucketConfiguration={"LocationConstraint": self.region},
                )
            else:
                self.client.create_bucket(Bucket=self.bucket)


@lru_cache
def get_blob_store() -> BlobStore:
    return BlobStore(get_settings())


def guess_mime_type(filename: str | None, declared: str | None) -> str:
    if declared and declared != "application/octet-stream":
        return declared
    guessed, _ = mimetypes.guess_type(filename or "")
    return guessed or declared or "application/octet-stream"
