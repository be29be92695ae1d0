"""
S3 Blob Store - Client Init • Put/Get/Delete Bytes • Presigned Download
=======================================================================

Purpose
-------
Stores the bytes of uploaded case files in Amazon S3:
- Initialize an S3 client with Signature V4
- Upload bytes with explicit ContentType/ContentDisposition headers
- Read bytes back for text extraction
- Generate presigned URLs for downloads
- Delete objects when a file record is removed

Configuration (from `casedesk.database.config.config.settings`)
---------------------------------------------------------------
- AWS_ACCESS_KEY : Access key ID (omit to use the default credential chain)
- AWS_SECRET_KEY : Secret access key
- REGION         : AWS region (e.g., "eu-central-1")
- BUCKET_NAME    : Target S3 bucket

Security Notes
--------------
- Credentials are never logged.
- Presigned URLs grant temporary access; keep expirations short.
"""

import logging
import re
import uuid
from urllib.parse import quote

import boto3
import botocore.config

from casedesk.database.config.config import settings

logger = logging.getLogger(__name__)


def get_client():
    """
    Initialize and return a low-level S3 client configured for Signature V4.

    Returns:
        botocore.client.S3: An S3 client ready for bucket and object operations.
    """
    return boto3.client(
        "s3",
        aws_access_key_id=settings.AWS_ACCESS_KEY,
        aws_secret_access_key=settings.AWS_SECRET_KEY,
        region_name=settings.REGION,
        config=botocore.config.Config(signature_version="s3v4"),
    )


def build_storage_key(case_id, filename: str) -> str:
    """Object key for a new upload: ``cases/<case>/<random hex>-<name>``."""
    safe_name = (filename or "file").replace("/", "_").replace("\\", "_")
    prefix = f"cases/{case_id}" if case_id else "files"
    return f"{prefix}/{uuid.uuid4().hex}-{safe_name}"


def content_disposition(filename: str) -> str:
    """
    ``attachment`` disposition header for a user-supplied filename.

    Header values must stay latin-1 encodable, so the real name travels
    percent-encoded in ``filename*`` (RFC 6266 / RFC 5987) and ``filename``
    carries a printable-ASCII fallback without quotes or backslashes.
    """
    name = filename or "file"
    fallback = re.sub(r'[^\x20-\x7e]|["\\]', "_", name).strip() or "file"
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(name, safe='')}"


class BlobStore:
    """
    Thin wrapper around one S3 bucket.

    The client is created lazily so the application can start without AWS
    credentials; the first storage call builds it.
    """

    def __init__(self, bucket: str | None = None, s3_client=None):
        self.bucket = bucket or settings.BUCKET_NAME
        self._client = s3_client

    @property
    def client(self):
        if self._client is None:
            self._client = get_client()
        return self._client

    def put_bytes(self, key: str, data: bytes, content_type: str, filename: str) -> str:
        """
        Upload ``data`` under ``key``.

        Args:
            key (str): Object key (destination path/name in the bucket).
            data (bytes): File content.
            content_type (str): Stored as the object's ContentType.
            filename (str): Used in the ContentDisposition header.

        Returns:
            str: The key, as the storage handle to persist.
        """
        self.client.put_object(
            Bucket=self.bucket,
            Key=key,
            Body=data,
            ContentType=content_type or "application/octet-stream",
            ContentDisposition=content_disposition(filename),
        )
        logger.info("Stored %d bytes at s3://%s/%s", len(data), self.bucket, key)
        return key

    def get_bytes(self, key: str) -> bytes:
        response = self.client.get_object(Bucket=self.bucket, Key=key)
        return response["Body"].read()

    def presigned_url(self, key: str, expires: int = 3600) -> str:
        """
        Generate a presigned URL for downloading an object.

        Notes:
            - Requires `s3:GetObject` permission.
            - Share presigned URLs over TLS only; they grant access until expiry.
        """
        return self.client.generate_presigned_url(
            "get_object",
            Params={"Bucket": self.bucket, "Key": key},
            ExpiresIn=expires,
        )

    def delete(self, key: str) -> None:
        self.client.delete_object(Bucket=self.bucket, Key=key)
        logger.info("Deleted s3://%s/%s", self.bucket, key)
