"""
Document Storage
Private application documents (ID cards, registrations, insurance) kept in
Cloudflare R2 and read back through short-lived presigned URLs
"""

import logging
import os
import time
from typing import Optional

import boto3
from botocore.config import Config

logger = logging.getLogger(__name__)

# Presigned URL expiration time (24 hours)
PRESIGNED_URL_EXPIRATION = 24 * 60 * 60

MAX_DOCUMENT_SIZE = 10 * 1024 * 1024  # 10MB
ALLOWED_DOCUMENT_EXTENSIONS = (".pdf", ".jpg", ".jpeg", ".png")


def build_document_key(owner_id: str, document_type: str, filename: str) -> str:
    """Object key for an application document, e.g. applications/usr_x/identity-document-1718000000.pdf"""
    ext = os.path.splitext(filename)[1].lower()
    doc_type = document_type.strip().lower().replace(" ", "-")
    return f"applications/{owner_id}/{doc_type}-{int(time.time())}{ext}"


def validate_document(filename: str, size: int) -> None:
    """
    Raises:
        ValueError: If the document is too large or not a PDF/JPG/PNG
    """
    if size > MAX_DOCUMENT_SIZE:
        raise ValueError(f"file size {size} exceeds maximum allowed size of {MAX_DOCUMENT_SIZE} bytes")
    ext = os.path.splitext(filename or "")[1].lower()
    if ext not in ALLOWED_DOCUMENT_EXTENSIONS:
        raise ValueError(f"file type {ext or 'unknown'} not allowed. Allowed types: PDF, JPG, PNG")


class DocumentStorage:
    """R2 (S3-compatible) storage for private documents"""

    def __init__(
        self,
        account_id: Optional[str],
        access_key_id: Optional[str],
        secret_access_key: Optional[str],
        bucket_name: str,
    ):
        self.account_id = account_id
        self.access_key_id = access_key_id
        self.secret_access_key = secret_access_key
        self.bucket_name = bucket_name

    @property
    def url_prefix(self) -> str:
        return f"r2://{self.bucket_name}/"

    def get_r2_client(self):
        """Create and return an R2 client."""
        if not (self.account_id and self.access_key_id and self.secret_access_key):
            raise RuntimeError("storage service not available")
        return boto3.client(
            "s3",
            endpoint_url=f"https://{self.account_id}.r2.cloudflarestorage.com",
            aws_access_key_id=self.access_key_id,
            aws_secret_access_key=self.secret_access_key,
            config=Config(signature_version="s3v4"),
        )

    def upload(self, key: str, content: bytes, content_type: Optional[str]) -> str:
        """Upload bytes and return the stored document URL (r2://bucket/key)"""
        r2 = self.get_r2_client()
        try:
            r2.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=content,
                ContentType=content_type or "application/octet-stream",
            )
            logger.info(f"✅ Uploaded document to R2: {key}")
        except Exception as e:
            logger.error(f"❌ Failed to upload document {key}: {e}")
            raise
        return f"{self.url_prefix}{key}"

    def generate_presigned_url(self, document_url: str, expiration: int = PRESIGNED_URL_EXPIRATION) -> str:
        """Generate a presigned URL for a stored document URL or bare key"""
        key = document_url[len(self.url_prefix):] if document_url.startswith(self.url_prefix) else document_url
        r2 = self.get_r2_client()
        try:
            url = r2.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket_name, "Key": key},
                ExpiresIn=expiration,
            )
            logger.info(f"✅ Generated presigned URL for key: {key}")
            return url
        except Exception as e:
            logger.error(f"❌ Failed to generate presigned URL for key {key}: {e}")
            raise


class NullDocumentStorage(DocumentStorage):
    """Storage used when R2 credentials are not configured"""

    def __init__(self):
        super().__init__(None, None, None, bucket_name="")

    def upload(self, key: str, content: bytes, content_type: Optional[str]) -> str:
        raise RuntimeError("storage service not available")

    def generate_presigned_url(self, document_url: str, expiration: int = PRESIGNED_URL_EXPIRATION) -> str:
        raise RuntimeError("storage service not available")
