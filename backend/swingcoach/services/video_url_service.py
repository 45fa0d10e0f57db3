"""
Temporary display URLs for uploaded swing videos

With S3 configured the upload is copied to the bucket through an aioboto3
session and served through a presigned URL signed by the boto3 client.
Without S3 a TTL-bounded in-process cache keeps the bytes and the API
serves them from /videos/{url_id}.
"""

import threading
import time
from collections import OrderedDict
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

import aioboto3
import boto3
from botocore.exceptions import BotoCoreError, ClientError

from swingcoach.config.base import settings
from swingcoach.models.upload import VideoUpload
from swingcoach.utils.logger import get_logger

logger = get_logger(__name__)

LOCAL_URL_PREFIX = "/videos/"


class VideoUrlManager:
    """Process-local registry of temporary display URLs"""

    def __init__(self, s3_client: Any = None, bucket: Optional[str] = None,
                 ttl_seconds: int = 3600, max_cached: int = 20,
                 s3_session: Any = None, endpoint_url: Optional[str] = None):
        # Sync client only signs URLs; transfers go through the async session
        self.client = s3_client
        self.session = s3_session
        self.endpoint_url = endpoint_url
        self.bucket = bucket
        self.ttl_seconds = ttl_seconds
        self.max_cached = max_cached
        self._urls: Dict[str, Dict[str, Any]] = {}
        self._cache: "OrderedDict[str, Dict[str, Any]]" = OrderedDict()
        self._lock = threading.RLock()

    @property
    def s3_enabled(self) -> bool:
        return self.client is not None and self.session is not None and bool(self.bucket)

    def _expire(self) -> None:
        """Drop entries past their TTL (called with lock held)"""
        now = time.time()
        expired = [url_id for url_id, entry in self._urls.items()
                   if now - entry["created"] > self.ttl_seconds]
        for url_id in expired:
            self._urls.pop(url_id, None)
            self._cache.pop(url_id, None)
            logger.info(f"Temporary video URL expired: {url_id}")

    async def create_temporary_url(self, upload: VideoUpload, url_id: Optional[str] = None) -> Optional[str]:
        """
        Register a display URL for an uploaded video

        Args:
            upload: The uploaded swing
            url_id: Identifier used for later lookup and revocation

        Returns:
            The display URL, or None when the copy could not be stored
        """
        url_id = url_id or f"temp_{int(time.time() * 1000)}"

        if self.s3_enabled:
            key = f"temp/{datetime.now().strftime('%Y/%m/%d')}/{url_id}/{upload.filename}"
            try:
                async with self.session.client("s3", endpoint_url=self.endpoint_url) as s3:
                    await s3.put_object(
                        Bucket=self.bucket,
                        Key=key,
                        Body=upload.content,
                        ContentType=upload.mime_type,
                    )
                url = self.client.generate_presigned_url(
                    "get_object",
                    Params={"Bucket": self.bucket, "Key": key},
                    ExpiresIn=self.ttl_seconds,
                )
            except (BotoCoreError, ClientError) as e:
                logger.error(f"Failed to create S3 display URL for {upload.filename}: {e}")
                return None
            entry = {"url": url, "s3_key": key, "created": time.time()}
        else:
            url = f"{LOCAL_URL_PREFIX}{url_id}"
            entry = {"url": url, "s3_key": None, "created": time.time()}

        with self._lock:
            self._expire()
            if not self.s3_enabled:
                while len(self._cache) >= self.max_cached:
                    oldest_id, oldest = self._cache.popitem(last=False)
                    self._urls.pop(oldest_id, None)
                    logger.warning(f"Evicted cached video {oldest_id} ({oldest['size'] / (1024 * 1024):.1f}MB)")
                self._cache[url_id] = {
                    "content": upload.content,
                    "mime_type": upload.mime_type,
                    "size": upload.size,
                }
            self._urls[url_id] = entry

        logger.info(f"Using temporary video URL for display: {url_id}")
        return url

    def get_temporary_url(self, url_id: str) -> Optional[str]:
        with self._lock:
            self._expire()
            entry = self._urls.get(url_id)
            return entry["url"] if entry else None

    def get_cached_video(self, url_id: str) -> Optional[Tuple[bytes, str]]:
        """Bytes and mime type for a locally served display URL"""
        with self._lock:
            self._expire()
            entry = self._cache.get(url_id)
            if entry is None:
                return None
            self._cache.move_to_end(url_id)
            return entry["content"], entry["mime_type"]

    def is_temporary_url(self, url: Optional[str]) -> bool:
        if not url:
            return False
        with self._lock:
            return any(entry["url"] == url for entry in self._urls.values())

    async def _delete_s3_copy(self, entry: Dict[str, Any]) -> None:
        if not entry.get("s3_key") or not self.s3_enabled:
            return
        try:
            async with self.session.client("s3", endpoint_url=self.endpoint_url) as s3:
                await s3.delete_object(Bucket=self.bucket, Key=entry["s3_key"])
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to delete S3 display copy {entry['s3_key']}: {e}")

    async def revoke_temporary_url(self, url_id: str) -> bool:
        with self._lock:
            entry = self._urls.pop(url_id, None)
            self._cache.pop(url_id, None)
        if entry is None:
            return False
        await self._delete_s3_copy(entry)
        logger.info(f"Temporary video URL revoked: {url_id}")
        return True

    async def revoke_all_temporary_urls(self) -> int:
        with self._lock:
            entries = list(self._urls.values())
            self._urls.clear()
            self._cache.clear()
        for entry in entries:
            await self._delete_s3_copy(entry)
        logger.info(f"All temporary video URLs revoked ({len(entries)})")
        return len(entries)

    def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            self._expire()
            return {
                "storage": "s3" if self.s3_enabled else "memory",
                "active_urls": len(self._urls),
                "cached_videos": len(self._cache),
                "cached_mb": sum(e["size"] for e in self._cache.values()) / (1024 * 1024),
                "ttl_seconds": self.ttl_seconds,
            }


def create_video_url_manager() -> VideoUrlManager:
    if not settings.S3_ENABLED:
        logger.warning("S3 credentials not configured - display copies stay in memory")
        return VideoUrlManager(ttl_seconds=settings.TEMP_URL_EXPIRES)

    client = boto3.client(
        "s3",
        aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
        aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
        region_name=settings.AWS_REGION,
        endpoint_url=settings.AWS_ENDPOINT_URL,
    )
    session = aioboto3.Session(
        aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
        aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
        region_name=settings.AWS_REGION,
    )
    logger.info(f"S3 display URLs enabled for bucket: {settings.S3_BUCKET}")
    return VideoUrlManager(
        client,
        settings.S3_BUCKET,
        ttl_seconds=settings.TEMP_URL_EXPIRES,
        s3_session=session,
        endpoint_url=settings.AWS_ENDPOINT_URL,
    )


video_url_manager = create_video_url_manager()
