"""
Cloudinary storage for payment proof images.
Deletion goes through the cloudinary SDK's uploader.destroy.
"""
import logging
import re
import time
from urllib.parse import unquote, urlparse

import cloudinary
import cloudinary.exceptions
import cloudinary.uploader

from wifidash.core.config import settings
from wifidash.storage.base import BlobStorage, StorageError
from wifidash.utils.metrics import storage_request_duration_seconds, storage_requests_total

logger = logging.getLogger(__name__)

# /<cloud>/image/upload/[<transformations>/][v<digits>/]<public_id>.<ext>
_DELIVERY_PATH = re.compile(r"^/[^/]+/(?:image|video|raw)/(?:upload|private|authenticated)/(?P<rest>.+)$")
_VERSION = re.compile(r"^v\d+$")
_TRANSFORMATION = re.compile(r"^(?:[a-z]|ar|bo|co|dl|dn|dpr|du|eo|fl|fn|fps|ki|pg|so|sp|vc|vs)_")


def _is_transformation(segment: str) -> bool:
    return all(_TRANSFORMATION.match(part) for part in segment.split(","))


def extract_public_id(url: str) -> str:
    parsed = urlparse(url or "")
    if parsed.scheme not in ("http", "https") or not parsed.netloc.endswith("cloudinary.com"):
        raise StorageError(f"not a Cloudinary URL: {url!r}")
    match = _DELIVERY_PATH.match(parsed.path)
    if not match:
        raise StorageError(f"unrecognised Cloudinary path: {parsed.path!r}")
    segments = [s for s in match.group("rest").split("/") if s]
    # optional transformation segments come before the optional version segment
    for i, seg in enumerate(segments):
        if _VERSION.match(seg):
            segments = segments[i + 1:]
            break
    else:
        while segments and _is_transformation(segments[0]):
            segments = segments[1:]
    if not segments:
        raise StorageError(f"no public id in URL: {url!r}")
    public_id = unquote("/".join(segments))
    if "." in segments[-1]:
        public_id = public_id.rsplit(".", 1)[0]
    return public_id


class CloudinaryStorage(BlobStorage):
    def __init__(self, cloud_name: str, api_key: str, api_secret: str, timeout: float = 10.0) -> None:
        self.timeout = timeout
        cloudinary.config(cloud_name=cloud_name, api_key=api_key, api_secret=api_secret, secure=True)

    def extract_id(self, url: str) -> str:
        return extract_public_id(url)

    def delete(self, blob_id: str) -> None:
        start = time.time()
        try:
            response = cloudinary.uploader.destroy(
                blob_id, resource_type="image", invalidate=True, timeout=self.timeout
            )
        except cloudinary.exceptions.Error as e:
            storage_requests_total.labels(operation="destroy", status="error").inc()
            raise StorageError(f"destroy {blob_id} failed: {e}") from e
        finally:
            storage_request_duration_seconds.labels(operation="destroy").observe(time.time() - start)
        result = (response or {}).get("result")
        # "not found" means the blob is already gone, which is the goal
        if result not in ("ok", "not found"):
            storage_requests_total.labels(operation="destroy", status="error").inc()
            raise StorageError(f"destroy {blob_id} returned {result!r}")
        storage_requests_total.labels(operation="destroy", status="success").inc()
        logger.info("blob_deleted", extra={"blob_id": blob_id})


def build_storage() -> CloudinaryStorage:
    return CloudinaryStorage(
        cloud_name=settings.cloudinary_cloud_name,
        api_key=settings.cloudinary_api_key,
        api_secret=settings.cloudinary_api_secret,
        timeout=settings.http_client_timeout,
    )
