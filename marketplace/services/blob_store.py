# marketplace/services/blob_store.py
import os
import uuid

from marketplace.utils.settings import BLOB_STORAGE_DIR, BLOB_BASE_URL
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)

SLIP_PREFIX = "paymentSlipImage/slips"
PRODUCT_IMAGE_PREFIX = "productImages"
PROFILE_IMAGE_PREFIX = "profileImages"
PROMPTPAY_QR_PREFIX = "promptPayQR"


class BlobStore:
    """
    Stores uploaded binaries on the local filesystem and hands back a URL the
    clients can fetch them from (served by the app under /blobs).
    """

    def __init__(self, root: str | None = None, base_url: str | None = None):
        self.root = os.path.abspath(root or BLOB_STORAGE_DIR)
        self.base_url = (base_url or BLOB_BASE_URL).rstrip("/")

    def _path(self, key: str) -> str:
        path = os.path.abspath(os.path.join(self.root, key))
        if not path.startswith(self.root + os.sep):
            raise ValueError(f"Invalid blob key: {key}")
        return path

    def url_for(self, key: str) -> str:
        return f"{self.base_url}/{key}"

    def put(self, key: str, data: bytes) -> str:
        """Write ``data`` under ``key`` and return its retrievable URL.

        Raises OSError when the write fails; nothing is left behind in that case.
        """
        path = self._path(key)
        os.makedirs(os.path.dirname(path), exist_ok=True)

        tmp_path = f"{path}.part"
        try:
            with open(tmp_path, "wb") as fh:
                fh.write(data)
            os.replace(tmp_path, path)
        except OSError:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

        logger.info(f"Stored blob {key} ({len(data)} bytes)")
        return self.url_for(key)

    def delete(self, key: str) -> bool:
        path = self._path(key)
        try:
            os.remove(path)
        except FileNotFoundError:
            return False
        logger.info(f"Deleted blob {key}")
        return True

    def exists(self, key: str) -> bool:
        return os.path.exists(self._path(key))


def slip_key(buyer_id: str) -> str:
    return f"{SLIP_PREFIX}/{buyer_id}_{uuid.uuid4()}.jpg"


def image_key(prefix: str, extension: str = "jpg") -> str:
    return f"{prefix}/{uuid.uuid4()}.{extension}"
