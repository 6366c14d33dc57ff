# marketplace/api/deps.py
from fastapi import HTTPException, UploadFile

from marketplace.services.blob_store import BlobStore
from marketplace.services.lock_service import LockService
from marketplace.utils.settings import MAX_UPLOAD_BYTES


def get_lock_service() -> LockService:
    return LockService()


def get_blob_store() -> BlobStore:
    return BlobStore()


def read_upload(upload: UploadFile) -> bytes:
    #one byte past the limit is enough to know it is too large
    data = upload.file.read(MAX_UPLOAD_BYTES + 1)
    if len(data) > MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=413, detail=f"File is larger than {MAX_UPLOAD_BYTES} bytes")
    return data
