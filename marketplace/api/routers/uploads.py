# marketplace/api/routers/uploads.py
from typing import Literal

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from sqlalchemy.orm import Session

from marketplace.api.deps import get_blob_store, read_upload
from marketplace.data.database import get_db
from marketplace.domain.schemas import UploadOut
from marketplace.data.models.user import ROLE_SELLER
from marketplace.repos.user_repo import UserRepo
from marketplace.services.blob_store import (
    BlobStore,
    PRODUCT_IMAGE_PREFIX,
    PROFILE_IMAGE_PREFIX,
    PROMPTPAY_QR_PREFIX,
    image_key,
)
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/uploads", tags=["uploads"])


@router.post("/", response_model=UploadOut, status_code=201)
def upload_image(
    kind: Literal["product", "profile", "promptpay"] = Query(...),
    file: UploadFile = File(...),
    user_id: str = Query(...),
    db: Session = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
):
    """
    Stores an image and returns its URL, to be put on a product or profile.
    Profile images and PromptPay QR codes are kept one per user.
    """
    user = UserRepo(db).get_user(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    if kind == "promptpay" and user.role != ROLE_SELLER:
        raise HTTPException(status_code=403, detail="Only sellers have a PromptPay QR code")

    data = read_upload(file)
    if not data:
        raise HTTPException(status_code=400, detail="Empty file")

    if kind == "product":
        key = image_key(PRODUCT_IMAGE_PREFIX)
    elif kind == "profile":
        key = f"{PROFILE_IMAGE_PREFIX}/{user_id}.jpg"
    else:
        key = f"{PROMPTPAY_QR_PREFIX}/{user_id}.jpg"

    try:
        url = blob_store.put(key, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except OSError as e:
        logger.error(f"Upload of {kind} image for {user_id} failed: {e}")
        raise HTTPException(status_code=502, detail=f"Upload failed: {e}")

    return {"key": key, "url": url}
