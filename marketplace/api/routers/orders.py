# marketplace/api/routers/orders.py
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from marketplace.api.deps import get_blob_store, get_lock_service, read_upload
from marketplace.data.database import get_db
from marketplace.domain.schemas import CheckoutSummary, OrderCheck, OrderOut, TrackingIn, TrackingOut
from marketplace.services.blob_store import BlobStore
from marketplace.services.lock_service import LockService
from marketplace.services.order_service import CheckoutUnavailable, OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


def get_service(db: Session, lock_service: LockService, blob_store: BlobStore):
    return OrderService(db, lock_service=lock_service, blob_store=blob_store)


@router.post("/", response_model=OrderOut, status_code=201)
def place_order(
    product_id: str = Form(...),
    address: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    slip: UploadFile = File(...),
    user_id: str = Query(...),
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
    blob_store: BlobStore = Depends(get_blob_store),
):
    """
    Places an order for one product. The payment slip is uploaded first,
    then the order, the seller notification, the product status and the cart
    removal are committed together.
    """
    svc = get_service(db, lock_service, blob_store)
    data = read_upload(slip)
    try:
        return svc.place_order(user_id, product_id, data, address=address, phone=phone)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RuntimeError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except OSError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except CheckoutUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))
    except SQLAlchemyError as e:
        raise HTTPException(status_code=500, detail=f"Failed to process order: {e}")


@router.get("/", response_model=List[OrderOut])
def list_orders(
    user_id: str = Query(...),
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
    blob_store: BlobStore = Depends(get_blob_store),
):
    """
    Orders where the user is the buyer or the seller, newest first.
    """
    svc = get_service(db, lock_service, blob_store)
    return svc.list_orders(user_id)


@router.get("/check", response_model=OrderCheck)
def check_product(
    product_id: str = Query(...),
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
    blob_store: BlobStore = Depends(get_blob_store),
):
    svc = get_service(db, lock_service, blob_store)
    return {"product_id": product_id, "ordered": svc.is_ordered(product_id)}


@router.get("/checkout/{product_id}", response_model=CheckoutSummary)
def checkout_summary(
    product_id: str,
    user_id: str = Query(...),
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
    blob_store: BlobStore = Depends(get_blob_store),
):
    svc = get_service(db, lock_service, blob_store)
    try:
        return svc.checkout_summary(product_id, user_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except RuntimeError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: str,
    user_id: str = Query(...),
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
    blob_store: BlobStore = Depends(get_blob_store),
):
    svc = get_service(db, lock_service, blob_store)
    try:
        return svc.get_order(order_id, user_id)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/{order_id}/tracking", response_model=TrackingOut)
def update_tracking(
    order_id: str,
    payload: TrackingIn,
    user_id: str = Query(...),
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
    blob_store: BlobStore = Depends(get_blob_store),
):
    """
    Seller enters the tracking number. The order and all of its
    notifications are updated in one commit.
    """
    svc = get_service(db, lock_service, blob_store)
    try:
        return svc.update_tracking(order_id, user_id, payload.tracking_number)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SQLAlchemyError as e:
        raise HTTPException(status_code=500, detail=f"Failed to save tracking number: {e}")
