# marketplace/api/routers/notifications.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from marketplace.data.database import get_db
from marketplace.domain.schemas import NotificationDetail, NotificationOut
from marketplace.services.notification_service import NotificationService

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("/", response_model=List[NotificationOut])
def list_notifications(user_id: str = Query(...), db: Session = Depends(get_db)):
    """
    Order notifications the user received as a seller plus delivery
    notifications received as a buyer, newest first.
    """
    return NotificationService(db).list_for_user(user_id)


@router.get("/{notification_id}", response_model=NotificationDetail)
def get_notification(
    notification_id: str,
    user_id: str = Query(...),
    db: Session = Depends(get_db),
):
    svc = NotificationService(db)
    try:
        return svc.get_detail(notification_id, user_id)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/{notification_id}/read", response_model=NotificationOut)
def mark_read(
    notification_id: str,
    user_id: str = Query(...),
    db: Session = Depends(get_db),
):
    svc = NotificationService(db)
    try:
        return svc.mark_read(notification_id, user_id)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except SQLAlchemyError as e:
        raise HTTPException(status_code=500, detail=f"Failed to update notification: {e}")
