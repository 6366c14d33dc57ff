# marketplace/api/routers/products.py
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from marketplace.data.database import get_db
from marketplace.domain.schemas import CatalogPage, ProductCreate, ProductOut, ProductStatus, ProductUpdate
from marketplace.services.product_service import ProductService

router = APIRouter(tags=["products"])


def get_service(db: Session):
    return ProductService(db)


@router.get("/products", response_model=CatalogPage)
def list_catalog(
    limit: Optional[int] = Query(None, gt=0),
    cursor: Optional[str] = None,
    q: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """
    Available products of every seller, newest first.
    Pass ``next_cursor`` from the previous page as ``cursor``.
    """
    svc = get_service(db)
    try:
        return svc.list_available(limit=limit, cursor=cursor, search=q)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/products/{product_id}", response_model=ProductOut)
def get_product(product_id: str, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.get_product(product_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/sellers/{seller_id}/products", response_model=List[ProductOut])
def list_seller_products(
    seller_id: str,
    status: Optional[ProductStatus] = None,
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return svc.list_for_seller(seller_id, status)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/products", response_model=ProductOut, status_code=201)
def create_product(
    payload: ProductCreate,
    user_id: str = Query(...),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return svc.create_product(user_id, payload)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.patch("/products/{product_id}", response_model=ProductOut)
def update_product(
    product_id: str,
    payload: ProductUpdate,
    user_id: str = Query(...),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return svc.update_product(product_id, user_id, payload)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except RuntimeError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/products/{product_id}", status_code=204)
def delete_product(
    product_id: str,
    user_id: str = Query(...),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        svc.delete_product(product_id, user_id)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return Response(status_code=204)
