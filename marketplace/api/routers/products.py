# marketplace/api/routers/products.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from marketplace.data.database import get_db
from marketplace.domain.errors import MarketplaceError
from marketplace.domain.schemas import ProductCreate, ProductOut, RestockIn
from marketplace.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["products"])


@router.post("/", response_model=ProductOut, status_code=201)
def create_product(payload: ProductCreate, db: Session = Depends(get_db)):
    svc = ProductService(db)
    try:
        return svc.create_product(
            seller_id=payload.seller_id,
            name=payload.name,
            price=payload.price,
            discount=payload.discount,
            stock_quantity=payload.stock_quantity,
            is_available=payload.is_available,
        )
    except MarketplaceError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    svc = ProductService(db)
    try:
        return svc.get_product(product_id)
    except MarketplaceError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post("/{product_id}/restock", response_model=ProductOut)
def restock(product_id: int, payload: RestockIn, db: Session = Depends(get_db)):
    svc = ProductService(db)
    try:
        return svc.restock(product_id, payload.seller_id, payload.quantity)
    except MarketplaceError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
