#marketplace/api/routers/carts.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from marketplace.data.database import get_db
from marketplace.domain.errors import MarketplaceError
from marketplace.domain.schemas import (
    ItemIn,
    ItemQuantityIn,
    CartOut,
)
from marketplace.services.cart_service import CartService

router = APIRouter(prefix="/carts", tags=["carts"])


def get_service(db: Session = Depends(get_db)) -> CartService:
    return CartService(db)


@router.get("/{user_id}", response_model=CartOut)
def get_cart(user_id: int, svc: CartService = Depends(get_service)):
    try:
        return svc.get_cart(user_id)
    except MarketplaceError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post("/{user_id}/items", response_model=CartOut)
def add_item(user_id: int, payload: ItemIn, svc: CartService = Depends(get_service)):
    try:
        cart = svc.add_to_cart(user_id, payload.product_id, payload.quantity)
    except MarketplaceError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))

    if cart is None:
        raise HTTPException(status_code=400, detail="Nieprawidlowa ilosc po zmianie")
    return cart


@router.put("/{user_id}/items/{product_id}", response_model=CartOut)
def update_item(
    user_id: int,
    product_id: int,
    payload: ItemQuantityIn,
    svc: CartService = Depends(get_service),
):
    try:
        return svc.update_cart_item(user_id, product_id, payload.quantity)
    except MarketplaceError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.delete("/{user_id}/items/{product_id}", response_model=CartOut)
def remove_item(user_id: int, product_id: int, svc: CartService = Depends(get_service)):
    try:
        return svc.remove_from_cart(user_id, product_id)
    except MarketplaceError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.delete("/{user_id}", response_model=CartOut)
def clear_cart(user_id: int, svc: CartService = Depends(get_service)):
    try:
        return svc.clear_cart(user_id)
    except MarketplaceError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
