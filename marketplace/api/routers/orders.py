# marketplace/api/routers/orders.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from marketplace.api.dependencies import get_lock_service, get_notification_service
from marketplace.data.database import get_db
from marketplace.domain.errors import MarketplaceError
from marketplace.domain.order_status import OrderStatus
from marketplace.domain.schemas import (
    CheckoutIn,
    OrderCreate,
    OrderOut,
    OrderPage,
    OrderStatisticsOut,
    OrderStatusUpdate,
    PurchaseCheckOut,
)
from marketplace.services.lock_service import LockService
from marketplace.services.notification_service import NotificationService
from marketplace.services.order_service import OrderService
from marketplace.utils.settings import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

router = APIRouter(prefix="/orders", tags=["orders"])


def get_service(
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
    notification_service: NotificationService = Depends(get_notification_service),
) -> OrderService:
    return OrderService(
        db,
        lock_service=lock_service,
        notification_service=notification_service,
    )


@router.post("/", response_model=OrderOut, status_code=201)
def create_order(payload: OrderCreate, svc: OrderService = Depends(get_service)):
    """
    Tworzy zamowienie jednego produktu i zdejmuje je ze stanu.
    """
    try:
        return svc.create_order(payload.user_id, payload.product_id, payload.quantity)
    except MarketplaceError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post("/checkout", response_model=List[OrderOut], status_code=201)
def checkout(payload: CheckoutIn, svc: OrderService = Depends(get_service)):
    """
    Zamienia caly koszyk na zamowienia (po jednym na pozycje).
    """
    try:
        return svc.create_orders_from_cart(payload.user_id)
    except MarketplaceError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("/buyer/{user_id}", response_model=OrderPage)
def list_user_orders(
    user_id: int,
    status: OrderStatus | None = Query(None),
    page: int = Query(0, ge=0),
    size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    svc: OrderService = Depends(get_service),
):
    return svc.get_user_orders(user_id, status=status, page=page, size=size)


@router.get("/seller/{seller_id}", response_model=OrderPage)
def list_seller_orders(
    seller_id: int,
    status: OrderStatus | None = Query(None),
    page: int = Query(0, ge=0),
    size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    svc: OrderService = Depends(get_service),
):
    return svc.get_seller_orders(seller_id, status=status, page=page, size=size)


@router.get("/buyer/{user_id}/statistics", response_model=OrderStatisticsOut)
def user_statistics(user_id: int, svc: OrderService = Depends(get_service)):
    return svc.get_order_statistics(user_id)


@router.get("/seller/{seller_id}/statistics", response_model=OrderStatisticsOut)
def seller_statistics(seller_id: int, svc: OrderService = Depends(get_service)):
    return svc.get_seller_statistics(seller_id)


@router.get("/purchased", response_model=PurchaseCheckOut)
def purchased(
    user_id: int = Query(...),
    product_id: int = Query(...),
    svc: OrderService = Depends(get_service),
):
    return {
        "user_id": user_id,
        "product_id": product_id,
        "purchased": svc.has_user_purchased_product(user_id, product_id),
    }


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: int,
    user_id: int = Query(...),
    svc: OrderService = Depends(get_service),
):
    try:
        return svc.get_order(order_id, user_id)
    except MarketplaceError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.patch("/{order_id}/status", response_model=OrderOut)
def update_status(
    order_id: int,
    payload: OrderStatusUpdate,
    svc: OrderService = Depends(get_service),
):
    try:
        return svc.update_order_status(order_id, payload.status, payload.actor_id)
    except MarketplaceError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post("/{order_id}/cancel", response_model=OrderOut)
def cancel_order(
    order_id: int,
    user_id: int = Query(...),
    svc: OrderService = Depends(get_service),
):
    try:
        return svc.cancel_order(user_id, order_id)
    except MarketplaceError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
