# marketplace/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from typing import List
from decimal import Decimal
from datetime import datetime

from marketplace.domain.order_status import OrderStatus
from marketplace.utils.settings import MAX_ITEM_QUANTITY


class UserCreate(BaseModel):
    """Schema dla tworzenia uzytkownika."""

    username: str = Field(..., min_length=1, max_length=100, description="Nazwa uzytkownika")


class UserRead(BaseModel):
    """Schema dla uzytkownika (response)."""

    id: int
    username: str

    model_config = ConfigDict(from_attributes=True)


class ProductCreate(BaseModel):
    seller_id: int = Field(..., gt=0)
    name: str = Field(..., min_length=1, max_length=200)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    discount: Decimal = Field(Decimal("0.00"), ge=0, le=100, max_digits=5, decimal_places=2)
    stock_quantity: int = Field(0, ge=0)
    is_available: bool = True


class ProductOut(BaseModel):
    id: int
    creator_id: int
    name: str
    price: Decimal
    discount: Decimal
    stock_quantity: int
    sales_count: int
    is_available: bool


class RestockIn(BaseModel):
    seller_id: int = Field(..., gt=0)
    quantity: int = Field(..., gt=0, description="Ilosc dodawana na stan (musi byc > 0)")


class ItemIn(BaseModel):
    """Schema dla dodawania produktu do koszyka - ilosc ujemna zmniejsza pozycje."""

    product_id: int = Field(..., gt=0, description="ID produktu (musi byc > 0)")
    quantity: int = Field(..., description="Zmiana ilosci (rozna od 0)")


class ItemQuantityIn(BaseModel):
    quantity: int = Field(..., ge=1, le=MAX_ITEM_QUANTITY)


class CartItemOut(BaseModel):
    product_id: int
    quantity: int


class CartOut(BaseModel):
    """Schema dla koszyka (response)."""

    user_id: int
    items: List[CartItemOut]
    total_quantity: int


class OrderCreate(BaseModel):
    """Schema dla zamowienia pojedynczego produktu."""

    user_id: int = Field(..., gt=0, description="ID kupujacego (musi byc > 0)")
    product_id: int = Field(..., gt=0, description="ID produktu (musi byc > 0)")
    quantity: int = Field(..., ge=1, le=MAX_ITEM_QUANTITY)


class CheckoutIn(BaseModel):
    user_id: int = Field(..., gt=0)


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
    actor_id: int = Field(..., gt=0)


class OrderOut(BaseModel):
    """Schema dla zamowienia (response)."""

    id: int
    order_number: str
    user_id: int
    seller_id: int
    product_id: int
    product_name: str
    quantity: int
    unit_price: Decimal
    total_amount: Decimal
    status: OrderStatus
    status_description: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OrderPage(BaseModel):
    items: List[OrderOut]
    total: int
    page: int
    size: int
    pages: int


class OrderStatisticsOut(BaseModel):
    total_orders: int
    pending_orders: int
    completed_orders: int
    cancelled_orders: int
    total_amount: Decimal


class PurchaseCheckOut(BaseModel):
    user_id: int
    product_id: int
    purchased: bool
