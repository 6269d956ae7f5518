from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
)

from marketplace.data.database import Base
from marketplace.domain.order_status import OrderStatus, describe


def _now():
    return datetime.now(timezone.utc)


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    order_number = Column(String(64), nullable=False, unique=True)

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    seller_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)

    # snapshot z chwili zakupu - pozniejsze zmiany produktu nie wplywaja na historie
    product_name = Column(String(200), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    total_amount = Column(Numeric(12, 2), nullable=False)

    status = Column(String(20), nullable=False, default=OrderStatus.PENDING.value, index=True)
    version = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_now, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now)

    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_orders_quantity_positive"),
    )

    def belongs_to_user(self, user_id: int) -> bool:
        return self.user_id == user_id

    def belongs_to_seller(self, seller_id: int) -> bool:
        return self.seller_id == seller_id

    def can_pay(self) -> bool:
        return self.status == OrderStatus.PENDING.value

    def can_ship(self) -> bool:
        return self.status == OrderStatus.PAID.value

    def can_complete(self) -> bool:
        return self.status == OrderStatus.SHIPPED.value

    def can_cancel(self) -> bool:
        return self.status in (OrderStatus.PENDING.value, OrderStatus.PAID.value)

    def can_refund(self) -> bool:
        # TODO: podpiac zwrot srodkow, gdy powstanie integracja z bramka platnosci
        return self.status == OrderStatus.PAID.value

    @property
    def status_description(self) -> str:
        return describe(self.status)
