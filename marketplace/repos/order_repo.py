# marketplace/repos/order_repo.py
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Tuple

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from marketplace.data.models.order import OrderModel
from marketplace.domain.order_status import OrderStatus


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def create_order(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        self.db.flush()
        return order

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.get(OrderModel, order_id)

    def get_order_for_update(self, order_id: int) -> OrderModel | None:
        # FOR UPDATE na postgresie, sqlite pomija klauzule
        return self.db.execute(
            select(OrderModel)
            .where(OrderModel.id == order_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def update_status_if_current(
        self,
        order_id: int,
        expected_status: str,
        expected_version: int,
        new_status: str,
    ) -> int:
        # check-then-set w jednym UPDATE, 0 wierszy = ktos nas wyprzedzil
        result = self.db.execute(
            update(OrderModel)
            .where(
                OrderModel.id == order_id,
                OrderModel.status == expected_status,
                OrderModel.version == expected_version,
            )
            .values(
                status=new_status,
                version=expected_version + 1,
                updated_at=datetime.now(timezone.utc),
            )
        )
        return result.rowcount

    def list_orders(
        self,
        *,
        user_id: int | None = None,
        seller_id: int | None = None,
        status: str | None = None,
        offset: int = 0,
        limit: int = 20,
    ) -> Tuple[List[OrderModel], int]:
        criteria = []
        if user_id is not None:
            criteria.append(OrderModel.user_id == user_id)
        if seller_id is not None:
            criteria.append(OrderModel.seller_id == seller_id)
        if status is not None:
            criteria.append(OrderModel.status == status)

        total = self.db.execute(
            select(func.count(OrderModel.id)).where(*criteria)
        ).scalar_one()

        items = list(
            self.db.execute(
                select(OrderModel)
                .where(*criteria)
                .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
                .offset(offset)
                .limit(limit)
            ).scalars()
        )
        return items, total

    def count_by_status(self, *, user_id: int | None = None, seller_id: int | None = None) -> dict:
        criteria = []
        if user_id is not None:
            criteria.append(OrderModel.user_id == user_id)
        if seller_id is not None:
            criteria.append(OrderModel.seller_id == seller_id)

        rows = self.db.execute(
            select(OrderModel.status, func.count(OrderModel.id))
            .where(*criteria)
            .group_by(OrderModel.status)
        ).all()
        return {status: count for status, count in rows}

    def sum_total_amount(
        self,
        *,
        user_id: int | None = None,
        seller_id: int | None = None,
        exclude_status: str | None = None,
    ) -> Decimal:
        criteria = []
        if user_id is not None:
            criteria.append(OrderModel.user_id == user_id)
        if seller_id is not None:
            criteria.append(OrderModel.seller_id == seller_id)
        if exclude_status is not None:
            criteria.append(OrderModel.status != exclude_status)

        value = self.db.execute(
            select(func.coalesce(func.sum(OrderModel.total_amount), 0)).where(*criteria)
        ).scalar_one()
        # sqlite zwraca float z SUM
        return Decimal(str(value)).quantize(Decimal("0.01"))

    def has_purchase(self, user_id: int, product_id: int) -> bool:
        found = self.db.execute(
            select(OrderModel.id)
            .where(
                OrderModel.user_id == user_id,
                OrderModel.product_id == product_id,
                OrderModel.status != OrderStatus.CANCELLED.value,
            )
            .limit(1)
        ).first()
        return found is not None

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
