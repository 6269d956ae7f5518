# marketplace/services/order_service.py
import math
import uuid
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from marketplace.data.models.order import OrderModel
from marketplace.domain.errors import (
    EmptyCart,
    InsufficientStock,
    InvalidQuantity,
    InvalidTransition,
    NotFound,
    NotPurchasable,
    StaleState,
    Unauthorized,
)
from marketplace.domain.order_status import OrderStatus, can_transition, parse_status
from marketplace.repos.cart_repo import CartRepo
from marketplace.repos.order_repo import OrderRepo
from marketplace.repos.product_repo import ProductRepo
from marketplace.repos.user_repo import UserRepo
from marketplace.services.lock_service import LockService
from marketplace.services.notification_service import NotificationService
from marketplace.services.order_security_service import OrderSecurityService
from marketplace.utils.logging import get_logger
from marketplace.utils.settings import DEFAULT_PAGE_SIZE, MAX_ITEM_QUANTITY, MAX_PAGE_SIZE

logger = get_logger(__name__)

_CENT = Decimal("0.01")


def calculate_unit_price(price: Decimal, discount: Decimal | None) -> Decimal:
    price = Decimal(str(price))
    if discount is not None and Decimal(str(discount)) > 0:
        price = price * (Decimal("1") - Decimal(str(discount)) / Decimal("100"))
    return price.quantize(_CENT, rounding=ROUND_HALF_UP)


def new_order_number(user_id: int) -> str:
    return f"ORD-{user_id}-{uuid.uuid4().hex.upper()}"


def order_to_dict(order: OrderModel) -> Dict[str, Any]:
    return {
        "id": order.id,
        "order_number": order.order_number,
        "user_id": order.user_id,
        "seller_id": order.seller_id,
        "product_id": order.product_id,
        "product_name": order.product_name,
        "quantity": order.quantity,
        "unit_price": order.unit_price,
        "total_amount": order.total_amount,
        "status": order.status,
        "status_description": order.status_description,
        "created_at": order.created_at,
        "updated_at": order.updated_at,
    }


class OrderService:
    """
    Cykl zycia zamowienia: utworzenie (pojedyncze lub z koszyka),
    odczyt, zmiany statusu i anulowanie ze zwrotem na stan.

    Kazda publiczna komenda to jedna transakcja: zamowienie i zdjecie
    ze stanu zapisuja sie razem albo wcale.
    """

    def __init__(
        self,
        db: Session,
        lock_service: LockService | None = None,
        notification_service: NotificationService | None = None,
        security: OrderSecurityService | None = None,
    ):
        self.db = db
        self.repo = OrderRepo(db)
        self.products = ProductRepo(db)
        self.users = UserRepo(db)
        self.carts = CartRepo(db)
        self.lock_service = lock_service
        self.notification_service = notification_service or NotificationService()
        self.security = security or OrderSecurityService()

    # =====================================================
    # COMMANDS
    # =====================================================
    def create_order(self, user_id: int, product_id: int, quantity: int) -> Dict[str, Any]:
        logger.info(f"Create order: user={user_id}, product={product_id}, quantity={quantity}")

        try:
            order = self._place_order(user_id, product_id, quantity)
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        logger.info(f"Order {order.order_number} created, total={order.total_amount}")
        self.notification_service.send_order_created(order.user_id, order.id, order.order_number)
        return order_to_dict(order)

    def create_orders_from_cart(self, user_id: int) -> List[Dict[str, Any]]:
        """
        Jedno zamowienie na kazda pozycje koszyka, wszystko albo nic.

        Blad dowolnej pozycji wycofuje wszystkie zamowienia i zdjecia
        ze stanu, koszyk zostaje nietkniety.
        """
        token = uuid.uuid4().hex
        if self.lock_service is not None:
            if not self.lock_service.acquire_checkout_lock(user_id, token):
                raise StaleState("Realizacja koszyka jest juz w toku")

        try:
            orders = self._checkout(user_id)
        finally:
            if self.lock_service is not None:
                self._release_checkout_lock(user_id, token)

        for order in orders:
            self.notification_service.send_order_created(order.user_id, order.id, order.order_number)
        return [order_to_dict(o) for o in orders]

    def update_order_status(self, order_id: int, new_status, actor_id: int) -> Dict[str, Any]:
        target = parse_status(new_status)

        try:
            order = self.repo.get_order_for_update(order_id)
            if not order:
                raise NotFound(f"Zamowienie {order_id} nie istnieje")

            if not self.security.can_view(order, actor_id):
                raise Unauthorized("Brak dostepu do zamowienia")

            # stan sprawdzamy przed uprawnieniami - zamowienie zakonczone odrzuca kazdego
            if not can_transition(order.status, target):
                raise InvalidTransition(
                    f"Niedozwolona zmiana statusu: {order.status} -> {target.value}"
                )

            if not self.security.can_transition(order, actor_id, target):
                raise Unauthorized(
                    f"Uzytkownik {actor_id} nie moze zmienic statusu na {target.value}"
                )

            old_status = order.status
            self._apply_transition(order, target)
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        logger.info(
            f"Order {order_id} status: {old_status} -> {target.value}, actor={actor_id}"
        )
        self.notification_service.send_status_changed(
            order.user_id, order.id, old_status, target.value
        )
        return order_to_dict(order)

    def cancel_order(self, user_id: int, order_id: int) -> Dict[str, Any]:
        # anulowac moze tylko kupujacy, z PENDING lub PAID - tabela uprawnien to wymusza
        return self.update_order_status(order_id, OrderStatus.CANCELLED, user_id)

    # =====================================================
    # QUERY
    # =====================================================
    def get_order_by_id(self, order_id: int) -> Dict[str, Any] | None:
        order = self.repo.get_order(order_id)
        return order_to_dict(order) if order else None

    def get_required_order(self, order_id: int) -> OrderModel:
        order = self.repo.get_order(order_id)
        if not order:
            raise NotFound(f"Zamowienie {order_id} nie istnieje")
        return order

    def get_order(self, order_id: int, actor_id: int) -> Dict[str, Any]:
        order = self.get_required_order(order_id)
        if not self.security.can_view(order, actor_id):
            raise Unauthorized("Brak dostepu do zamowienia")
        return order_to_dict(order)

    def get_user_orders(
        self,
        user_id: int,
        status=None,
        page: int = 0,
        size: int = DEFAULT_PAGE_SIZE,
    ) -> Dict[str, Any]:
        return self._list(status, page, size, user_id=user_id)

    def get_seller_orders(
        self,
        seller_id: int,
        status=None,
        page: int = 0,
        size: int = DEFAULT_PAGE_SIZE,
    ) -> Dict[str, Any]:
        return self._list(status, page, size, seller_id=seller_id)

    def get_order_statistics(self, user_id: int) -> Dict[str, Any]:
        return self._statistics(user_id=user_id)

    def get_seller_statistics(self, seller_id: int) -> Dict[str, Any]:
        return self._statistics(seller_id=seller_id)

    def has_user_purchased_product(self, user_id: int, product_id: int) -> bool:
        return self.repo.has_purchase(user_id, product_id)

    # =====================================================
    # INTERNAL
    # =====================================================
    def _place_order(self, user_id: int, product_id: int, quantity: int) -> OrderModel:
        # bez commita - wywolujacy domyka transakcje
        if quantity is None or quantity < 1 or quantity > MAX_ITEM_QUANTITY:
            raise InvalidQuantity(f"Ilosc musi byc z zakresu 1-{MAX_ITEM_QUANTITY}")

        buyer = self.users.get_user(user_id)
        if not buyer:
            raise NotFound(f"Uzytkownik {user_id} nie istnieje")

        product = self.products.get_product(product_id)
        if not product:
            raise NotFound(f"Produkt {product_id} nie istnieje")

        if not product.is_purchasable():
            raise NotPurchasable(f"Produkt nie jest dostepny: {product.name}")

        if product.stock_quantity < quantity:
            raise InsufficientStock(
                f"Brak wystarczajacego stanu: potrzeba {quantity}, dostepne {product.stock_quantity}"
            )

        # snapshot przed UPDATE - decrease_stock wygasza obiekt produktu
        unit_price = calculate_unit_price(product.price, product.discount)
        seller_id = product.creator_id
        product_name = product.name

        if not self.products.decrease_stock(product_id, quantity):
            # ktos kupil ostatnie sztuki miedzy sprawdzeniem a UPDATE
            logger.warning(f"Lost stock race: product={product_id}, user={user_id}")
            raise InsufficientStock(f"Produkt {product_name} zostal wlasnie wykupiony")

        now = datetime.now(timezone.utc)
        return self.repo.create_order(
            OrderModel(
                order_number=new_order_number(user_id),
                user_id=user_id,
                seller_id=seller_id,
                product_id=product_id,
                product_name=product_name,
                quantity=quantity,
                unit_price=unit_price,
                total_amount=(unit_price * quantity).quantize(_CENT),
                status=OrderStatus.PENDING.value,
                version=1,
                created_at=now,
                updated_at=now,
            )
        )

    def _checkout(self, user_id: int) -> List[OrderModel]:
        logger.info(f"Checkout cart: user={user_id}")

        try:
            if not self.users.get_user(user_id):
                raise NotFound(f"Uzytkownik {user_id} nie istnieje")

            cart = self.carts.get_cart_by_user(user_id)
            lines = [(i.product_id, i.quantity) for i in self.carts.get_cart_items(cart.id)] if cart else []
            if not lines:
                raise EmptyCart("Koszyk jest pusty")

            orders = [self._place_order(user_id, product_id, quantity) for product_id, quantity in lines]

            self.carts.clear_cart_items(cart.id)
            rowcount = self.carts.update_cart_version(
                cart_id=cart.id,
                old_version=cart.version,
                new_data={"version": cart.version + 1, "updated_at": datetime.now(timezone.utc)},
            )
            if rowcount == 0:
                raise StaleState("Koszyk zostal zmieniony w trakcie realizacji")

            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        logger.info(f"Checkout done: user={user_id}, orders={len(orders)}")
        return orders

    def _apply_transition(self, order: OrderModel, target: OrderStatus):
        order_id, current, version = order.id, order.status, order.version
        quantity, product_id = order.quantity, order.product_id

        rowcount = self.repo.update_status_if_current(order_id, current, version, target.value)
        if rowcount == 0:
            logger.warning(f"Stale transition rejected: order={order_id}, {current} -> {target.value}")
            raise StaleState("Zamowienie zostalo zmienione przez inna operacje")

        if target is OrderStatus.CANCELLED:
            # zwrot na stan, sales_count zostaje (historia sprzedazy)
            self.products.increase_stock(product_id, quantity)

    def _release_checkout_lock(self, user_id: int, token: str):
        try:
            self.lock_service.release_checkout_lock(user_id, token)
        except Exception as e:
            # lock i tak wygasnie po TTL
            logger.warning(f"Failed to release checkout lock for user {user_id}: {e}")

    def _list(self, status, page: int, size: int, **owner) -> Dict[str, Any]:
        status_value = parse_status(status).value if status else None
        page = max(page or 0, 0)
        size = min(max(size or DEFAULT_PAGE_SIZE, 1), MAX_PAGE_SIZE)

        items, total = self.repo.list_orders(
            status=status_value,
            offset=page * size,
            limit=size,
            **owner,
        )
        return {
            "items": [order_to_dict(o) for o in items],
            "total": total,
            "page": page,
            "size": size,
            "pages": math.ceil(total / size) if total else 0,
        }

    def _statistics(self, **owner) -> Dict[str, Any]:
        counts = self.repo.count_by_status(**owner)
        return {
            "total_orders": sum(counts.values()),
            "pending_orders": counts.get(OrderStatus.PENDING.value, 0),
            "completed_orders": counts.get(OrderStatus.COMPLETED.value, 0),
            "cancelled_orders": counts.get(OrderStatus.CANCELLED.value, 0),
            "total_amount": self.repo.sum_total_amount(
                exclude_status=OrderStatus.CANCELLED.value,
                **owner,
            ),
        }
