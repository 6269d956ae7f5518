# marketplace/services/order_security_service.py
from enum import Enum
from typing import Dict, Tuple

from marketplace.data.models.order import OrderModel
from marketplace.domain.order_status import OrderStatus, is_terminal, parse_status
from marketplace.utils import settings


class ActorRole(str, Enum):
    BUYER = "BUYER"
    SELLER = "SELLER"
    NONE = "NONE"


# (obecny status, docelowy status) -> kto moze wykonac przejscie
TRANSITION_PERMISSIONS: Dict[Tuple[OrderStatus, OrderStatus], ActorRole] = {
    (OrderStatus.PENDING, OrderStatus.PAID): ActorRole.BUYER,
    (OrderStatus.PAID, OrderStatus.SHIPPED): ActorRole.SELLER,
    (OrderStatus.SHIPPED, OrderStatus.COMPLETED): ActorRole.BUYER,
    (OrderStatus.PENDING, OrderStatus.CANCELLED): ActorRole.BUYER,
    (OrderStatus.PAID, OrderStatus.CANCELLED): ActorRole.BUYER,
}


class OrderSecurityService:
    """
    Decyzje o uprawnieniach do zamowienia - czyste funkcje,
    bez dostepu do bazy. Zamowienie laduje wywolujacy.
    """

    def __init__(self, seller_fallback: bool | None = None):
        if seller_fallback is None:
            seller_fallback = settings.SELLER_FALLBACK_TRANSITIONS
        self.seller_fallback = seller_fallback

    @staticmethod
    def role_of(order: OrderModel, actor_id: int) -> ActorRole:
        if order.belongs_to_user(actor_id):
            return ActorRole.BUYER
        if order.belongs_to_seller(actor_id):
            return ActorRole.SELLER
        return ActorRole.NONE

    def can_view(self, order: OrderModel, actor_id: int) -> bool:
        return self.role_of(order, actor_id) is not ActorRole.NONE

    def can_cancel(self, order: OrderModel, actor_id: int) -> bool:
        return self.can_transition(order, actor_id, OrderStatus.CANCELLED)

    def can_transition(self, order: OrderModel, actor_id: int, requested) -> bool:
        current = parse_status(order.status)
        if is_terminal(current):
            return False

        role = self.role_of(order, actor_id)
        if role is ActorRole.NONE:
            return False

        required = TRANSITION_PERMISSIONS.get((current, parse_status(requested)))
        if required is None:
            return self.seller_fallback and role is ActorRole.SELLER

        return role is required
