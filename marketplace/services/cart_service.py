from datetime import datetime, timezone
from typing import Dict, Any
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from marketplace.data.models.cart import CartModel
from marketplace.data.models.cart_item import CartItemModel
from marketplace.domain.errors import InvalidQuantity, NotFound, StaleState
from marketplace.repos.cart_repo import CartRepo
from marketplace.repos.product_repo import ProductRepo
from marketplace.repos.user_repo import UserRepo
from marketplace.utils.settings import MAX_ITEM_QUANTITY
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


def cart_to_dict(user_id: int, items) -> Dict[str, Any]:
    return {
        "user_id": user_id,
        "items": [
            {"product_id": i.product_id, "quantity": i.quantity}
            for i in items
        ],
        "total_quantity": sum(i.quantity for i in items),
    }


class CartService:
    """
    Koszyk jako szkic zakupow: product_id -> ilosc, jeden na uzytkownika.
    commands (add, update, remove, clear) modyfikuja stan,
    query (get) tylko odczyt (+ leniwe utworzenie pustego koszyka).

    Kazda komenda to jedna transakcja z podbiciem wersji koszyka
    (optimistic locking), miedzy osobnymi wywolaniami wygrywa ostatni zapis.
    """

    def __init__(self, db: Session):
        self.repo = CartRepo(db)
        self.users = UserRepo(db)
        self.products = ProductRepo(db)

    #query - odczyt
    def get_cart(self, user_id: int) -> Dict[str, Any]:
        cart = self.get_or_create(user_id)
        self.repo.commit()
        return cart_to_dict(user_id, self.repo.get_cart_items(cart.id))

    def get_or_create(self, user_id: int) -> CartModel:
        if not self.users.get_user(user_id):
            raise NotFound(f"Uzytkownik {user_id} nie istnieje")

        cart = self.repo.get_cart_by_user(user_id)
        if cart:
            return cart

        try:
            cart = self.repo.create_cart(
                CartModel(
                    user_id=user_id,
                    version=1,
                    updated_at=datetime.now(timezone.utc),
                )
            )
        except IntegrityError:
            #rownolegle zapytanie utworzylo koszyk pierwsze
            self.repo.rollback()
            cart = self.repo.get_cart_by_user(user_id)
            if cart is None:
                raise
            return cart

        logger.info(f"Utworzono nowy koszyk {cart.id} dla uzytkownika {user_id}")
        return cart

    #commands
    def add_to_cart(self, user_id: int, product_id: int, quantity: int) -> Dict[str, Any] | None:
        """
        Dodaje quantity (moze byc ujemne) do ilosci produktu w koszyku.

        Wynik 0 usuwa pozycje. Wynik ujemny lub ponad limit nie zmienia
        niczego i zwraca None zamiast wyjatku.
        """
        if not quantity:
            raise InvalidQuantity("Zmiana ilosci nie moze byc rowna 0")

        if quantity > 0 and not self.products.get_product(product_id):
            raise NotFound(f"Produkt {product_id} nie istnieje")

        cart = self.get_or_create(user_id)
        existing_item = self.repo.get_cart_item(cart.id, product_id)
        current = existing_item.quantity if existing_item else 0
        new_quantity = current + quantity

        if new_quantity < 0 or new_quantity > MAX_ITEM_QUANTITY:
            logger.warning(
                f"Odrzucono zmiane ilosci produktu {product_id} w koszyku {cart.id}: "
                f"{current} + {quantity}"
            )
            self.repo.rollback()
            return None

        if new_quantity == 0:
            logger.info(f"Ilosc produktu {product_id} spadla do 0, usuwam z koszyka {cart.id}")
            self.repo.delete_cart_item(cart.id, product_id)
        elif existing_item:
            logger.info(
                f"Produkt {product_id} juz jest w koszyku, zmieniam ilosc "
                f"z {current} na {new_quantity}"
            )
            existing_item.quantity = new_quantity
        else:
            logger.info(f"Dodaje nowy produkt {product_id} do koszyka {cart.id}")
            self.repo.add_cart_item(
                CartItemModel(cart_id=cart.id, product_id=product_id, quantity=new_quantity)
            )

        self._commit_mutation(cart)
        return cart_to_dict(user_id, self.repo.get_cart_items(cart.id))

    def update_cart_item(self, user_id: int, product_id: int, quantity: int) -> Dict[str, Any]:
        if quantity is None or quantity < 1 or quantity > MAX_ITEM_QUANTITY:
            raise InvalidQuantity(f"Ilosc musi byc z zakresu 1-{MAX_ITEM_QUANTITY}")

        if not self.products.get_product(product_id):
            raise NotFound(f"Produkt {product_id} nie istnieje")

        cart = self.get_or_create(user_id)
        existing_item = self.repo.get_cart_item(cart.id, product_id)

        if existing_item:
            existing_item.quantity = quantity
        else:
            self.repo.add_cart_item(
                CartItemModel(cart_id=cart.id, product_id=product_id, quantity=quantity)
            )

        self._commit_mutation(cart)
        logger.info(f"Ustawiono ilosc produktu {product_id} w koszyku {cart.id} na {quantity}")
        return cart_to_dict(user_id, self.repo.get_cart_items(cart.id))

    def remove_from_cart(self, user_id: int, product_id: int) -> Dict[str, Any]:
        cart = self.get_or_create(user_id)

        logger.info(f"Usuwanie produktu {product_id} z koszyka {cart.id}")
        self.repo.delete_cart_item(cart.id, product_id)

        self._commit_mutation(cart)
        return cart_to_dict(user_id, self.repo.get_cart_items(cart.id))

    def clear_cart(self, user_id: int) -> Dict[str, Any]:
        cart = self.get_or_create(user_id)

        removed = self.repo.clear_cart_items(cart.id)
        self._commit_mutation(cart)

        logger.info(f"Wyczyszczono koszyk {cart.id} ({removed} pozycji)")
        return cart_to_dict(user_id, [])

    def _commit_mutation(self, cart: CartModel):
        # Optimistic locking, np. UPDATE carts SET version 2 WHERE id 1 AND version 1
        old_version = cart.version
        try:
            rowcount = self.repo.update_cart_version(
                cart_id=cart.id,
                old_version=old_version,
                new_data={
                    "version": old_version + 1,
                    "updated_at": datetime.now(timezone.utc),
                },
            )
            if rowcount == 0:
                raise StaleState(
                    "Konflikt wspolbieznosci - koszyk zostal zmodyfikowany przez inna operacje"
                )
            self.repo.commit()
        except IntegrityError:
            self.repo.rollback()
            raise StaleState(
                "Konflikt wspolbieznosci - koszyk zostal zmodyfikowany przez inna operacje"
            )
        except StaleState:
            self.repo.rollback()
            raise

        logger.info(f"Koszyk {cart.id} zapisany, nowa wersja: {old_version + 1}")
