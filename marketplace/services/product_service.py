# marketplace/services/product_service.py
from decimal import Decimal
from typing import Any, Dict

from sqlalchemy.orm import Session

from marketplace.data.models.product import ProductModel
from marketplace.domain.errors import NotFound, Unauthorized
from marketplace.repos.product_repo import ProductRepo
from marketplace.repos.user_repo import UserRepo
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


def product_to_dict(product: ProductModel) -> Dict[str, Any]:
    return {
        "id": product.id,
        "creator_id": product.creator_id,
        "name": product.name,
        "price": product.price,
        "discount": product.discount,
        "stock_quantity": product.stock_quantity,
        "sales_count": product.sales_count,
        "is_available": product.is_available,
    }


class ProductService:
    """
    Minimalny katalog produktow: rdzen zamowien potrzebuje tylko
    ceny, rabatu, stanu i sprzedawcy. Edycja ofert jest poza zakresem.
    """

    def __init__(self, db: Session):
        self.repo = ProductRepo(db)
        self.users = UserRepo(db)

    def create_product(
        self,
        seller_id: int,
        name: str,
        price: Decimal,
        stock_quantity: int,
        discount: Decimal = Decimal("0.00"),
        is_available: bool = True,
    ) -> Dict[str, Any]:
        if not self.users.get_user(seller_id):
            raise NotFound(f"Sprzedawca {seller_id} nie istnieje")

        product = self.repo.create_product(
            ProductModel(
                creator_id=seller_id,
                name=name,
                price=price,
                discount=discount,
                stock_quantity=stock_quantity,
                sales_count=0,
                is_available=is_available,
            )
        )
        self.repo.commit()

        logger.info(f"Product {product.id} created by seller {seller_id}")
        return product_to_dict(product)

    def get_product(self, product_id: int) -> Dict[str, Any]:
        product = self.repo.get_product(product_id)
        if not product:
            raise NotFound(f"Produkt {product_id} nie istnieje")
        return product_to_dict(product)

    def restock(self, product_id: int, seller_id: int, quantity: int) -> Dict[str, Any]:
        product = self.repo.get_product(product_id)
        if not product:
            raise NotFound(f"Produkt {product_id} nie istnieje")

        if product.creator_id != seller_id:
            raise Unauthorized("Tylko sprzedawca moze uzupelnic stan produktu")

        try:
            self.repo.increase_stock(product_id, quantity)
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        return self.get_product(product_id)
