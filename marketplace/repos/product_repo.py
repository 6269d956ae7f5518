# marketplace/repos/product_repo.py
from sqlalchemy import update
from sqlalchemy.orm import Session

from marketplace.data.models.product import ProductModel
from marketplace.domain.errors import InvalidQuantity, NotFound
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)

_products = ProductModel.__table__


class ProductRepo:
    """
    Dostep do produktow + ksiega stanow magazynowych.

    increase_stock / decrease_stock to pojedyncze warunkowe UPDATE,
    baza wykonuje odczyt-sprawdzenie-zapis atomowo, bez locka w aplikacji.
    Commit nalezy do serwisu (jedna operacja = jedna transakcja).
    """

    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def create_product(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        self.db.flush()
        return product

    def decrease_stock(self, product_id: int, quantity: int) -> bool:
        if quantity is None or quantity <= 0:
            raise InvalidQuantity("Ilosc do zdjecia ze stanu musi byc wieksza niz 0")

        # UPDATE products SET stock = stock - q, sales = sales + q WHERE id = ? AND stock >= q
        result = self.db.execute(
            update(_products)
            .where(
                _products.c.id == product_id,
                _products.c.stock_quantity >= quantity,
            )
            .values(
                stock_quantity=_products.c.stock_quantity - quantity,
                sales_count=_products.c.sales_count + quantity,
            )
        )
        self._expire_cached(product_id)

        if result.rowcount != 1:
            logger.warning(f"Stock decrease rejected: product={product_id}, quantity={quantity}")
            return False

        logger.info(f"Stock decreased: product={product_id}, quantity={quantity}")
        return True

    def increase_stock(self, product_id: int, quantity: int) -> None:
        if quantity is None or quantity <= 0:
            raise InvalidQuantity("Ilosc do dodania na stan musi byc wieksza niz 0")

        result = self.db.execute(
            update(_products)
            .where(_products.c.id == product_id)
            .values(stock_quantity=_products.c.stock_quantity + quantity)
        )
        self._expire_cached(product_id)

        if result.rowcount != 1:
            raise NotFound(f"Produkt {product_id} nie istnieje")

        logger.info(f"Stock increased: product={product_id}, quantity={quantity}")

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()

    def _expire_cached(self, product_id: int):
        #UPDATE poza ORM - obiekt w identity map ma stare wartosci
        cached = self.db.identity_map.get(self.db.identity_key(ProductModel, product_id))
        if cached is not None:
            self.db.expire(cached)
