# hapibara/repos/product_repo.py
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from hapibara.data.models.product import ProductModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: int) -> ProductModel | None:
        # populate_existing: stan magazynu zawsze swiezy z bazy, nie z identity map
        return self.db.execute(
            select(ProductModel)
            .where(ProductModel.id == product_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def create_product(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        self.db.flush()
        return product

    def decrement_inventory(self, product_id: int, quantity: int) -> bool:
        """
        Atomowe "sprawdz i zmniejsz":
        UPDATE products SET inventory = inventory - :qty WHERE id = :id AND inventory >= :qty
        False gdy stan jest za maly (albo produkt nie istnieje), nic wtedy nie zostalo zmienione.
        """
        result = self.db.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id, ProductModel.inventory >= quantity)
            .values(
                inventory=ProductModel.inventory - quantity,
                updated_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
