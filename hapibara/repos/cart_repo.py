# hapibara/repos/cart_repo.py
from datetime import datetime, timezone
from typing import List

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session, contains_eager

from hapibara.data.models.cart_item import CartItemModel
from hapibara.data.models.product import ProductModel


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_cart_items(self, user_id: int) -> List[CartItemModel]:
        """Cart lines with their live product rows, oldest first."""
        stmt = (
            select(CartItemModel)
            .join(CartItemModel.product)
            .options(contains_eager(CartItemModel.product))
            .where(CartItemModel.user_id == user_id)
            .order_by(CartItemModel.id)
            .execution_options(populate_existing=True)
        )
        return list(self.db.execute(stmt).scalars().all())

    def get_cart_item(self, user_id: int, product_id: int) -> CartItemModel | None:
        return self.db.execute(
            select(CartItemModel).where(
                CartItemModel.user_id == user_id,
                CartItemModel.product_id == product_id,
            )
        ).scalar_one_or_none()

    def get_cart_item_by_id(self, user_id: int, cart_item_id: int) -> CartItemModel | None:
        # user_id w warunku: cudza linia koszyka == brak linii
        return self.db.execute(
            select(CartItemModel).where(
                CartItemModel.id == cart_item_id,
                CartItemModel.user_id == user_id,
            )
        ).scalar_one_or_none()

    def add_cart_item(self, item: CartItemModel) -> CartItemModel:
        self.db.add(item)
        self.db.flush()
        return item

    def increment_quantity(self, cart_item_id: int, quantity: int) -> int | None:
        """
        quantity = quantity + :q w jednym UPDATE, tylko gdy nowa ilosc miesci sie
        w aktualnym stanie produktu. None gdy warunek nie przeszedl.
        """
        live_inventory = (
            select(ProductModel.inventory)
            .where(ProductModel.id == CartItemModel.product_id)
            .scalar_subquery()
        )
        result = self.db.execute(
            update(CartItemModel)
            .where(
                CartItemModel.id == cart_item_id,
                CartItemModel.quantity + quantity <= live_inventory,
            )
            .values(
                quantity=CartItemModel.quantity + quantity,
                updated_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return None

        return self.db.execute(
            select(CartItemModel.quantity).where(CartItemModel.id == cart_item_id)
        ).scalar_one()

    def delete_cart_item(self, item: CartItemModel) -> None:
        self.db.delete(item)
        self.db.flush()

    def clear_cart(self, user_id: int) -> int:
        result = self.db.execute(
            delete(CartItemModel).where(CartItemModel.user_id == user_id)
        )
        return result.rowcount
