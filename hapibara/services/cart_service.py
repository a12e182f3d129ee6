# hapibara/services/cart_service.py
from datetime import datetime, timezone
from typing import Any, Dict, NoReturn, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from hapibara.data.models.cart_item import CartItemModel
from hapibara.data.models.product import ProductModel
from hapibara.domain.errors import ConflictError, InsufficientInventory, NotFoundError, PersistenceFailure
from hapibara.domain.pricing import line_subtotal
from hapibara.repos.cart_repo import CartRepo
from hapibara.repos.product_repo import ProductRepo
from hapibara.utils.logging import get_logger
from hapibara.utils.retry import db_retry

logger = get_logger(__name__)


class CartService:
    """
    Use case'y koszyka.
    commands (add, update, clear) modyfikuja stan i same commituja,
    query (summary) tylko odczyt.

    Polityka cen: linia koszyka trzyma cene z momentu dodania (price-protected),
    stan magazynu zawsze sprawdzany na zywo (inventory-live).
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)

    # query - odczyt
    def get_summary(self, user_id: int) -> Dict[str, Any]:
        items = self.repo.get_cart_items(user_id)

        return {
            "items": items,
            "summary": {
                "subtotal": line_subtotal((i.price, i.quantity) for i in items),
                "total_items": sum(i.quantity for i in items),
                "item_count": len(items),
            },
        }

    # commands
    def add_item(self, user_id: int, product_id: int, quantity: int) -> Dict[str, Any]:
        product = self.products.get_product(product_id)
        if not product:
            raise NotFoundError("Product not found")

        # 0 na stanie to "brak towaru", nie "bez limitu"
        if product.inventory < quantity:
            self._reject_add(user_id, product, quantity)

        for attempt in range(2):
            try:
                cart_item_id, new_quantity = self._add_item_once(user_id, product, quantity)
                break
            except IntegrityError as e:
                # rownolegle pierwsze dodanie tego produktu, drugie podejscie trafi w istniejaca linie
                if attempt:
                    logger.warning("Cart add conflicted", user_id=user_id, product_id=product_id, error=str(e))
                    raise ConflictError("Your cart changed in the meantime, please retry") from e
            except SQLAlchemyError as e:
                logger.error("Cart add failed", user_id=user_id, product_id=product_id, error=str(e))
                raise PersistenceFailure() from e

        logger.info("Cart line saved", user_id=user_id, product_id=product_id, quantity=new_quantity)

        return {"cart_item_id": cart_item_id, "quantity": new_quantity, "removed": False}

    @db_retry()
    def _add_item_once(self, user_id: int, product: ProductModel, quantity: int) -> Tuple[int, int]:
        try:
            item = self.repo.get_cart_item(user_id, product.id)
            if item is None:
                item = self.repo.add_cart_item(
                    CartItemModel(
                        user_id=user_id,
                        product_id=product.id,
                        quantity=quantity,
                        price=product.price,
                    )
                )
                new_quantity = quantity
            else:
                # istniejaca linia zachowuje swoja cene snapshot, ilosc rosnie w bazie
                new_quantity = self.repo.increment_quantity(item.id, quantity)
                if new_quantity is None:
                    self._reject_add(user_id, product, quantity)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        return item.id, new_quantity

    def _reject_add(self, user_id: int, product: ProductModel, quantity: int) -> NoReturn:
        logger.info(
            "Cart add rejected, not enough stock",
            user_id=user_id,
            product_id=product.id,
            requested=quantity,
            inventory=product.inventory,
        )
        raise InsufficientInventory(product.name)

    def update_quantity(self, user_id: int, cart_item_id: int, quantity: int) -> Dict[str, Any]:
        item = self.repo.get_cart_item_by_id(user_id, cart_item_id)
        if not item:
            raise NotFoundError("Cart item not found")

        try:
            if quantity == 0:
                self.repo.delete_cart_item(item)
                self.db.commit()
                logger.info("Cart line removed", user_id=user_id, cart_item_id=cart_item_id)
                return {"cart_item_id": cart_item_id, "quantity": 0, "removed": True}

            product = self.products.get_product(item.product_id)
            if product.inventory < quantity:
                raise InsufficientInventory(product.name)

            item.quantity = quantity
            item.updated_at = datetime.now(timezone.utc)
            self.repo.add_cart_item(item)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Cart update failed", user_id=user_id, cart_item_id=cart_item_id, error=str(e))
            raise PersistenceFailure() from e

        logger.info("Cart line updated", user_id=user_id, cart_item_id=cart_item_id, quantity=quantity)

        return {"cart_item_id": cart_item_id, "quantity": quantity, "removed": False}

    def clear(self, user_id: int) -> int:
        try:
            removed = self.repo.clear_cart(user_id)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Cart clear failed", user_id=user_id, error=str(e))
            raise PersistenceFailure() from e

        logger.info("Cart cleared", user_id=user_id, removed=removed)
        return removed
