# hapibara/services/order_service.py
import math
from typing import Any, Dict

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from hapibara.data.models.order import OrderModel
from hapibara.data.models.order_item import OrderItemModel
from hapibara.domain.errors import (
    EmptyCart,
    InsufficientInventory,
    MissingShippingAddress,
    NotFoundError,
    PersistenceFailure,
    ValidationError,
)
from hapibara.domain.pricing import compute_totals, generate_order_number
from hapibara.domain.schemas import OrderStatus, PaymentStatus
from hapibara.repos.cart_repo import CartRepo
from hapibara.repos.order_repo import OrderRepo
from hapibara.repos.product_repo import ProductRepo
from hapibara.utils.logging import get_logger
from hapibara.utils.retry import db_retry
from hapibara.utils.settings import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

logger = get_logger(__name__)


class OrderService:
    """
    Serwis odpowiedzialny za domene zamowien.
    Zamowienie powstaje z koszyka w jednej transakcji:
    zamowienie + pozycje + zmniejszenie stanow + wyczyszczenie koszyka,
    albo nic.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = OrderRepo(db)
        self.cart = CartRepo(db)
        self.products = ProductRepo(db)

    def place_order(
        self,
        user_id: int,
        shipping_address: Dict[str, Any] | None,
        payment_method: str = "stripe",
        notes: str | None = None,
    ) -> Dict[str, Any]:
        """
        Use Case: zlozenie zamowienia z koszyka.

        1. Pobiera koszyk z aktualnymi stanami produktow
        2. Waliduje stany dla wszystkich linii zanim cokolwiek zapisze
        3. Liczy sumy (Decimal)
        4. Zapisuje zamowienie i pozycje
        5. Zmniejsza stany warunkowym UPDATE
        6. Czysci koszyk
        Commit raz na koncu, kazdy blad = rollback calosci.
        """
        if not shipping_address:
            raise MissingShippingAddress()

        try:
            order = self._place_order_once(user_id, shipping_address, payment_method, notes)
        except SQLAlchemyError as e:
            logger.error("Order placement failed, rolled back", user_id=user_id, error=str(e))
            raise PersistenceFailure("Failed to create order") from e

        logger.info(
            "Order placed",
            user_id=user_id,
            order_id=order.id,
            order_number=order.order_number,
            total=str(order.total),
        )

        return {
            "order_id": order.id,
            "order_number": order.order_number,
            "subtotal": order.subtotal,
            "shipping": order.shipping,
            "tax": order.tax,
            "total": order.total,
            "status": order.status,
        }

    @db_retry()
    def _place_order_once(
        self,
        user_id: int,
        shipping_address: Dict[str, Any],
        payment_method: str,
        notes: str | None,
    ) -> OrderModel:
        try:
            items = self.cart.get_cart_items(user_id)
            if not items:
                raise EmptyCart()

            for item in items:
                if item.product.inventory < item.quantity:
                    logger.info(
                        "Order rejected, not enough stock",
                        user_id=user_id,
                        product_id=item.product_id,
                        requested=item.quantity,
                        inventory=item.product.inventory,
                    )
                    raise InsufficientInventory(item.product.name)

            totals = compute_totals((i.price, i.quantity) for i in items)

            order = self.repo.create_order(
                OrderModel(
                    user_id=user_id,
                    order_number=generate_order_number(),
                    status=OrderStatus.PENDING.value,
                    payment_status=PaymentStatus.PENDING.value,
                    payment_method=payment_method,
                    subtotal=totals.subtotal,
                    shipping=totals.shipping,
                    tax=totals.tax,
                    total=totals.total,
                    shipping_address=shipping_address,
                    notes=notes,
                )
            )

            self.repo.add_order_items(
                [
                    OrderItemModel(
                        order_id=order.id,
                        product_id=i.product_id,
                        product_name=i.product.name,
                        product_slug=i.product.slug,
                        quantity=i.quantity,
                        price=i.price,
                    )
                    for i in items
                ]
            )

            # rosnaco po id produktu, stala kolejnosc blokad miedzy transakcjami
            for item in sorted(items, key=lambda i: i.product_id):
                # walidacja wyzej mogla przegrac wyscig z innym zamowieniem,
                # dopiero ten UPDATE jest rozstrzygajacy
                if not self.products.decrement_inventory(item.product_id, item.quantity):
                    logger.warning(
                        "Inventory changed during checkout",
                        user_id=user_id,
                        product_id=item.product_id,
                        requested=item.quantity,
                    )
                    raise InsufficientInventory(item.product.name)

            self.cart.clear_cart(user_id)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        return order

    def list_orders(
        self,
        user_id: int,
        status: str | None = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> Dict[str, Any]:
        """Use Case: historia zamowien (Query), najnowsze pierwsze."""
        if status is not None and status not in {s.value for s in OrderStatus}:
            raise ValidationError(f"Unknown order status: {status}")
        if page < 1 or not 1 <= limit <= MAX_PAGE_SIZE:
            raise ValidationError("Invalid pagination parameters")

        orders = self.repo.list_orders(user_id, status, offset=(page - 1) * limit, limit=limit)
        total = self.repo.count_orders(user_id, status)
        total_pages = math.ceil(total / limit) if total else 0

        return {
            "orders": [self._order_out(o) for o in orders],
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "total_pages": total_pages,
                "has_more": page < total_pages,
            },
        }

    def get_order(self, user_id: int, order_id: int) -> Dict[str, Any]:
        """Use Case: pobranie zamowienia (Query). Cudze zamowienie == nie istnieje."""
        order = self.repo.get_order(order_id, user_id)

        if not order:
            raise NotFoundError("Order not found")

        return self._order_out(order)

    @staticmethod
    def _order_out(order: OrderModel) -> Dict[str, Any]:
        return {
            "id": order.id,
            "order_number": order.order_number,
            "status": order.status,
            "payment_status": order.payment_status,
            "payment_method": order.payment_method,
            "subtotal": order.subtotal,
            "shipping": order.shipping,
            "tax": order.tax,
            "total": order.total,
            "shipping_address": order.shipping_address,
            "notes": order.notes,
            "tracking_number": order.tracking_number,
            "created_at": order.created_at,
            "updated_at": order.updated_at,
            "items": order.items,
            "item_count": len(order.items),
        }
