# hapibara/repos/order_repo.py
from typing import List

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from hapibara.data.models.order import OrderModel
from hapibara.data.models.order_item import OrderItemModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def create_order(self, order: OrderModel) -> OrderModel:
        # flush zamiast commit, transakcja konczy sie w serwisie
        self.db.add(order)
        self.db.flush()
        return order

    def add_order_items(self, items: List[OrderItemModel]) -> None:
        self.db.add_all(items)
        self.db.flush()

    def get_order(self, order_id: int, user_id: int) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel)
            .options(selectinload(OrderModel.items))
            .where(OrderModel.id == order_id, OrderModel.user_id == user_id)
        ).scalar_one_or_none()

    def list_orders(self, user_id: int, status: str | None, offset: int, limit: int) -> List[OrderModel]:
        stmt = (
            select(OrderModel)
            .options(selectinload(OrderModel.items))
            .where(OrderModel.user_id == user_id)
        )
        if status:
            stmt = stmt.where(OrderModel.status == status)

        stmt = stmt.order_by(OrderModel.created_at.desc(), OrderModel.id.desc()).offset(offset).limit(limit)
        return list(self.db.execute(stmt).scalars().all())

    def count_orders(self, user_id: int, status: str | None = None) -> int:
        stmt = select(func.count(OrderModel.id)).where(OrderModel.user_id == user_id)
        if status:
            stmt = stmt.where(OrderModel.status == status)
        return self.db.execute(stmt).scalar_one()
