# hapibara/api/routers/orders.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from hapibara.api.deps import current_user_id
from hapibara.data.database import get_db
from hapibara.domain.schemas import ApiResponse, OrderCreate, OrderListOut, OrderOut, OrderPlacedOut
from hapibara.services.order_service import OrderService
from hapibara.utils.settings import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

router = APIRouter(prefix="/orders", tags=["orders"])


def get_service(db: Session):
    return OrderService(db)


@router.post("", response_model=ApiResponse[OrderPlacedOut])
def place_order(
    payload: OrderCreate,
    user_id: int = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    """
    Sklada zamowienie z calego koszyka uzytkownika.
    Wszystko albo nic: przy bledzie koszyk i stany zostaja bez zmian.
    """
    address = payload.shipping_address.model_dump(by_alias=True) if payload.shipping_address else None
    placed = get_service(db).place_order(
        user_id=user_id,
        shipping_address=address,
        payment_method=payload.payment_method,
        notes=payload.notes,
    )
    return ApiResponse[OrderPlacedOut](message="Order placed successfully!", data=placed)


@router.get("", response_model=ApiResponse[OrderListOut])
def list_orders(
    status: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    user_id: int = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    orders = get_service(db).list_orders(user_id, status=status, page=page, limit=limit)
    return ApiResponse[OrderListOut](data=OrderListOut.model_validate(orders))


@router.get("/{order_id}", response_model=ApiResponse[OrderOut])
def get_order(
    order_id: int,
    user_id: int = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    order = get_service(db).get_order(user_id, order_id)
    return ApiResponse[OrderOut](data=OrderOut.model_validate(order))
