# hapibara/api/routers/cart.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from hapibara.api.deps import current_user_id
from hapibara.data.database import get_db
from hapibara.domain.schemas import (
    ApiResponse,
    CartCleared,
    CartItemIn,
    CartItemUpdate,
    CartLineChanged,
    CartOut,
)
from hapibara.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["cart"])


def get_service(db: Session):
    return CartService(db)


@router.get("", response_model=ApiResponse[CartOut])
def get_cart(
    user_id: int = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    cart = get_service(db).get_summary(user_id)
    return ApiResponse[CartOut](data=CartOut.model_validate(cart))


@router.post("", response_model=ApiResponse[CartLineChanged])
def add_to_cart(
    payload: CartItemIn,
    user_id: int = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    line = get_service(db).add_item(user_id, payload.product_id, payload.quantity)
    return ApiResponse[CartLineChanged](message="Added to cart!", data=line)


@router.put("", response_model=ApiResponse[CartLineChanged])
def update_cart_item(
    payload: CartItemUpdate,
    user_id: int = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    line = get_service(db).update_quantity(user_id, payload.cart_item_id, payload.quantity)
    message = "Item removed from cart" if line["removed"] else "Cart updated!"
    return ApiResponse[CartLineChanged](message=message, data=line)


@router.delete("", response_model=ApiResponse[CartCleared])
def clear_cart(
    user_id: int = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    removed = get_service(db).clear(user_id)
    return ApiResponse[CartCleared](message="Cart cleared successfully", data={"removed": removed})
