from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from hapibara.api.deps import current_user_id
from hapibara.data.database import get_db
from hapibara.domain.schemas import ApiResponse, UserCreate, UserRead
from hapibara.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=ApiResponse[UserRead], status_code=201)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    service = UserService(db)
    return ApiResponse[UserRead](data=service.create_user(payload))


@router.get("/me", response_model=ApiResponse[UserRead])
def get_me(user_id: int = Depends(current_user_id), db: Session = Depends(get_db)):
    service = UserService(db)
    return ApiResponse[UserRead](data=service.get_user(user_id))
