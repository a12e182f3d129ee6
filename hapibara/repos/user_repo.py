from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from hapibara.data.models.user import UserModel


class UserRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: int) -> UserModel | None:
        return self.db.execute(
            select(UserModel)
            .where(UserModel.id == user_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def get_user_by_email(self, email: str) -> UserModel | None:
        return self.db.execute(
            select(UserModel).where(UserModel.email == email)
        ).scalar_one_or_none()

    def exists(self, user_id: int) -> bool:
        return self.db.execute(
            select(UserModel.id).where(UserModel.id == user_id)
        ).scalar_one_or_none() is not None

    def create_user(self, user: UserModel) -> UserModel:
        self.db.add(user)
        self.db.flush()
        return user

    def increment_kindness_score(self, user_id: int, delta: int) -> bool:
        # score = score + delta w jednym UPDATE, bez read-modify-write
        result = self.db.execute(
            update(UserModel)
            .where(UserModel.id == user_id)
            .values(
                kindness_score=UserModel.kindness_score + delta,
                updated_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
