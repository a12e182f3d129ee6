from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hapibara.data.models.user import UserModel
from hapibara.domain.errors import ConflictError, NotFoundError
from hapibara.domain.schemas import UserCreate, UserRead
from hapibara.repos.user_repo import UserRepo
from hapibara.utils.logging import get_logger

logger = get_logger(__name__)


class UserService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = UserRepo(db)

    def create_user(self, payload: UserCreate) -> UserRead:
        # idempotentne po emailu
        existing = self.repo.get_user_by_email(payload.email)
        if existing:
            return UserRead.model_validate(existing)

        try:
            created = self.repo.create_user(UserModel(email=payload.email, name=payload.name, kindness_score=0))
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError("User with this email already exists") from e

        logger.info("User registered", user_id=created.id)
        return UserRead.model_validate(created)

    def get_user(self, user_id: int) -> UserRead:
        user = self.repo.get_user(user_id)
        if not user:
            raise NotFoundError("User not found")
        return UserRead.model_validate(user)
