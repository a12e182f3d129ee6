# hapibara/api/deps.py
from fastapi import Depends, Header
from sqlalchemy.orm import Session

from hapibara.data.database import get_db
from hapibara.domain.errors import AuthenticationRequired
from hapibara.repos.user_repo import UserRepo
from hapibara.utils.logging import add_context

USER_ID_HEADER = "X-User-Id"


def get_current_user_id(
    x_user_id: str | None = Header(default=None, alias=USER_ID_HEADER),
    db: Session = Depends(get_db),
) -> int:
    """
    Zweryfikowany id uzytkownika. Sesje/logowanie obsluguje warstwa przed
    serwisem, tutaj dostajemy tylko naglowek X-User-Id.
    """
    if not x_user_id or not x_user_id.isdigit():
        raise AuthenticationRequired()

    user_id = int(x_user_id)
    if not UserRepo(db).exists(user_id):
        raise AuthenticationRequired()

    # zamknij transakcje odczytu, handler dostaje czysta sesje
    db.rollback()
    return user_id


async def current_user_id(user_id: int = Depends(get_current_user_id)) -> int:
    # async: bind w kontekscie requestu, sync dependency dziala na kopii kontekstu w threadpoolu
    add_context(user_id=user_id)
    return user_id
