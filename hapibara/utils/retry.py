# hapibara/utils/retry.py
from sqlalchemy.exc import OperationalError
from tenacity import retry, stop_after_attempt, wait_random_exponential, retry_if_exception_type

from hapibara.utils import settings


def db_retry():
    # OperationalError = lock timeout / deadlock / serialization failure,
    # transakcja jest juz wycofana wiec mozna ja powtorzyc w calosci
    return retry(
        reraise=True,
        stop=stop_after_attempt(settings.DB_RETRY_ATTEMPTS),
        wait=wait_random_exponential(multiplier=0.05, max=1),
        retry=retry_if_exception_type(OperationalError),
    )
