# app/utils/retry.py
from tenacity import (
    Retrying,
    retry,
    stop_after_attempt,
    wait_exponential,
    wait_random,
    retry_if_exception_type,
)
from sqlalchemy.exc import IntegrityError
import redis

from app.domain.errors import StockConflict


def redis_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        retry=retry_if_exception_type(redis.RedisError),
    )


def conflict_retrying(attempts: int) -> Retrying:
    """
    Ponawianie calej transakcji checkoutu gdy:
    - compare-and-set na stanie magazynowym nie trafil (StockConflict)
    - wygenerowany numer zamowienia juz istnieje (IntegrityError)
    """
    return Retrying(
        reraise=True,
        stop=stop_after_attempt(attempts),
        wait=wait_random(min=0, max=0.05),
        retry=retry_if_exception_type((StockConflict, IntegrityError)),
    )
