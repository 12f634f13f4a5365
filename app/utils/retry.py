# app/utils/retry.py
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type
import redis

from app.domain.errors import ConcurrencyConflict
from app.utils.settings import CART_CONFLICT_RETRIES


def redis_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        retry=retry_if_exception_type(redis.RedisError),
    )


def conflict_retry(attempts: int | None = None):
    # 50ms, 100ms, 200ms, 400ms - konflikt znika gdy druga operacja zrobi commit
    return retry(
        reraise=True,
        stop=stop_after_attempt(attempts or CART_CONFLICT_RETRIES),
        wait=wait_exponential(multiplier=0.05, min=0.05, max=1),
        retry=retry_if_exception_type(ConcurrencyConflict),
    )
