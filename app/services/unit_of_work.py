# app/services/unit_of_work.py
from contextlib import contextmanager
from typing import Callable, TypeVar

from redis.exceptions import RedisError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.errors import CartServiceError, ConcurrencyConflict, StorageFailure
from app.services.lock_service import new_lock_token
from app.utils.retry import conflict_retry
from app.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@contextmanager
def transaction(db: Session, operation: str, customer_id: int | None = None):
    """
    Jedna transakcja = jedna operacja.
    -bledy domenowe: rollback i dalej ten sam blad
    -IntegrityError na koszyku (wyscig o unique): ConcurrencyConflict, do ponowienia
    -reszta SQLAlchemyError: rollback i StorageFailure
    """
    try:
        yield
        db.commit()
    except CartServiceError:
        db.rollback()
        raise
    except IntegrityError as e:
        db.rollback()
        if customer_id is None:
            logger.error(f"{operation} failed on integrity error: {e}")
            raise StorageFailure(operation, e) from e
        raise ConcurrencyConflict(customer_id, "concurrent write on the same cart") from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"{operation} failed on storage error: {e}")
        raise StorageFailure(operation, e) from e


def _run_once(db: Session, lock_service, customer_id: int, operation: str, fn: Callable[[], T]) -> T:
    token = new_lock_token()
    try:
        acquired = lock_service.acquire_cart_lock(customer_id, token)
    except RedisError as e:
        logger.error(f"{operation}: lock backend unavailable: {e}")
        raise StorageFailure(f"{operation} (lock)", e) from e

    if not acquired:
        raise ConcurrencyConflict(customer_id, "cart is locked by another operation")

    try:
        with transaction(db, operation, customer_id=customer_id):
            return fn()
    finally:
        try:
            lock_service.release_cart_lock(customer_id, token)
        except RedisError as e:
            # lock i tak wygasnie po TTL
            logger.warning(f"Failed to release cart lock of customer {customer_id}: {e}")


def run_serialized(
    db: Session,
    lock_service,
    customer_id: int,
    operation: str,
    fn: Callable[[], T],
    attempts: int | None = None,
) -> T:
    """Wykonuje fn pod lockiem koszyka klienta, konflikty ponawiane przez tenacity."""
    attempt = conflict_retry(attempts)(_run_once)
    try:
        return attempt(db, lock_service, customer_id, operation, fn)
    except ConcurrencyConflict:
        logger.warning(f"{operation} for customer {customer_id} gave up after retries")
        raise
