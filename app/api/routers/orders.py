# app/api/routers/orders.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.data.database import get_db
from app.domain.schemas import OrderOut
from app.services.checkout_service import CheckoutService
from app.services.lock_service import get_lock_service

router = APIRouter(prefix="/orders", tags=["orders"])


def get_service(db: Session = Depends(get_db), lock_service=Depends(get_lock_service)) -> CheckoutService:
    return CheckoutService(db=db, lock_service=lock_service)


@router.get("/{order_id}", response_model=OrderOut)
def get_order(order_id: int, svc: CheckoutService = Depends(get_service)):
    """
    Pobiera szczegoly zamowienia.
    """
    return svc.get_order(order_id)


@router.post("/{order_id}/cancel", response_model=OrderOut)
def cancel_order(order_id: int, svc: CheckoutService = Depends(get_service)):
    """
    Anuluje zamowienie i zwraca stan do katalogu.
    """
    return svc.cancel_order(order_id)
