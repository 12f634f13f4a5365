#app/api/routers/carts.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.data.database import get_db
from app.domain.schemas import (
    CartOut,
    ItemIn,
    OrderOut,
    QuantityIn,
)
from app.services.cart_service import CartService
from app.services.checkout_service import CheckoutService
from app.services.lock_service import get_lock_service

router = APIRouter(prefix="/cart", tags=["cart"])


def get_service(db: Session = Depends(get_db), lock_service=Depends(get_lock_service)) -> CartService:
    return CartService(db=db, lock_service=lock_service)


def get_checkout_service(db: Session = Depends(get_db), lock_service=Depends(get_lock_service)) -> CheckoutService:
    return CheckoutService(db=db, lock_service=lock_service)


@router.get("/{customer_id}", response_model=CartOut)
def get_cart(customer_id: int, svc: CartService = Depends(get_service)):
    return svc.get_cart(customer_id)


@router.post("/{customer_id}/items", response_model=CartOut)
def add_item(customer_id: int, payload: ItemIn, svc: CartService = Depends(get_service)):
    return svc.add_item(
        customer_id=customer_id,
        product_id=payload.product_id,
        quantity=payload.quantity,
    )


@router.put("/{customer_id}/items/{product_id}", response_model=CartOut)
def update_item_quantity(
    customer_id: int,
    product_id: int,
    payload: QuantityIn,
    svc: CartService = Depends(get_service),
):
    return svc.update_item_quantity(customer_id, product_id, payload.quantity)


@router.delete("/{customer_id}/items/{product_id}", response_model=CartOut)
def remove_item(customer_id: int, product_id: int, svc: CartService = Depends(get_service)):
    return svc.remove_item(customer_id, product_id)


@router.delete("/{customer_id}", response_model=CartOut)
def clear_cart(customer_id: int, svc: CartService = Depends(get_service)):
    return svc.clear_cart(customer_id)


@router.post("/{customer_id}/checkout", response_model=OrderOut, status_code=201)
def checkout(customer_id: int, svc: CheckoutService = Depends(get_checkout_service)):
    """
    Tworzy zamowienie z koszyka klienta.
    Stan magazynu schodzi tutaj, koszyk jest usuwany.
    """
    return svc.checkout(customer_id)
