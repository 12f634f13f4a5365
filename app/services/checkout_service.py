# app/services/checkout_service.py
from typing import Any, Dict

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.data.models.order import OrderItemModel, OrderModel
from app.domain.errors import (
    CartNotFound,
    EmptyCart,
    InsufficientStock,
    OrderNotCancellable,
    OrderNotFound,
    StockUnderflow,
    StorageFailure,
)
from app.domain.pricing import cart_total, line_subtotal, to_money
from app.repos.cart_repo import CartRepo
from app.repos.order_repo import OrderRepo
from app.repos.product_repo import ProductRepo
from app.services.unit_of_work import run_serialized, transaction
from app.utils.logging import get_logger

logger = get_logger(__name__)

PLACED = "PLACED"
CANCELLED = "CANCELLED"


def order_to_dict(order: OrderModel) -> Dict[str, Any]:
    return {
        "id": order.id,
        "customer_id": order.customer_id,
        "status": order.status,
        "total_amount": to_money(order.total_amount),
        "created_at": order.created_at,
        "items": [
            {
                "product_id": i.product_id,
                "product_name": i.product_name,
                "product_price": to_money(i.product_price),
                "quantity": i.quantity,
                "subtotal": to_money(i.subtotal),
            }
            for i in order.items
        ],
    }


class CheckoutService:
    """
    Serwis odpowiedzialny za zamowienia.
    Tu (i tylko tu) stan magazynu faktycznie schodzi - przez adjust_stock.
    Separacja od CartService: koszyk tylko waliduje, checkout commituje.
    """

    def __init__(self, db: Session, lock_service, conflict_retries: int | None = None):
        self.db = db
        self.carts = CartRepo(db)
        self.products = ProductRepo(db)
        self.repo = OrderRepo(db)
        self.lock_service = lock_service
        self.conflict_retries = conflict_retries

    def checkout(self, customer_id: int) -> Dict[str, Any]:
        """
        Use Case: zamowienie z koszyka.

        1. Koszyk musi istniec i miec pozycje
        2. adjust_stock(-ilosc) dla kazdej pozycji, po product_id (staly porzadek lockow)
        3. Zamowienie z kopia pozycji, koszyk usuwany
        Brak stanu na ktorejkolwiek pozycji - rollback calosci.
        """
        return run_serialized(
            self.db,
            self.lock_service,
            customer_id,
            "checkout",
            lambda: self._checkout(customer_id),
            attempts=self.conflict_retries,
        )

    def _checkout(self, customer_id: int) -> Dict[str, Any]:
        cart = self.carts.get_cart_by_customer(customer_id)
        if not cart:
            raise CartNotFound(customer_id)

        items = sorted(self.carts.get_cart_items(cart.id), key=lambda i: i.product_id)
        if not items:
            raise EmptyCart(customer_id)

        for item in items:
            try:
                self.products.adjust_stock(item.product_id, -item.quantity)
            except StockUnderflow as e:
                logger.info(f"Checkout klienta {customer_id} odrzucony, brak stanu produktu {item.product_id}")
                raise InsufficientStock(item.product_id, requested=item.quantity, available=e.available) from e

        order = OrderModel(
            customer_id=customer_id,
            status=PLACED,
            total_amount=cart_total(line_subtotal(i.product_price, i.quantity) for i in items),
            items=[
                OrderItemModel(
                    product_id=i.product_id,
                    product_name=i.product_name,
                    product_price=to_money(i.product_price),
                    quantity=i.quantity,
                    subtotal=line_subtotal(i.product_price, i.quantity),
                )
                for i in items
            ],
        )
        created = self.repo.create_order(order)
        self.carts.delete_cart(cart)

        logger.info(f"Order {created.id} created from cart {cart.id}, total {created.total_amount}")
        return order_to_dict(created)

    def get_order(self, order_id: int) -> Dict[str, Any]:
        try:
            order = self.repo.get_order(order_id)
        except SQLAlchemyError as e:
            raise StorageFailure("get_order", e) from e
        if not order:
            raise OrderNotFound(order_id)
        return order_to_dict(order)

    def cancel_order(self, order_id: int) -> Dict[str, Any]:
        """Use Case: anulowanie zamowienia, stan wraca do katalogu (adjust_stock +ilosc)."""
        with transaction(self.db, "cancel_order"):
            order = self.repo.get_order(order_id)
            if not order:
                raise OrderNotFound(order_id)

            # warunek na status, dwa rownolegle cancel nie zwroca stanu dwa razy
            rowcount = self.db.execute(
                update(OrderModel)
                .where(OrderModel.id == order_id, OrderModel.status == PLACED)
                .values(status=CANCELLED)
                .execution_options(synchronize_session=False)
            ).rowcount
            if rowcount == 0:
                raise OrderNotCancellable(order_id, order.status)

            for item in sorted(order.items, key=lambda i: i.product_id):
                self.products.adjust_stock(item.product_id, item.quantity)

            order = self.repo.get_order(order_id)
            logger.info(f"Order {order_id} cancelled, stock released")
            result = order_to_dict(order)
        return result
