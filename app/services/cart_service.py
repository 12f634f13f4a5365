from datetime import datetime, timezone
from typing import Dict, Any, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.data.models.cart import CartModel
from app.data.models.cart_item import CartItemModel
from app.data.models.product import ProductModel
from app.domain.errors import (
    CartItemNotFound,
    CartNotFound,
    ConcurrencyConflict,
    InsufficientStock,
    InvalidQuantity,
    ProductNotFound,
    StorageFailure,
)
from app.domain.pricing import ZERO, cart_total, line_subtotal, to_money
from app.repos.cart_repo import CartRepo
from app.repos.product_repo import ProductRepo
from app.services.unit_of_work import run_serialized
from app.utils.logging import get_logger

logger = get_logger(__name__)


def empty_cart(customer_id: int) -> Dict[str, Any]:
    return {
        "cart_id": None,
        "customer_id": customer_id,
        "items": [],
        "total_amount": ZERO,
        "created_at": None,
        "updated_at": None,
    }


def cart_to_dict(cart: CartModel, items: List[CartItemModel]) -> Dict[str, Any]:
    #dict przeksztalcany w jsona
    return {
        "cart_id": cart.id,
        "customer_id": cart.customer_id,
        "items": [
            {
                "id": i.id,
                "product_id": i.product_id,
                "product_name": i.product_name,
                "product_price": to_money(i.product_price),
                "quantity": i.quantity,
                "subtotal": to_money(i.subtotal),
            }
            for i in items
        ],
        "total_amount": to_money(cart.total_amount),
        "created_at": cart.created_at,
        "updated_at": cart.updated_at,
    }


def _check_quantity(quantity, allow_non_positive: bool = False) -> None:
    # bool to tez int w pythonie, True nie jest iloscia
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidQuantity(quantity)
    if not allow_non_positive and quantity <= 0:
        raise InvalidQuantity(quantity)


class CartService:
    """
    Silnik spojnosci koszyka - jedyne miejsce ktore zmienia carts / cart_items.
    commands (add, update, remove, clear) ida pod lockiem klienta w jednej transakcji
    query (get) tylko odczyt, nigdy nie tworzy koszyka

    Polityka stanu magazynu: optymistyczna. Kazda komenda waliduje ilosc wzgledem
    aktualnego stock_quantity, nic nie jest rezerwowane - stan schodzi dopiero przy checkout.
    """

    def __init__(self, db: Session, lock_service, conflict_retries: int | None = None):
        self.db = db
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)
        self.lock_service = lock_service
        self.conflict_retries = conflict_retries

    #query - odczyt
    def get_cart(self, customer_id: int) -> Dict[str, Any]:
        try:
            cart = self.repo.get_cart_by_customer(customer_id)
            if not cart:
                return empty_cart(customer_id)
            return cart_to_dict(cart, self.repo.get_cart_items(cart.id))
        except SQLAlchemyError as e:
            logger.error(f"get_cart failed for customer {customer_id}: {e}")
            raise StorageFailure("get_cart", e) from e

    #commands
    def add_item(self, customer_id: int, product_id: int, quantity: int) -> Dict[str, Any]:
        _check_quantity(quantity)
        return self._serialized(
            customer_id,
            "add_item",
            lambda: self._add_item(customer_id, product_id, quantity),
        )

    def update_item_quantity(self, customer_id: int, product_id: int, new_quantity: int) -> Dict[str, Any]:
        _check_quantity(new_quantity, allow_non_positive=True)
        return self._serialized(
            customer_id,
            "update_item_quantity",
            lambda: self._update_item_quantity(customer_id, product_id, new_quantity),
        )

    def remove_item(self, customer_id: int, product_id: int) -> Dict[str, Any]:
        return self._serialized(
            customer_id,
            "remove_item",
            lambda: self._remove_item(customer_id, product_id),
        )

    def clear_cart(self, customer_id: int) -> Dict[str, Any]:
        return self._serialized(
            customer_id,
            "clear_cart",
            lambda: self._clear_cart(customer_id),
        )

    def _serialized(self, customer_id: int, operation: str, fn):
        return run_serialized(
            self.db,
            self.lock_service,
            customer_id,
            operation,
            fn,
            attempts=self.conflict_retries,
        )

    def _add_item(self, customer_id: int, product_id: int, quantity: int) -> Dict[str, Any]:
        product = self._fresh_product(product_id)

        cart = self.repo.get_cart_by_customer(customer_id)
        existing_item = self.repo.get_cart_item(cart.id, product_id) if cart else None
        existing_quantity = existing_item.quantity if existing_item else 0

        self._check_stock(product, existing_quantity + quantity)

        if not cart:
            cart = self.repo.create_cart(customer_id)
            logger.info(f"Utworzono koszyk {cart.id} dla klienta {customer_id}")

        if existing_item:
            logger.info(
                f"Produkt {product_id} juz jest w koszyku {cart.id}, zwiekszam ilosc "
                f"z {existing_item.quantity} do {existing_item.quantity + quantity}"
            )
            # cena i nazwa zostaja z pierwszego dodania (snapshot)
            existing_item.quantity += quantity
        else:
            logger.info(f"Dodaje nowy produkt {product_id} do koszyka {cart.id}")
            self.repo.add_cart_item(
                CartItemModel(
                    cart_id=cart.id,
                    product_id=product_id,
                    product_name=product.name,
                    product_price=to_money(product.price),
                    quantity=quantity,
                    subtotal=line_subtotal(product.price, quantity),
                )
            )

        return self._recompute_and_commit(cart)

    def _update_item_quantity(self, customer_id: int, product_id: int, new_quantity: int) -> Dict[str, Any]:
        cart = self._require_cart(customer_id)
        item = self._require_item(cart, customer_id, product_id)

        if new_quantity <= 0:
            logger.info(f"Ilosc {new_quantity} dla produktu {product_id}, usuwam pozycje z koszyka {cart.id}")
            self.repo.delete_cart_item(item)
        else:
            product = self._fresh_product(product_id)
            self._check_stock(product, new_quantity)
            logger.info(f"Zmiana ilosci produktu {product_id} w koszyku {cart.id}: {item.quantity} -> {new_quantity}")
            item.quantity = new_quantity

        return self._recompute_and_commit(cart)

    def _remove_item(self, customer_id: int, product_id: int) -> Dict[str, Any]:
        cart = self._require_cart(customer_id)
        item = self._require_item(cart, customer_id, product_id)

        logger.info(f"Usuwanie produktu {product_id} z koszyka {cart.id}")
        self.repo.delete_cart_item(item)

        return self._recompute_and_commit(cart)

    def _clear_cart(self, customer_id: int) -> Dict[str, Any]:
        cart = self._require_cart(customer_id)

        logger.info(f"Czyszczenie koszyka {cart.id} klienta {customer_id}")
        self.repo.delete_cart(cart)

        return empty_cart(customer_id)

    def _recompute_and_commit(self, cart: CartModel) -> Dict[str, Any]:
        """
        Przelicza subtotale i total od zera z aktualnych pozycji,
        potem bump wersji koszyka (optimistic locking).
        """
        items = self.repo.get_cart_items(cart.id)
        for item in items:
            item.subtotal = line_subtotal(item.product_price, item.quantity)
        total = cart_total(i.subtotal for i in items)

        # np w bazie update carts set version 2 where id 1 and version 1
        rowcount = self.repo.update_cart_version(
            cart_id=cart.id,
            old_version=cart.version,
            new_data={
                "version": cart.version + 1,
                "total_amount": total,
                "updated_at": datetime.now(timezone.utc),
            },
        )
        if rowcount == 0:
            raise ConcurrencyConflict(cart.customer_id, "cart version changed")

        fresh = self.repo.get_cart_by_customer(cart.customer_id)
        logger.info(f"Koszyk {fresh.id} zapisany, total {total}, nowa wersja: {fresh.version}")
        return cart_to_dict(fresh, items)

    def _fresh_product(self, product_id: int) -> ProductModel:
        product = self.products.get_product(product_id, for_update=True)
        if not product:
            logger.info(f"Produkt {product_id} nie istnieje")
            raise ProductNotFound(product_id)
        return product

    def _check_stock(self, product: ProductModel, requested: int) -> None:
        if requested > product.stock_quantity:
            logger.info(
                f"Za malo produktu {product.id} na stanie: "
                f"zadane {requested}, dostepne {product.stock_quantity}"
            )
            raise InsufficientStock(product.id, requested=requested, available=product.stock_quantity)

    def _require_cart(self, customer_id: int) -> CartModel:
        cart = self.repo.get_cart_by_customer(customer_id)
        if not cart:
            raise CartNotFound(customer_id)
        return cart

    def _require_item(self, cart: CartModel, customer_id: int, product_id: int) -> CartItemModel:
        item = self.repo.get_cart_item(cart.id, product_id)
        if not item:
            raise CartItemNotFound(customer_id, product_id)
        return item
