# app/repos/cart_repo.py
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from app.data.models.cart import CartModel
from app.data.models.cart_item import CartItemModel


class CartRepo:
    """Jeden koszyk na klienta, pozycje unikalne po (cart_id, product_id)."""

    def __init__(self, db: Session):
        self.db = db

    def get_cart_by_customer(self, customer_id: int) -> CartModel | None:
        stmt = (
            select(CartModel)
            .where(CartModel.customer_id == customer_id)
            .execution_options(populate_existing=True)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def create_cart(self, customer_id: int) -> CartModel:
        now = datetime.now(timezone.utc)
        cart = CartModel(
            customer_id=customer_id,
            total_amount=Decimal("0.00"),
            version=1,
            created_at=now,
            updated_at=now,
        )
        self.db.add(cart)
        # flush od razu - wyscig o unique customer_id wychodzi tutaj jako IntegrityError
        self.db.flush()
        return cart

    def get_cart_items(self, cart_id: int) -> List[CartItemModel]:
        stmt = select(CartItemModel).where(CartItemModel.cart_id == cart_id).order_by(CartItemModel.id)
        return list(self.db.execute(stmt).scalars())

    def get_cart_item(self, cart_id: int, product_id: int) -> CartItemModel | None:
        stmt = select(CartItemModel).where(
            CartItemModel.cart_id == cart_id,
            CartItemModel.product_id == product_id,
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def add_cart_item(self, item: CartItemModel) -> CartItemModel:
        self.db.add(item)
        self.db.flush()
        return item

    def delete_cart_item(self, item: CartItemModel) -> None:
        self.db.delete(item)
        self.db.flush()

    def delete_cart(self, cart: CartModel) -> None:
        # cascade all, delete-orphan zabiera pozycje
        self.db.delete(cart)
        self.db.flush()

    def update_cart_version(self, cart_id: int, old_version: int, new_data: Dict[str, Any]) -> int:
        #update carts set ... where id = :id and version = :old_version
        stmt = (
            update(CartModel)
            .where(CartModel.id == cart_id, CartModel.version == old_version)
            .values(**new_data)
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount
