# app/repos/product_repo.py
from typing import List

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from app.data.models.cart_item import CartItemModel
from app.data.models.order import OrderItemModel, OrderModel
from app.data.models.product import ProductModel
from app.domain.errors import ProductNotFound, StockUnderflow


class ProductRepo:
    """
    Katalog produktow - jedyne zrodlo prawdy o cenie i stanie magazynu.
    stock_quantity zmienia sie tylko przez adjust_stock albo update admina.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: int, for_update: bool = False) -> ProductModel | None:
        stmt = select(ProductModel).where(ProductModel.id == product_id)
        if for_update:
            # SELECT ... FOR UPDATE + odswiezenie obiektu z identity map,
            # walidacja nigdy nie widzi starej wartosci stock_quantity
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        return self.db.execute(stmt).scalar_one_or_none()

    def adjust_stock(self, product_id: int, delta: int) -> ProductModel:
        #jeden warunkowy UPDATE, baza robi check + zapis atomowo
        stmt = (
            update(ProductModel)
            .where(
                ProductModel.id == product_id,
                ProductModel.stock_quantity + delta >= 0,
            )
            .values(stock_quantity=ProductModel.stock_quantity + delta)
            .execution_options(synchronize_session=False)
        )
        rowcount = self.db.execute(stmt).rowcount

        product = self.get_product(product_id, for_update=True)
        if product is None:
            raise ProductNotFound(product_id)
        if rowcount == 0:
            raise StockUnderflow(product_id, available=product.stock_quantity, delta=delta)
        return product

    def create_product(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        self.db.flush()
        return product

    def delete_product(self, product: ProductModel) -> None:
        self.db.delete(product)
        self.db.flush()

    def list_products(self) -> List[ProductModel]:
        return list(self.db.execute(select(ProductModel).order_by(ProductModel.id)).scalars())

    def list_by_category(self, category: str) -> List[ProductModel]:
        stmt = select(ProductModel).where(ProductModel.category == category).order_by(ProductModel.id)
        return list(self.db.execute(stmt).scalars())

    def search_by_name(self, name: str) -> List[ProductModel]:
        stmt = (
            select(ProductModel)
            .where(func.lower(ProductModel.name).contains(name.lower()))
            .order_by(ProductModel.id)
        )
        return list(self.db.execute(stmt).scalars())

    def list_in_stock(self, minimum: int = 0) -> List[ProductModel]:
        stmt = select(ProductModel).where(ProductModel.stock_quantity > minimum).order_by(ProductModel.id)
        return list(self.db.execute(stmt).scalars())

    def count_products(self) -> int:
        return self.db.execute(select(func.count()).select_from(ProductModel)).scalar_one()

    def is_referenced(self, product_id: int) -> bool:
        # koszyk albo zamowienie PLACED - anulowanie musi miec gdzie zwrocic stan
        in_cart = select(CartItemModel.id).where(CartItemModel.product_id == product_id).limit(1)
        if self.db.execute(in_cart).first() is not None:
            return True

        in_order = (
            select(OrderItemModel.id)
            .join(OrderModel, OrderItemModel.order_id == OrderModel.id)
            .where(OrderItemModel.product_id == product_id, OrderModel.status == "PLACED")
            .limit(1)
        )
        return self.db.execute(in_order).first() is not None
