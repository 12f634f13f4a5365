"""Catalog Store: odczyt, atomowe adjust_stock, wyszukiwanie."""
from decimal import Decimal

import pytest

from app.data.models.cart_item import CartItemModel
from app.domain.errors import ProductNotFound, StockUnderflow
from app.repos.cart_repo import CartRepo
from app.repos.product_repo import ProductRepo


class TestAdjustStock:
    def test_reserve_and_release(self, db, product, stock_of):
        repo = ProductRepo(db)

        updated = repo.adjust_stock(product.id, -3)
        db.commit()
        assert updated.stock_quantity == 2
        assert stock_of(product.id) == 2

        updated = repo.adjust_stock(product.id, 4)
        db.commit()
        assert updated.stock_quantity == 6

    def test_can_drain_to_zero(self, db, product):
        assert ProductRepo(db).adjust_stock(product.id, -5).stock_quantity == 0

    def test_underflow_rejected_without_mutation(self, db, product, stock_of):
        repo = ProductRepo(db)

        with pytest.raises(StockUnderflow) as exc_info:
            repo.adjust_stock(product.id, -6)
        db.commit()

        assert exc_info.value.available == 5
        assert exc_info.value.delta == -6
        assert stock_of(product.id) == 5

    def test_unknown_product(self, db):
        with pytest.raises(ProductNotFound):
            ProductRepo(db).adjust_stock(999, -1)

    def test_decision_uses_database_not_cached_copy(self, db, product, session_factory, stock_of):
        repo = ProductRepo(db)
        assert repo.get_product(product.id).stock_quantity == 5

        other = session_factory()
        ProductRepo(other).adjust_stock(product.id, -5)
        other.commit()
        other.close()

        # obiekt w sesji nadal pamieta 5, ale UPDATE warunkowy liczy w bazie
        with pytest.raises(StockUnderflow) as exc_info:
            repo.adjust_stock(product.id, -1)
        db.rollback()

        assert exc_info.value.available == 0
        assert stock_of(product.id) == 0


class TestReads:
    def test_get_product(self, db, product):
        found = ProductRepo(db).get_product(product.id)
        assert found.name == "Widget"
        assert found.price == Decimal("10.00")
        assert ProductRepo(db).get_product(999) is None

    def test_for_update_sees_committed_change(self, db, product, session_factory):
        repo = ProductRepo(db)
        assert repo.get_product(product.id).stock_quantity == 5

        other = session_factory()
        ProductRepo(other).adjust_stock(product.id, -2)
        other.commit()
        other.close()

        assert repo.get_product(product.id, for_update=True).stock_quantity == 3

    def test_search_category_and_in_stock(self, db, make_product):
        make_product(name="Laptop", category="Electronics", stock=10)
        make_product(name="Desk Lamp", category="Home", stock=0)
        make_product(name="laptop sleeve", category="Fashion", stock=3)
        repo = ProductRepo(db)

        assert [p.name for p in repo.search_by_name("LAPTOP")] == ["Laptop", "laptop sleeve"]
        assert [p.name for p in repo.list_by_category("Home")] == ["Desk Lamp"]
        assert [p.name for p in repo.list_in_stock()] == ["Laptop", "laptop sleeve"]
        assert repo.count_products() == 3

    def test_is_referenced(self, db, product):
        repo = ProductRepo(db)
        assert not repo.is_referenced(product.id)

        cart = CartRepo(db).create_cart(1)
        CartRepo(db).add_cart_item(
            CartItemModel(
                cart_id=cart.id,
                product_id=product.id,
                product_name=product.name,
                product_price=product.price,
                quantity=1,
                subtotal=product.price,
            )
        )
        assert repo.is_referenced(product.id)
