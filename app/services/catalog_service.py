# app/services/catalog_service.py
from typing import Any, Dict, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.data.models.product import ProductModel
from app.domain.errors import ProductInUse, ProductNotFound, StorageFailure
from app.domain.pricing import to_money
from app.domain.schemas import ProductCreate, ProductUpdate
from app.repos.product_repo import ProductRepo
from app.services.unit_of_work import transaction
from app.utils.logging import get_logger

logger = get_logger(__name__)

REQUIRED_FIELDS = ("name", "price", "stock_quantity")


def product_to_dict(product: ProductModel) -> Dict[str, Any]:
    return {
        "id": product.id,
        "name": product.name,
        "description": product.description,
        "price": to_money(product.price),
        "stock_quantity": product.stock_quantity,
        "image_url": product.image_url,
        "category": product.category,
    }


class CatalogService:
    """
    Administracja katalogiem. Zmiana ceny nie dotyka koszykow -
    pozycje trzymaja snapshot ceny z momentu dodania.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = ProductRepo(db)

    def get_product(self, product_id: int) -> Dict[str, Any]:
        product = self._read("get_product", lambda: self.repo.get_product(product_id))
        if not product:
            raise ProductNotFound(product_id)
        return product_to_dict(product)

    def list_products(self) -> List[Dict[str, Any]]:
        return [product_to_dict(p) for p in self._read("list_products", self.repo.list_products)]

    def list_by_category(self, category: str) -> List[Dict[str, Any]]:
        products = self._read("list_by_category", lambda: self.repo.list_by_category(category))
        return [product_to_dict(p) for p in products]

    def search(self, name: str) -> List[Dict[str, Any]]:
        products = self._read("search", lambda: self.repo.search_by_name(name))
        return [product_to_dict(p) for p in products]

    def list_in_stock(self) -> List[Dict[str, Any]]:
        return [product_to_dict(p) for p in self._read("list_in_stock", self.repo.list_in_stock)]

    def create_product(self, payload: ProductCreate) -> Dict[str, Any]:
        with transaction(self.db, "create_product"):
            product = self.repo.create_product(
                ProductModel(
                    name=payload.name,
                    description=payload.description,
                    price=to_money(payload.price),
                    stock_quantity=payload.stock_quantity,
                    image_url=payload.image_url,
                    category=payload.category,
                )
            )
        logger.info(f"Product {product.id} created")
        return product_to_dict(product)

    def update_product(self, product_id: int, payload: ProductUpdate) -> Dict[str, Any]:
        with transaction(self.db, "update_product"):
            product = self.repo.get_product(product_id, for_update=True)
            if not product:
                raise ProductNotFound(product_id)

            changes = payload.model_dump(exclude_unset=True)
            # null czysci tylko pola opcjonalne, nazwa/cena/stan zostaja
            for field in REQUIRED_FIELDS:
                if changes.get(field, 0) is None:
                    del changes[field]
            if "price" in changes:
                changes["price"] = to_money(changes["price"])
            for field, value in changes.items():
                setattr(product, field, value)
        logger.info(f"Product {product_id} updated: {sorted(changes)}")
        return product_to_dict(product)

    def delete_product(self, product_id: int) -> None:
        with transaction(self.db, "delete_product"):
            product = self.repo.get_product(product_id, for_update=True)
            if not product:
                raise ProductNotFound(product_id)
            if self.repo.is_referenced(product_id):
                raise ProductInUse(product_id)
            self.repo.delete_product(product)
        logger.info(f"Product {product_id} deleted")

    def _read(self, operation: str, fn):
        try:
            return fn()
        except SQLAlchemyError as e:
            logger.error(f"{operation} failed on storage error: {e}")
            raise StorageFailure(operation, e) from e
