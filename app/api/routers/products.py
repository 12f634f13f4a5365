# app/api/routers/products.py
from typing import List

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from app.data.database import get_db
from app.domain.schemas import ProductCreate, ProductOut, ProductUpdate
from app.services.catalog_service import CatalogService

router = APIRouter(prefix="/products", tags=["products"])


def get_service(db: Session = Depends(get_db)) -> CatalogService:
    return CatalogService(db)


@router.get("", response_model=List[ProductOut])
def list_products(svc: CatalogService = Depends(get_service)):
    return svc.list_products()


# statyczne sciezki przed /{product_id}
@router.get("/search", response_model=List[ProductOut])
def search_products(name: str = Query(..., min_length=1), svc: CatalogService = Depends(get_service)):
    return svc.search(name)


@router.get("/in-stock", response_model=List[ProductOut])
def list_in_stock(svc: CatalogService = Depends(get_service)):
    return svc.list_in_stock()


@router.get("/category/{category}", response_model=List[ProductOut])
def list_by_category(category: str, svc: CatalogService = Depends(get_service)):
    return svc.list_by_category(category)


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: int, svc: CatalogService = Depends(get_service)):
    return svc.get_product(product_id)


@router.post("", response_model=ProductOut, status_code=201)
def create_product(payload: ProductCreate, svc: CatalogService = Depends(get_service)):
    return svc.create_product(payload)


@router.put("/{product_id}", response_model=ProductOut)
def update_product(product_id: int, payload: ProductUpdate, svc: CatalogService = Depends(get_service)):
    return svc.update_product(product_id, payload)


@router.delete("/{product_id}", status_code=204)
def delete_product(product_id: int, svc: CatalogService = Depends(get_service)):
    svc.delete_product(product_id)
    return Response(status_code=204)
