# app/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from typing import List
from decimal import Decimal
from datetime import datetime


class ItemIn(BaseModel):
    """Schema dla dodawania produktu do koszyka."""

    product_id: int = Field(..., gt=0, description="ID produktu (musi byc > 0)")
    # dodatniosc sprawdza CartService (INVALID_QUANTITY), nie walidacja requestu
    quantity: int = Field(..., strict=True, description="Ilosc produktu")


class QuantityIn(BaseModel):
    """Nowa ilosc pozycji, <= 0 usuwa pozycje z koszyka."""

    quantity: int = Field(..., strict=True)


class CartItemOut(BaseModel):
    """Schema dla pozycji w koszyku (response)."""

    id: int
    product_id: int
    product_name: str
    product_price: Decimal
    quantity: int
    subtotal: Decimal


class CartOut(BaseModel):
    """Schema dla koszyka (response). cart_id None = klient nie ma koszyka."""

    cart_id: int | None = None
    customer_id: int
    items: List[CartItemOut]
    total_amount: Decimal
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    stock_quantity: int = Field(0, ge=0)
    image_url: str | None = Field(None, max_length=500)
    category: str | None = Field(None, max_length=100)


class ProductUpdate(BaseModel):
    """Czesciowy update, pola nie podane zostaja bez zmian."""

    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    price: Decimal | None = Field(None, ge=0, max_digits=12, decimal_places=2)
    stock_quantity: int | None = Field(None, ge=0)
    image_url: str | None = Field(None, max_length=500)
    category: str | None = Field(None, max_length=100)


class ProductOut(BaseModel):
    id: int
    name: str
    description: str | None = None
    price: Decimal
    stock_quantity: int
    image_url: str | None = None
    category: str | None = None

    model_config = ConfigDict(from_attributes=True)


class OrderItemOut(BaseModel):
    product_id: int
    product_name: str
    product_price: Decimal
    quantity: int
    subtotal: Decimal


class OrderOut(BaseModel):
    """Schema dla zamowienia (response)."""

    id: int
    customer_id: int
    status: str
    total_amount: Decimal
    created_at: datetime
    items: List[OrderItemOut]

    model_config = ConfigDict(from_attributes=True)
