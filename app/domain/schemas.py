# app/domain/schemas.py
from datetime import datetime
from decimal import Decimal
from typing import List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Bazowy schema: camelCase na zewnatrz, snake_case w kodzie."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageOut(ApiModel):
    message: str


# =====================================================
# PRODUCTS
# =====================================================
class ProductOut(ApiModel):
    """Schema dla produktu (response)."""

    id: int
    name: str
    description: str | None = None
    price: Decimal
    stock: int
    category: str | None = None
    image: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


# =====================================================
# CART
# =====================================================
class CartItemIn(ApiModel):
    """Schema dla dodawania produktu do koszyka."""

    product_id: int = Field(..., description="ID produktu")
    quantity: int = Field(1, description="Ilosc produktu (>= 1)")


class CartItemUpdate(ApiModel):
    """Schema dla zmiany ilosci; <= 0 usuwa pozycje."""

    quantity: int


class CartItemOut(ApiModel):
    id: int
    product_id: int
    product: ProductOut | None = None
    quantity: int
    price: Decimal


class CartOut(ApiModel):
    """Schema dla koszyka (response)."""

    id: int
    session_id: str
    items: List[CartItemOut]
    total: Decimal
    created_at: datetime | None = None
    updated_at: datetime | None = None


# =====================================================
# ORDERS
# =====================================================
class CheckoutIn(ApiModel):
    """Schema dla zlozenia zamowienia z koszyka sesji."""

    customer_name: str | None = None
    customer_email: str | None = None
    session_id: str | None = None


class OrderItemOut(ApiModel):
    product_id: int
    product_name: str
    product: ProductOut | None = None
    quantity: int
    price: Decimal
    subtotal: Decimal


class OrderOut(ApiModel):
    """Schema dla zamowienia (response)."""

    id: int
    order_number: str
    customer_name: str
    customer_email: str
    session_id: str
    items: List[OrderItemOut]
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    status: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class OrderCreatedOut(ApiModel):
    message: str = "Order created successfully"
    order: OrderOut


class StatusIn(ApiModel):
    status: str | None = None


# =====================================================
# AUTH
# =====================================================
class RegisterIn(ApiModel):
    """Schema dla rejestracji uzytkownika."""

    name: str | None = None
    email: str | None = None
    password: str | None = None
    role: str | None = None


class LoginIn(ApiModel):
    email: str | None = None
    password: str | None = None


class UserRead(ApiModel):
    """Schema dla uzytkownika (response)."""

    id: int
    name: str
    role: str


class AuthOut(ApiModel):
    message: str | None = None
    token: str
    user: UserRead


# =====================================================
# HEALTH
# =====================================================
class DatastoreHealth(ApiModel):
    state: str
    ready: bool


class HealthOut(ApiModel):
    status: str
    database: DatastoreHealth
    timestamp: datetime
