# app/repos/cart_repo.py
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.data.models.cart import CartModel
from app.data.models.cart_item import CartItemModel


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_cart(self, session_id: str) -> CartModel | None:
        return self.db.execute(
            select(CartModel).where(CartModel.session_id == session_id)
        ).scalar_one_or_none()

    def create_cart(self, cart: CartModel) -> CartModel:
        self.db.add(cart)
        self.db.commit()
        self.db.refresh(cart)
        return cart

    def get_cart_item(self, cart: CartModel, item_id: int) -> CartItemModel | None:
        for item in cart.items:
            if item.id == item_id:
                return item
        return None

    def get_item_for_product(self, cart: CartModel, product_id: int) -> CartItemModel | None:
        for item in cart.items:
            if item.product_id == product_id:
                return item
        return None

    def add_cart_item(self, cart: CartModel, item: CartItemModel):
        cart.items.append(item)

    def delete_cart_item(self, cart: CartModel, item: CartItemModel):
        cart.items.remove(item)

    def clear_items(self, cart: CartModel):
        cart.items.clear()

    def save(self, cart: CartModel):
        """Przelicza total i zapisuje (odpowiednik pre-save hooka)."""
        cart.total = sum(
            (Decimal(str(i.price)) * i.quantity for i in cart.items),
            Decimal("0.00"),
        )
        self.db.add(cart)
        self.db.flush()

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
