# app/services/cart_service.py
from decimal import Decimal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.data.models.cart import CartModel
from app.data.models.cart_item import CartItemModel
from app.domain.errors import NotFound, OutOfStock, ValidationError
from app.repos.cart_repo import CartRepo
from app.repos.product_repo import ProductRepo
from app.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Use case'y dla koszyka sesji.
    Kazda komenda zapisuje koszyk przez repo.save(), ktore przelicza total,
    wiec total == suma(price * quantity) po kazdej zmianie.
    """

    def __init__(self, db: Session):
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)

    #query - odczyt (z leniwym utworzeniem)
    def get_or_create_cart(self, session_id: str) -> CartModel:
        cart = self.repo.get_cart(session_id)
        if cart:
            return cart

        try:
            created = self.repo.create_cart(
                CartModel(session_id=session_id, total=Decimal("0.00"))
            )
        except IntegrityError:
            # rownolegle zadanie utworzylo koszyk tej sesji pierwsze
            self.repo.rollback()
            cart = self.repo.get_cart(session_id)
            if not cart:
                raise
            logger.warning(f"Koszyk sesji {session_id} utworzony rownolegle, uzywam istniejacego {cart.id}")
            return cart

        logger.info(f"Utworzono nowy koszyk {created.id} dla sesji {session_id}")
        return created

    #commands
    def add_item(self, session_id: str, product_id: int, quantity: int) -> CartModel:
        if quantity is None or quantity < 1:
            raise ValidationError("Quantity must be at least 1")

        product = self.products.find_product(product_id)
        if not product:
            raise NotFound("Product not found")

        if product.stock < quantity:
            raise OutOfStock("Insufficient stock")

        cart = self.get_or_create_cart(session_id)

        existing_item = self.repo.get_item_for_product(cart, product_id)

        if existing_item:
            # cena zostaje taka jak przy pierwszym dodaniu
            logger.info(
                f"Produkt {product_id} juz jest w koszyku, zwiekszam ilosc "
                f"z {existing_item.quantity} do {existing_item.quantity + quantity}"
            )
            existing_item.quantity += quantity
        else:
            logger.info(f"Dodaje nowy produkt {product_id} do koszyka sesji {session_id}")
            self.repo.add_cart_item(
                cart,
                CartItemModel(
                    product_id=product_id,
                    quantity=quantity,
                    price=product.price,
                ),
            )

        self.repo.save(cart)
        self.repo.commit()
        return cart

    def update_item_quantity(self, session_id: str, item_id: int, quantity: int) -> CartModel:
        cart = self._require_cart(session_id)
        item = self._require_item(cart, item_id)

        if quantity <= 0:
            logger.info(f"Ilosc {quantity} - usuwam pozycje {item_id} z koszyka sesji {session_id}")
            self.repo.delete_cart_item(cart, item)
        else:
            # bez ponownej walidacji stanu magazynowego, tylko add_item ja sprawdza
            item.quantity = quantity

        self.repo.save(cart)
        self.repo.commit()
        return cart

    def remove_item(self, session_id: str, item_id: int) -> CartModel:
        cart = self._require_cart(session_id)
        item = self._require_item(cart, item_id)

        logger.info(f"Usuwanie pozycji {item_id} z koszyka sesji {session_id}")
        self.repo.delete_cart_item(cart, item)

        self.repo.save(cart)
        self.repo.commit()
        return cart

    def clear_cart(self, session_id: str) -> CartModel:
        cart = self._require_cart(session_id)

        self.repo.clear_items(cart)
        self.repo.save(cart)
        self.repo.commit()

        logger.info(f"Koszyk sesji {session_id} wyczyszczony")
        return cart

    def _require_cart(self, session_id: str) -> CartModel:
        cart = self.repo.get_cart(session_id)
        if not cart:
            raise NotFound("Cart not found")
        return cart

    def _require_item(self, cart: CartModel, item_id: int) -> CartItemModel:
        item = self.repo.get_cart_item(cart, item_id)
        if not item:
            raise NotFound("Item not found in cart")
        return item
