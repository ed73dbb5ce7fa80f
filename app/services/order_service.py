# app/services/order_service.py
import re
import uuid
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP

from redis.exceptions import RedisError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.data.models.order import OrderModel
from app.data.models.order_item import OrderItemModel
from app.domain.errors import (
    Conflict,
    DatastoreUnavailable,
    EmptyCart,
    InvalidStatus,
    NotFound,
    StockConflict,
    ValidationError,
)
from app.domain.order_status import OrderStatus
from app.repos.cart_repo import CartRepo
from app.repos.order_repo import OrderRepo
from app.repos.product_repo import ProductRepo
from app.services.lock_service import LockService
from app.services.notification_service import NotificationService
from app.utils.retry import conflict_retrying
from app.utils.settings import TAX_RATE, CHECKOUT_LOCK_TTL_SECONDS, CHECKOUT_MAX_ATTEMPTS
from app.utils.logging import get_logger

logger = get_logger(__name__)

EMAIL_RE = re.compile(r"^\S+@\S+\.\S+$")
CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    return Decimal(str(value or 0)).quantize(CENT, rounding=ROUND_HALF_UP)


def generate_order_number(now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"ORD-{now:%Y%m%d%H%M%S}-{uuid.uuid4().hex[:10].upper()}"


class OrderService:
    """
    Serwis odpowiedzialny za domenę zamówień.

    Checkout (place_order) to jedyna operacja, ktora zmienia kilka rekordow naraz:
    zamowienie, stany magazynowe i koszyk. Wszystko idzie w jednej transakcji,
    a zapis stanu produktu to compare-and-set na kolumnie version. Konflikt
    wycofuje cala transakcje i checkout jest powtarzany od odczytu koszyka.
    """

    def __init__(
        self,
        db: Session,
        lock_service: LockService | None = None,
        notification_service: NotificationService | None = None,
        tax_rate: Decimal | str = TAX_RATE,
        max_attempts: int = CHECKOUT_MAX_ATTEMPTS,
    ):
        self.db = db
        self.repo = OrderRepo(db)
        self.carts = CartRepo(db)
        self.products = ProductRepo(db)
        self.lock_service = lock_service
        self.notification_service = notification_service
        self.tax_rate = Decimal(str(tax_rate))
        self.max_attempts = max_attempts

    # =====================================================
    # CHECKOUT
    # =====================================================
    def place_order(self, customer_name: str | None, customer_email: str | None, session_id: str | None) -> OrderModel:
        """
        Use Case: Zlozenie zamowienia z koszyka sesji.

        1. Walidacja danych klienta
        2. Blokada checkoutu dla sesji (redis)
        3. Transakcja: zamowienie + stany magazynowe + czyszczenie koszyka
        4. Powiadomienie (async, celery)
        """
        customer_name = (customer_name or "").strip()
        customer_email = (customer_email or "").strip().lower()
        session_id = (session_id or "").strip()

        if not customer_name or not customer_email or not session_id:
            raise ValidationError("Customer name, email, and session ID are required")

        if not EMAIL_RE.match(customer_email):
            raise ValidationError("Please provide a valid email address")

        token = self._acquire_lock(session_id)
        try:
            order = self._checkout_with_retry(customer_name, customer_email, session_id)
        finally:
            self._release_lock(session_id, token)

        logger.info(f"Order {order.order_number} created from cart of session {session_id}")
        self._notify(order)
        return order

    def _checkout_with_retry(self, customer_name: str, customer_email: str, session_id: str) -> OrderModel:
        try:
            for attempt in conflict_retrying(self.max_attempts):
                with attempt:
                    if attempt.retry_state.attempt_number > 1:
                        logger.warning(
                            f"Checkout sesji {session_id}: ponowienie "
                            f"{attempt.retry_state.attempt_number}/{self.max_attempts}"
                        )
                    return self._checkout_once(customer_name, customer_email, session_id)
        except StockConflict as e:
            logger.error(f"Checkout sesji {session_id} przerwany: {e}")
            raise Conflict("Product stock changed concurrently, please retry") from e
        except IntegrityError as e:
            logger.error(f"Checkout sesji {session_id} przerwany: {e}")
            raise Conflict("Could not allocate a unique order number, please retry") from e

    def _checkout_once(self, customer_name: str, customer_email: str, session_id: str) -> OrderModel:
        try:
            cart = self.carts.get_cart(session_id)
            if not cart or not cart.items:
                raise EmptyCart()

            lines = list(cart.items)
            for item in lines:
                if item.product is None:
                    raise NotFound(f"Product {item.product_id} no longer exists")

            # subtotal to total utrzymywany przez koszyk, nie przeliczany tutaj
            subtotal = to_money(cart.total)
            tax = (subtotal * self.tax_rate).quantize(CENT, rounding=ROUND_HALF_UP)
            total = subtotal + tax

            order = OrderModel(
                order_number=generate_order_number(),
                customer_name=customer_name,
                customer_email=customer_email,
                session_id=session_id,
                subtotal=subtotal,
                tax=tax,
                total=total,
                status=OrderStatus.PENDING.value,
                items=[
                    OrderItemModel(
                        product_id=item.product_id,
                        product_name=item.product.name,
                        quantity=item.quantity,
                        price=to_money(item.price),
                        subtotal=to_money(item.price) * item.quantity,
                    )
                    for item in lines
                ],
            )
            # stany najpierw: do pierwszego compare-and-set transakcja tylko czyta
            for item in lines:
                self._decrement_stock(item.product_id, item.quantity)

            self.repo.add_order(order)

            self.carts.clear_items(cart)
            self.carts.save(cart)

            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        return order

    def _decrement_stock(self, product_id: int, quantity: int):
        product = self.products.fetch_fresh(product_id)
        if not product:
            logger.warning(f"Produkt {product_id} zniknal w trakcie checkoutu, pomijam stan")
            return

        new_stock = max(product.stock - quantity, 0)
        rowcount = self.products.set_stock_if_version(product_id, product.version, new_stock)
        if rowcount == 0:
            raise StockConflict(product_id)

        logger.info(f"Stan produktu {product_id}: {product.stock} -> {new_stock}")

    def _acquire_lock(self, session_id: str) -> str | None:
        if not self.lock_service:
            return None

        token = uuid.uuid4().hex
        try:
            locked = self.lock_service.acquire_checkout_lock(session_id, token, CHECKOUT_LOCK_TTL_SECONDS)
        except RedisError as e:
            logger.error(f"Lock service niedostepny: {e}")
            raise DatastoreUnavailable("Lock service unavailable") from e

        if not locked:
            raise Conflict("Checkout already in progress for this session")
        return token

    def _release_lock(self, session_id: str, token: str | None):
        if not self.lock_service or token is None:
            return
        try:
            self.lock_service.release_checkout_lock(session_id, token)
        except RedisError as e:
            # lock i tak wygasnie po TTL
            logger.warning(f"Nie udalo sie zwolnic locka checkoutu sesji {session_id}: {e}")

    def _notify(self, order: OrderModel):
        if not self.notification_service:
            return
        try:
            self.notification_service.send_order_confirmation(order.order_number, order.customer_email)
        except Exception as e:
            # zamowienie jest juz zatwierdzone, brak powiadomienia nie cofa checkoutu
            logger.warning(f"Powiadomienie o zamowieniu {order.order_number} nie wyslane: {e}")

    # =====================================================
    # QUERY
    # =====================================================
    def get_order(self, order_id: int) -> OrderModel:
        order = self.repo.get_order(order_id)
        if not order:
            raise NotFound("Order not found")
        return order

    def list_orders(self) -> list[OrderModel]:
        return self.repo.list_orders()

    def list_customer_orders(self, email: str) -> list[OrderModel]:
        return self.repo.list_orders_by_email(email.strip().lower())

    # =====================================================
    # STATUS
    # =====================================================
    def set_status(self, order_id: int, status: str | None) -> OrderModel:
        """
        Dowolny status moze zastapic dowolny inny, sprawdzany jest tylko
        czy nalezy do dozwolonego zbioru.
        """
        if status not in OrderStatus.values():
            raise InvalidStatus()

        order = self.repo.update_order_status(order_id, status)
        if not order:
            raise NotFound("Order not found")

        logger.info(f"Zamowienie {order.order_number}: status {status}")
        return order
