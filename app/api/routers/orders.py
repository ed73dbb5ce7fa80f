# app/api/routers/orders.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_lock_service
from app.domain.schemas import CheckoutIn, OrderCreatedOut, OrderOut, StatusIn
from app.services.lock_service import LockService
from app.services.notification_service import NotificationService
from app.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


def get_service(db: Session, lock_service: LockService | None = None):
    return OrderService(
        db,
        lock_service=lock_service,
        notification_service=NotificationService(),
    )


@router.post("", response_model=OrderCreatedOut, status_code=201)
def create_order(
    payload: CheckoutIn,
    db: Session = Depends(get_db),
    lock_service: LockService | None = Depends(get_lock_service),
):
    """
    Tworzy zamówienie z koszyka sesji, zdejmuje stany i czyści koszyk.
    Wysyła powiadomienie asynchronicznie.
    """
    order = get_service(db, lock_service).place_order(
        payload.customer_name,
        payload.customer_email,
        payload.session_id,
    )
    return {"message": "Order created successfully", "order": order}


@router.get("", response_model=List[OrderOut])
def list_orders(db: Session = Depends(get_db)):
    return get_service(db).list_orders()


@router.get("/customer/{email}", response_model=List[OrderOut])
def list_customer_orders(email: str, db: Session = Depends(get_db)):
    return get_service(db).list_customer_orders(email)


@router.get("/{order_id}", response_model=OrderOut)
def get_order(order_id: int, db: Session = Depends(get_db)):
    return get_service(db).get_order(order_id)


@router.put("/{order_id}/status", response_model=OrderOut)
def update_status(order_id: int, payload: StatusIn, db: Session = Depends(get_db)):
    return get_service(db).set_status(order_id, payload.status)
