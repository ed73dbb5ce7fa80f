#app/api/routers/carts.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.domain.schemas import CartItemIn, CartItemUpdate, CartOut
from app.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["cart"])


def get_service(db: Session):
    return CartService(db)


@router.get("/{session_id}", response_model=CartOut)
def get_cart(session_id: str, db: Session = Depends(get_db)):
    return get_service(db).get_or_create_cart(session_id)


@router.post("/{session_id}/items", response_model=CartOut)
def add_item(session_id: str, payload: CartItemIn, db: Session = Depends(get_db)):
    return get_service(db).add_item(
        session_id=session_id,
        product_id=payload.product_id,
        quantity=payload.quantity,
    )


@router.put("/{session_id}/items/{item_id}", response_model=CartOut)
def update_item(session_id: str, item_id: int, payload: CartItemUpdate, db: Session = Depends(get_db)):
    return get_service(db).update_item_quantity(session_id, item_id, payload.quantity)


@router.delete("/{session_id}/items/{item_id}", response_model=CartOut)
def remove_item(session_id: str, item_id: int, db: Session = Depends(get_db)):
    return get_service(db).remove_item(session_id, item_id)


@router.delete("/{session_id}", response_model=CartOut)
def clear_cart(session_id: str, db: Session = Depends(get_db)):
    return get_service(db).clear_cart(session_id)
