# app/data/seed.py
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.data.database import Datastore
from app.data.models.product import ProductModel
from app.utils.logging import get_logger

logger = get_logger(__name__)

SAMPLE_PRODUCTS = [
    {
        "name": "Mechanical Keyboard",
        "description": "Tenkeyless keyboard with hot-swappable switches.",
        "price": Decimal("199.99"),
        "stock": 25,
        "category": "accessories",
    },
    {
        "name": "Wireless Mouse",
        "description": "Lightweight mouse with a 70 hour battery.",
        "price": Decimal("49.50"),
        "stock": 40,
        "category": "accessories",
    },
    {
        "name": "27in Monitor",
        "description": "IPS panel, 1440p, 165Hz.",
        "price": Decimal("899.00"),
        "stock": 8,
        "category": "displays",
    },
]


def seed(db: Session) -> int:
    """Dodaje przykladowe produkty tylko gdy katalog jest pusty."""
    # not forcing: only seed if empty
    if db.execute(select(ProductModel.id).limit(1)).first():
        return 0

    db.add_all([ProductModel(**p) for p in SAMPLE_PRODUCTS])
    db.commit()
    logger.info(f"Seeded {len(SAMPLE_PRODUCTS)} products")
    return len(SAMPLE_PRODUCTS)


if __name__ == "__main__":
    datastore = Datastore()
    if not datastore.connect():
        raise SystemExit("Database not reachable")
    session = datastore.session()
    try:
        seed(session)
    finally:
        session.close()
        datastore.dispose()
