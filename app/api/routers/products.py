# app/api/routers/products.py
from decimal import Decimal
from typing import List

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_storage, require_capability, require_datastore
from app.domain.roles import Capability
from app.domain.schemas import MessageOut, ProductOut
from app.services.product_service import ProductService
from app.services.storage_service import ImageStorage

router = APIRouter(prefix="/products", tags=["products"])

admin_only = require_capability(Capability.MANAGE_CATALOG)


def _catalog(request: Request, db: Session, storage: ImageStorage) -> ProductService:
    return ProductService(
        db,
        storage=storage,
        image_url=lambda filename: str(request.url_for("uploads", path=filename)),
    )


@router.get("", response_model=List[ProductOut])
def list_products(
    category: str | None = None,
    search: str | None = None,
    db: Session = Depends(get_db),
    _ready=Depends(require_datastore),
):
    return ProductService(db).list_products(category=category, search=search)


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db), _ready=Depends(require_datastore)):
    return ProductService(db).get_product(product_id)


@router.post("", response_model=ProductOut, status_code=201)
def create_product(
    request: Request,
    name: str = Form(...),
    price: Decimal = Form(...),
    description: str | None = Form(None),
    stock: int = Form(0),
    category: str | None = Form(None),
    image: UploadFile | None = File(None),
    db: Session = Depends(get_db),
    storage: ImageStorage = Depends(get_storage),
    _admin=Depends(admin_only),
):
    data = {
        "name": name,
        "description": description,
        "price": price,
        "stock": stock,
        "category": category,
    }
    return _catalog(request, db, storage).create_product(data, image=image)


@router.put("/{product_id}", response_model=ProductOut)
def update_product(
    product_id: int,
    request: Request,
    name: str | None = Form(None),
    price: Decimal | None = Form(None),
    description: str | None = Form(None),
    stock: int | None = Form(None),
    category: str | None = Form(None),
    image: UploadFile | None = File(None),
    db: Session = Depends(get_db),
    storage: ImageStorage = Depends(get_storage),
    _admin=Depends(admin_only),
):
    data = {
        "name": name,
        "description": description,
        "price": price,
        "stock": stock,
        "category": category,
    }
    return _catalog(request, db, storage).update_product(product_id, data, image=image)


@router.delete("/{product_id}", response_model=MessageOut)
def delete_product(product_id: int, db: Session = Depends(get_db), _admin=Depends(admin_only)):
    ProductService(db).delete_product(product_id)
    return {"message": "Product deleted successfully"}
