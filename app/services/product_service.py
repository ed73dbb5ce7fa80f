# app/services/product_service.py
from decimal import Decimal, InvalidOperation
from typing import Callable

from fastapi import UploadFile
from sqlalchemy.orm import Session

from app.data.models.product import ProductModel
from app.domain.errors import NotFound, ValidationError
from app.repos.product_repo import ProductRepo
from app.services.storage_service import ImageStorage
from app.utils.logging import get_logger

logger = get_logger(__name__)

_EDITABLE = ("name", "description", "price", "stock", "category", "image")


class ProductService:
    """
    Katalog produktow.

    Obrazek zapisywany jest dopiero po walidacji pol; jezeli zapis produktu
    sie nie powiedzie, plik jest usuwany.
    """

    def __init__(
        self,
        db: Session,
        storage: ImageStorage | None = None,
        image_url: Callable[[str], str] | None = None,
    ):
        self.repo = ProductRepo(db)
        self.storage = storage
        self.image_url = image_url

    def list_products(self, category: str | None = None, search: str | None = None) -> list[ProductModel]:
        return self.repo.list_products(category=category, search=search)

    def get_product(self, product_id: int) -> ProductModel:
        product = self.repo.get_product(product_id)
        if not product:
            raise NotFound("Product not found")
        return product

    def create_product(self, data: dict, image: UploadFile | None = None) -> ProductModel:
        fields = self._clean(data)
        if not fields.get("name"):
            raise ValidationError("Product name is required")
        if fields.get("price") is None:
            raise ValidationError("Product price is required")
        fields.setdefault("stock", 0)

        filename = self._store_image(fields, image)
        try:
            product = self.repo.add_product(ProductModel(**fields))
        except Exception:
            self._discard_image(filename)
            raise

        logger.info(f"Utworzono produkt {product.id} ({product.name})")
        return product

    def update_product(self, product_id: int, data: dict, image: UploadFile | None = None) -> ProductModel:
        product = self.repo.find_product(product_id)
        if not product:
            raise NotFound("Product not found")

        fields = self._clean(data)
        if "name" in fields and not fields["name"]:
            raise ValidationError("Product name cannot be empty")

        filename = self._store_image(fields, image)
        for key, value in fields.items():
            setattr(product, key, value)
        if "stock" in fields:
            # inkrementacja w SQL, wersja w pamieci moze byc nieaktualna
            product.version = ProductModel.version + 1

        try:
            product = self.repo.save_product(product)
        except Exception:
            self._discard_image(filename)
            raise

        logger.info(f"Zaktualizowano produkt {product.id}: {sorted(fields)}")
        return product

    def delete_product(self, product_id: int):
        product = self.repo.find_product(product_id)
        if not product:
            raise NotFound("Product not found")
        self.repo.delete_product(product)
        logger.info(f"Usunieto produkt {product_id}")

    def _store_image(self, fields: dict, image: UploadFile | None) -> str | None:
        # przegladarki wysylaja pusty plik gdy pole nie zostalo wypelnione
        if image is None or not image.filename or self.storage is None:
            return None
        filename = self.storage.save(image)
        fields["image"] = self.image_url(filename) if self.image_url else filename
        return filename

    def _discard_image(self, filename: str | None):
        if filename and self.storage is not None:
            self.storage.delete(filename)

    @staticmethod
    def _clean(data: dict) -> dict:
        fields = {k: v for k, v in data.items() if k in _EDITABLE and v is not None}

        if "name" in fields:
            fields["name"] = str(fields["name"]).strip()

        if "price" in fields:
            try:
                price = Decimal(str(fields["price"]))
            except InvalidOperation:
                raise ValidationError("Price must be a number")
            if not price.is_finite() or price < 0:
                raise ValidationError("Price must be a non-negative number")
            fields["price"] = price

        if "stock" in fields:
            try:
                stock = int(fields["stock"])
            except (TypeError, ValueError):
                raise ValidationError("Stock must be an integer")
            if stock < 0:
                raise ValidationError("Stock must be a non-negative integer")
            fields["stock"] = stock

        return fields
