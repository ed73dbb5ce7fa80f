# app/repos/product_repo.py
from sqlalchemy import select, update, or_, text
from sqlalchemy.orm import Session

from app.data.models.product import ProductModel
from app.utils.settings import CATALOG_READ_TIMEOUT_MS


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class ProductRepo:
    def __init__(self, db: Session, read_timeout_ms: int = CATALOG_READ_TIMEOUT_MS):
        self.db = db
        self.read_timeout_ms = read_timeout_ms

    def _bound_read(self):
        # limit kazdego odczytu katalogu; tylko postgres wspiera statement_timeout
        if self.db.get_bind().dialect.name == "postgresql":
            self.db.execute(text(f"SET LOCAL statement_timeout = {int(self.read_timeout_ms)}"))

    def list_products(self, category: str | None = None, search: str | None = None) -> list[ProductModel]:
        self._bound_read()
        stmt = select(ProductModel)
        if category:
            stmt = stmt.where(ProductModel.category == category)
        if search:
            pattern = "%" + _escape_like(search) + "%"
            stmt = stmt.where(
                or_(
                    ProductModel.name.ilike(pattern, escape="\\"),
                    ProductModel.description.ilike(pattern, escape="\\"),
                )
            )
        stmt = stmt.order_by(ProductModel.created_at.desc(), ProductModel.id.desc())
        return list(self.db.execute(stmt).scalars().all())

    def get_product(self, product_id: int) -> ProductModel | None:
        self._bound_read()
        return self.db.get(ProductModel, product_id)

    def find_product(self, product_id: int) -> ProductModel | None:
        """Odczyt bez limitu czasu, dla koszyka i checkoutu."""
        return self.db.get(ProductModel, product_id)

    def fetch_fresh(self, product_id: int) -> ProductModel | None:
        return self.db.execute(
            select(ProductModel)
            .where(ProductModel.id == product_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def add_product(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        self.db.commit()
        self.db.refresh(product)
        return product

    def save_product(self, product: ProductModel) -> ProductModel:
        self.db.commit()
        self.db.refresh(product)
        return product

    def delete_product(self, product: ProductModel):
        self.db.delete(product)
        self.db.commit()

    def set_stock_if_version(self, product_id: int, old_version: int, new_stock: int) -> int:
        """
        Compare-and-set na kolumnie version.
        UPDATE products SET stock=?, version=version+1 WHERE id=? AND version=?
        Zwraca rowcount; 0 oznacza ze ktos inny zmienil produkt.
        """
        result = self.db.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id, ProductModel.version == old_version)
            .values(stock=new_stock, version=old_version + 1)
        )
        return result.rowcount
