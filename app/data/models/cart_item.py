from sqlalchemy import Column, Integer, ForeignKey, Numeric
from sqlalchemy.orm import relationship

from app.data.database import Base


class CartItemModel(Base):
    __tablename__ = "cart_items"

    id = Column(Integer, primary_key=True)
    cart_id = Column(Integer, ForeignKey("carts.id", ondelete="CASCADE"), nullable=False)
    # no FK: a line outlives the product it points to
    product_id = Column(Integer, nullable=False, index=True)

    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)

    cart = relationship("CartModel", back_populates="items")
    product = relationship(
        "ProductModel",
        primaryjoin="foreign(CartItemModel.product_id) == ProductModel.id",
        viewonly=True,
        lazy="selectin",
    )
