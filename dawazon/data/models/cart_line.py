#dawazon/data/models/cart_line.py
from sqlalchemy import Column, ForeignKey, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import relationship

from dawazon.data.database import Base


class CartLineModel(Base):
    __tablename__ = "cart_lines"

    id = Column(Integer, primary_key=True, autoincrement=True)
    cart_id = Column(String(32), ForeignKey("carts.id", ondelete="CASCADE"), nullable=False, index=True)
    #kolejnosc dodania linii
    position = Column(Integer, nullable=False)

    product_id = Column(String(64), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    product_price = Column(Numeric(12, 2), nullable=False)
    status = Column(String(20), nullable=False, default="EN_CARRITO")
    total_price = Column(Numeric(12, 2), nullable=False)

    cart = relationship("CartModel", back_populates="lines")

    __table_args__ = (
        UniqueConstraint("cart_id", "product_id", name="u_cart_product"),
        {"sqlite_autoincrement": True},
    )
