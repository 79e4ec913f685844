#dawazon/data/models/cart.py
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import relationship

from dawazon.data.database import Base


class CartModel(Base):
    __tablename__ = "carts"

    id = Column(String(32), primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    purchased = Column(Boolean, nullable=False, default=False, index=True)

    #snapshot klienta (plasko, jedna kolumna na pole)
    client_name = Column(String(100), nullable=True)
    client_email = Column(String(255), nullable=True)
    client_phone = Column(String(30), nullable=True)
    client_address_number = Column(Integer, nullable=True)
    client_address_street = Column(String(200), nullable=True)
    client_address_city = Column(String(100), nullable=True)
    client_address_province = Column(String(100), nullable=True)
    client_address_country = Column(String(100), nullable=True)
    client_address_postal_code = Column(String(20), nullable=True)

    total_items = Column(Integer, nullable=False, default=0)
    total = Column(Numeric(12, 2), nullable=False, default=0)

    checkout_started_at = Column(DateTime(timezone=True), nullable=True)
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    lines = relationship(
        "CartLineModel",
        back_populates="cart",
        cascade="all, delete-orphan",
        order_by="CartLineModel.position",
    )

    __table_args__ = (
        Index("ix_carts_created_at_desc", created_at.desc()),
        Index("ix_carts_user_id_purchased", user_id, purchased),
        #jeden aktywny koszyk na uzytkownika
        Index(
            "uq_carts_active_user",
            user_id,
            unique=True,
            postgresql_where=purchased.is_(False),
            sqlite_where=purchased.is_(False),
        ),
    )
