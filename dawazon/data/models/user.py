from sqlalchemy import Column, Integer, String

from dawazon.data.database import Base


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=True)
    role = Column(String(20), nullable=False, default="USER")
    phone = Column(String(30), nullable=True)

    #profil kontaktowy, kopiowany do koszyka przy jego utworzeniu
    address_number = Column(Integer, nullable=True)
    address_street = Column(String(200), nullable=True)
    address_city = Column(String(100), nullable=True)
    address_province = Column(String(100), nullable=True)
    address_country = Column(String(100), nullable=True)
    address_postal_code = Column(String(20), nullable=True)
