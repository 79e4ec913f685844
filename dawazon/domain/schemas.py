# dawazon/domain/schemas.py
from pydantic import BaseModel, EmailStr, Field, ConfigDict
from typing import List, Optional
from decimal import Decimal
from datetime import datetime

from dawazon.domain.cart import Address, Client, Role, Status


class AddressSchema(BaseModel):
    """Adres dostawy."""

    number: Optional[int] = Field(None, ge=0)
    street: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    province: Optional[str] = None
    country: str = Field(..., min_length=1)
    postal_code: str = Field(..., min_length=1, description="Kod pocztowy jako tekst (np. 08007)")

    model_config = ConfigDict(from_attributes=True)

    def to_domain(self) -> Address:
        return Address(**self.model_dump())


class ClientIn(BaseModel):
    """Dane klienta podawane przy checkoucie."""

    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: Optional[str] = None
    address: Optional[AddressSchema] = None

    def to_domain(self) -> Client:
        return Client(
            name=self.name,
            email=str(self.email),
            phone=self.phone,
            address=self.address.to_domain() if self.address else None,
        )


class ClientOut(BaseModel):
    """Snapshot danych klienta zapisany w koszyku."""

    name: str
    email: str
    phone: Optional[str] = None
    address: Optional[AddressSchema] = None

    model_config = ConfigDict(from_attributes=True)


class LineIn(BaseModel):
    """Schema dla dodawania produktu do koszyka."""

    product_id: str = Field(..., min_length=1, description="ID produktu z katalogu")
    quantity: int = Field(1, gt=0, description="Ilosc produktu (musi byc > 0)")


class QuantityIn(BaseModel):
    quantity: int = Field(..., gt=0, description="Nowa ilosc (musi byc > 0)")


class StatusIn(BaseModel):
    status: Status


class CheckoutIn(BaseModel):
    """Bez klienta uzywany jest snapshot z profilu uzytkownika."""

    client: Optional[ClientIn] = None


class CartLineOut(BaseModel):
    """Schema dla linii koszyka (response)."""

    product_id: str
    quantity: int
    product_price: Decimal
    status: Status
    total_price: Decimal

    model_config = ConfigDict(from_attributes=True)


class CartOut(BaseModel):
    """Schema dla koszyka (response)."""

    id: str
    user_id: int
    purchased: bool
    client: Optional[ClientOut] = None
    cart_lines: List[CartLineOut]
    total_items: int
    total: Decimal
    checkout_in_progress: bool
    checkout_started_at: Optional[datetime] = None
    version: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CartPageOut(BaseModel):
    items: List[CartOut]
    page: int
    size: int
    total: int


class SaleLineOut(BaseModel):
    """Linia sprzedazy widziana od strony sprzedawcy."""

    sale_id: str
    product_id: str
    product_name: str
    quantity: int
    product_price: Decimal
    total_price: Decimal
    status: Status
    manager_id: Optional[int] = None
    user_id: int
    client: Optional[ClientOut] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SaleLinePageOut(BaseModel):
    items: List[SaleLineOut]
    page: int
    size: int
    total: int


class EarningsOut(BaseModel):
    total: Decimal
    manager_id: Optional[int] = None


class UserCreate(BaseModel):
    """Schema dla tworzenia uzytkownika."""

    id: int = Field(..., gt=0, description="ID uzytkownika (musi byc > 0)")
    name: str = Field(..., min_length=1, max_length=100, description="Imie uzytkownika")
    email: Optional[EmailStr] = None
    role: Role = Role.USER
    phone: Optional[str] = None
    address: Optional[AddressSchema] = None


class UserRead(BaseModel):
    """Schema dla uzytkownika (response)."""

    id: int
    name: str
    email: Optional[str] = None
    role: Role
    phone: Optional[str] = None
    address: Optional[AddressSchema] = None

    model_config = ConfigDict(from_attributes=True)
