from sqlalchemy.orm import Session

from dawazon.data.models.user import UserModel
from dawazon.domain.cart import Role
from dawazon.domain.errors import NotFound
from dawazon.repos.user_repo import UserRepo
from dawazon.domain.schemas import AddressSchema, UserCreate, UserRead


class UserService:
    def __init__(self, db: Session):
        self.repo = UserRepo(db)

    def create_user(self, payload: UserCreate) -> UserRead:
        existing = self.repo.get_user(payload.id)
        if existing:
            return _to_read(existing)

        address = payload.address
        user = UserModel(
            id=payload.id,
            name=payload.name,
            email=str(payload.email) if payload.email else None,
            role=payload.role.value,
            phone=payload.phone,
            address_number=address.number if address else None,
            address_street=address.street if address else None,
            address_city=address.city if address else None,
            address_province=address.province if address else None,
            address_country=address.country if address else None,
            address_postal_code=address.postal_code if address else None,
        )
        created = self.repo.create_user(user)
        return _to_read(created)

    def list_users(self, role: Role | None = None) -> list[UserRead]:
        return [_to_read(u) for u in self.repo.list_users(role.value if role else None)]

    def get_user(self, user_id: int) -> UserRead:
        user = self.repo.get_user(user_id)
        if not user:
            raise NotFound("User not found")
        return _to_read(user)


def _to_read(user: UserModel) -> UserRead:
    address = None
    if user.address_street:
        address = AddressSchema(
            number=user.address_number,
            street=user.address_street,
            city=user.address_city,
            province=user.address_province,
            country=user.address_country,
            postal_code=user.address_postal_code,
        )
    return UserRead(
        id=user.id,
        name=user.name,
        email=user.email,
        role=user.role,
        phone=user.phone,
        address=address,
    )
