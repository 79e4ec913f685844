from sqlalchemy import select
from sqlalchemy.orm import Session

from dawazon.data.models.user import UserModel


class UserRepo:
    """Port tozsamosci: uzytkownicy, ich role i profil kontaktowy."""

    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: int) -> UserModel | None:
        return self.db.get(UserModel, user_id)

    def list_users(self, role: str | None = None) -> list[UserModel]:
        stmt = select(UserModel).order_by(UserModel.id)
        if role is not None:
            stmt = stmt.where(UserModel.role == role)
        return list(self.db.scalars(stmt))

    def add_user(self, user: UserModel) -> UserModel:
        self.db.add(user)
        self.db.flush()
        return user

    def create_user(self, user: UserModel) -> UserModel:
        self.add_user(user)
        self.db.commit()
        self.db.refresh(user)
        return user
