from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from dawazon.data.database import get_db
from dawazon.domain.cart import Role
from dawazon.services.user_service import UserService
from dawazon.domain.schemas import UserCreate, UserRead

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=UserRead)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    service = UserService(db)
    return service.create_user(payload)


@router.get("", response_model=List[UserRead])
def list_users(role: Optional[Role] = Query(None), db: Session = Depends(get_db)):
    service = UserService(db)
    return service.list_users(role)


@router.get("/{user_id}", response_model=UserRead)
def get_user(user_id: int, db: Session = Depends(get_db)):
    service = UserService(db)
    return service.get_user(user_id)
