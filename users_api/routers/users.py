import logging
from typing import List

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..errors import UserNotFoundError
from ..schemas.user_schema import CreateUserDto, UpdateUserDto, UserOut
from ..services.user_service import UserService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/users", tags=["users"])


def get_user_service(request: Request, db: Session = Depends(get_db)) -> UserService:
    return UserService(db, request.app.state.password_hasher)


@router.get("", response_model=List[UserOut])
def list_users(service: UserService = Depends(get_user_service)):
    return service.find_all()


@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: str, service: UserService = Depends(get_user_service)):
    user = service.find_one(user_id)
    if user is None:
        raise UserNotFoundError(user_id)
    return user


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(payload: CreateUserDto, service: UserService = Depends(get_user_service)):
    user = service.create(payload)
    return UserOut.model_validate(user)


@router.patch("/{user_id}", response_model=UserOut)
def update_user(user_id: str, payload: UpdateUserDto, service: UserService = Depends(get_user_service)):
    user = service.update(user_id, payload)
    return UserOut.model_validate(user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: str, service: UserService = Depends(get_user_service)):
    service.remove(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
