from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from core.database import get_db
from core.dependencies import get_app_settings
from core.security import TokenService
from core.settings import Settings
from modules.auth import schemas, service
from modules.auth.dependencies import Principal, get_current_user, require_admin

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=schemas.LoginResponse)
def login_endpoint(
    credentials: schemas.LoginRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    return service.authenticate(db, TokenService(settings), credentials)


@router.get("/me")
def me_endpoint(principal: Principal = Depends(get_current_user)):
    return {"id": principal.id, "name": principal.name, "email": principal.email, "role": principal.role.value}


@router.post("/register", response_model=schemas.RegisterResponse, status_code=status.HTTP_201_CREATED)
def register_endpoint(
    user_in: schemas.UserCreate,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
):
    return {"message": "User registered", "user": service.register_user(db, user_in)}


@router.get("/users", response_model=list[schemas.UserRead])
def list_users_endpoint(db: Session = Depends(get_db), _: Principal = Depends(require_admin)):
    return service.list_users(db)


@router.patch("/users/{user_id}", response_model=schemas.UserRead)
def update_user_endpoint(
    user_id: int,
    user_in: schemas.UserUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_user),
):
    return service.update_user(db, principal, user_id, user_in)


@router.delete("/users/{user_id}")
def delete_user_endpoint(
    user_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    service.delete_user(db, principal, user_id)
    return {"message": "User deleted"}
