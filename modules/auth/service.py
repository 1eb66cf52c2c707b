import logging
from typing import Any, Dict, List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.errors import (
    AuthException,
    ConflictException,
    ForbiddenException,
    NotFoundException,
    ValidationAppException,
)
from core.security import TokenService, hash_password, verify_password
from core.settings import Settings
from modules.auth import models, schemas
from modules.auth.dependencies import Principal
from modules.auth.types import Role

logger = logging.getLogger(__name__)


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def _serialize_user(user: models.User) -> Dict[str, Any]:
    return {"id": user.id, "name": user.name, "email": user.email, "role": user.role}


def _claims_for(user: models.User) -> Dict[str, Any]:
    return {"id": user.id, "name": user.name, "email": user.email, "role": user.role}


def _get_user_model(db: Session, user_id: int) -> models.User:
    user = db.query(models.User).filter(models.User.id == user_id).first()
    if not user:
        raise NotFoundException("User not found")
    return user


def _ensure_email_free(db: Session, email: str, exclude_id: int = None) -> None:
    query = db.query(models.User).filter(models.User.email == email)
    if exclude_id is not None:
        query = query.filter(models.User.id != exclude_id)
    if query.first():
        raise ConflictException("Email is already registered")


def _commit_user(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictException("Email is already registered") from exc


def ensure_bootstrap_admin(db: Session, settings: Settings) -> None:
    if db.query(models.User).first():
        return
    admin = models.User(
        name=settings.bootstrap_admin_name,
        email=_normalize_email(settings.bootstrap_admin_email),
        password=hash_password(settings.bootstrap_admin_password),
        role=Role.ADMIN.value,
    )
    db.add(admin)
    db.commit()
    logger.info("Seeded bootstrap admin %s", admin.email)


def authenticate(db: Session, token_service: TokenService, credentials: schemas.LoginRequest) -> Dict[str, Any]:
    email = _normalize_email(credentials.email)
    user = db.query(models.User).filter(models.User.email == email).first()
    if not user or not verify_password(credentials.password, user.password):
        logger.warning("Failed login for %s", email)
        raise AuthException("Invalid email or password")
    return {"user": _serialize_user(user), "token": token_service.issue(_claims_for(user))}


def register_user(db: Session, user_in: schemas.UserCreate) -> Dict[str, Any]:
    email = _normalize_email(user_in.email)
    _ensure_email_free(db, email)
    user = models.User(
        name=user_in.name.strip(),
        email=email,
        password=hash_password(user_in.password),
        role=user_in.role.value,
    )
    db.add(user)
    _commit_user(db)
    db.refresh(user)
    logger.info("Registered user %s (%s)", user.email, user.role)
    return _serialize_user(user)


def list_users(db: Session) -> List[Dict[str, Any]]:
    users = db.query(models.User).order_by(models.User.id).all()
    return [_serialize_user(u) for u in users]


def update_user(db: Session, principal: Principal, user_id: int, user_in: schemas.UserUpdate) -> Dict[str, Any]:
    if not principal.is_admin:
        if principal.id != user_id:
            raise ForbiddenException("You can only update your own account")
        if user_in.role is not None and user_in.role != principal.role:
            raise ForbiddenException("Only admins can change roles")

    user = _get_user_model(db, user_id)
    if user_in.name is not None:
        user.name = user_in.name.strip()
    if user_in.email is not None:
        email = _normalize_email(user_in.email)
        _ensure_email_free(db, email, exclude_id=user.id)
        user.email = email
    if user_in.password is not None:
        user.password = hash_password(user_in.password)
    if user_in.role is not None:
        user.role = user_in.role.value

    _commit_user(db)
    db.refresh(user)
    return _serialize_user(user)


def delete_user(db: Session, principal: Principal, user_id: int) -> None:
    if principal.id == user_id:
        raise ValidationAppException("You cannot delete your own account")
    user = _get_user_model(db, user_id)
    db.delete(user)
    db.commit()
    logger.info("Deleted user %s", user_id)
