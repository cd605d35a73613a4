import logging
from typing import Any, Dict, Tuple

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.database import get_db
from app.errors import DuplicateEmail, InvalidCredentials, MissingField
from app.models import UserLogin
from app.utils.passwords import hash_password, verify_password
from app.utils.payload import request_fields

logger = logging.getLogger(__name__)
router = APIRouter()

INVALID_REQUEST = {'status': 'error', 'message': 'Invalid request'}


def _credentials(email: Any, password: Any) -> Tuple[str, str]:
    email = str(email or '').strip()
    password = str(password or '').strip()
    if not email or not password:
        raise MissingField('Email and password required')
    return email, password


def register_user(db: Session, email: Any, password: Any) -> UserLogin:
    email, password = _credentials(email, password)
    existing = db.execute(select(UserLogin.tbl_id).where(UserLogin.tbl_email == email)).first()
    if existing:
        raise DuplicateEmail('Email already registered')
    user = UserLogin(tbl_email=email, tbl_password=hash_password(password))
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # another request registered the same email between the check and the insert
        db.rollback()
        raise DuplicateEmail('Email already registered')
    db.refresh(user)
    logger.info("Registered user %s (id=%s)", email, user.tbl_id)
    return user


def authenticate(db: Session, email: Any, password: Any) -> None:
    email, password = _credentials(email, password)
    stored = db.execute(select(UserLogin.tbl_password).where(UserLogin.tbl_email == email)).scalar_one_or_none()
    if not verify_password(password, stored):
        logger.info("Failed login for %s", email)
        raise InvalidCredentials('Invalid email or password')


@router.post("/api/login")
@router.post("/login.php", include_in_schema=False)
def api_login(fields: Dict[str, Any] = Depends(request_fields), db: Session = Depends(get_db)) -> Dict[str, Any]:
    authenticate(db, fields.get('email'), fields.get('password'))
    return {'status': 'success', 'message': 'Login successful'}


@router.post("/api/register")
@router.post("/register.php", include_in_schema=False)
def api_register(fields: Dict[str, Any] = Depends(request_fields), db: Session = Depends(get_db)) -> Dict[str, Any]:
    register_user(db, fields.get('email'), fields.get('password'))
    return {'status': 'success', 'message': 'Registration successful'}


@router.api_route("/api/login", methods=["GET", "PUT", "DELETE", "PATCH"], include_in_schema=False)
@router.api_route("/login.php", methods=["GET", "PUT", "DELETE", "PATCH"], include_in_schema=False)
@router.api_route("/api/register", methods=["GET", "PUT", "DELETE", "PATCH"], include_in_schema=False)
@router.api_route("/register.php", methods=["GET", "PUT", "DELETE", "PATCH"], include_in_schema=False)
def api_auth_invalid_method() -> Dict[str, Any]:
    return INVALID_REQUEST
