"""Authentication endpoints: login, me, register."""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..core.errors import AuthenticationError
from ..core.security import (
    create_access_token,
    get_current_user,
    get_password_hash,
    require_role,
    verify_password,
)
from ..models.base import get_db
from ..models.user import User, UserRole
from ..services.validation import clean_email
from .common import CamelModel

router = APIRouter(prefix="/auth", tags=["auth"])


# ── Request / Response schemas ──────────────────────────────────────────────

class LoginRequest(CamelModel):
    email: str
    password: str


class RegisterRequest(CamelModel):
    email: str
    name: str
    password: str
    role: str = UserRole.RECEPTIONIST
    phone: Optional[str] = None


class UserResponse(CamelModel):
    id: str
    email: str
    name: str
    role: str
    phone: Optional[str] = None
    is_active: bool
    last_login: Optional[datetime] = None


class TokenEnvelope(CamelModel):
    success: bool = True
    token: str
    token_type: str = "bearer"
    user: UserResponse


class UserEnvelope(CamelModel):
    success: bool = True
    user: UserResponse


class RegisteredEnvelope(UserEnvelope):
    message: str


# ── Endpoints ────────────────────────────────────────────────────────────────

@router.post("/login", response_model=TokenEnvelope)
def login(req: LoginRequest, db: Session = Depends(get_db)):
    """Authenticate and receive a JWT access token."""
    user = db.query(User).filter(User.email == clean_email(req.email)).first()
    if not user or not verify_password(req.password, user.hashed_password):
        raise AuthenticationError("Invalid credentials")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="Account is disabled")

    token = create_access_token({"sub": user.id, "role": user.role})
    user.last_login = datetime.utcnow()
    db.commit()
    db.refresh(user)

    return TokenEnvelope(token=token, user=UserResponse.model_validate(user))


@router.get("/me", response_model=UserEnvelope)
def get_me(current_user=Depends(get_current_user)):
    """Return the currently authenticated user's profile."""
    return UserEnvelope(user=UserResponse.model_validate(current_user))


@router.post("/register", response_model=RegisteredEnvelope, status_code=status.HTTP_201_CREATED)
def register(
    req: RegisterRequest,
    db: Session = Depends(get_db),
    _admin=Depends(require_role(UserRole.ADMIN)),
):
    """Admin-only: create a new staff account."""
    if req.role not in UserRole.ALL:
        raise HTTPException(status_code=400, detail=f"role must be one of: {', '.join(UserRole.ALL)}")
    email = clean_email(req.email)
    if not email:
        raise HTTPException(status_code=400, detail="Email is required")
    if db.query(User).filter(User.email == email).first():
        raise HTTPException(status_code=400, detail="User already exists")

    user = User(
        email=email,
        name=req.name.strip(),
        hashed_password=get_password_hash(req.password),
        role=req.role,
        phone=req.phone,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return RegisteredEnvelope(message="User registered successfully", user=UserResponse.model_validate(user))
