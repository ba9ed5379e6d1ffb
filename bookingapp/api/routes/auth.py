from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from bookingapp.db.base import get_db
from bookingapp.db.models.user import User
from bookingapp.schemas.user import UserCreate, UserResponse, TokenResponse
from bookingapp.core.security import create_access_token, get_current_user, hash_password, verify_password

router = APIRouter()

SELF_REGISTER_ROLES = ("customer", "provider")


@router.post("/register", response_model=UserResponse)
def register(user: UserCreate, db: Session = Depends(get_db)):
    existing = db.query(User).filter(User.email == user.email).first()
    if existing:
        raise HTTPException(status_code=400, detail="Email already registered")

    if user.role not in SELF_REGISTER_ROLES:
        raise HTTPException(status_code=400, detail="Invalid role")

    new_user = User(
        email=user.email,
        name=user.name,
        password_hash=hash_password(user.password),
        role=user.role,
    )

    db.add(new_user)
    db.commit()
    db.refresh(new_user)

    return new_user


@router.post("/login", response_model=TokenResponse)
def login(email: str, password: str, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == email).first()

    if not user or not verify_password(password, user.password_hash):
        raise HTTPException(status_code=400, detail="Invalid credentials")

    token = create_access_token({"sub": user.email})

    return {"access_token": token, "token_type": "bearer"}


@router.get("/me", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)):
    return current_user
