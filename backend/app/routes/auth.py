import re
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.database.deps import get_db
from app.models.user import User
from app.schemas.token import Token
from app.schemas.user import UserCreate, UserLogin, UserOut
from app.core.security import get_password_hash, verify_password, create_access_token
from app.core.auth import get_current_user

router = APIRouter(prefix="/auth", tags=["Auth"])
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

def is_valid_email(value: str) -> bool:
    if not value:
        return False
    return bool(EMAIL_PATTERN.match(value))

def build_token(user: User) -> Token:
    token = create_access_token({
        "sub": str(user.id),
        "name": user.name,
        "email": user.email,
    })
    return Token(access_token=token, user=UserOut(id=user.id, name=user.name, email=user.email))

@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
def register(payload: UserCreate, db: Session = Depends(get_db)):
    email = payload.email.strip().lower()
    name = payload.name.strip()
    if not is_valid_email(email):
        raise HTTPException(status_code=400, detail="Email incorreto")
    if not name:
        raise HTTPException(status_code=400, detail="Nome obrigatório")
    if not payload.password:
        raise HTTPException(status_code=400, detail="Senha obrigatória")

    existing = db.query(User).filter(User.email == email).first()
    if existing:
        raise HTTPException(status_code=409, detail="Email já cadastrado")

    user = User(name=name, email=email, password=get_password_hash(payload.password))
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Email já cadastrado")
    db.refresh(user)
    return build_token(user)

@router.post("/login", response_model=Token)
def login(credentials: UserLogin, db: Session = Depends(get_db)):
    email = credentials.email.strip().lower()
    if not is_valid_email(email):
        raise HTTPException(status_code=400, detail="Email incorreto")

    user = db.query(User).filter(User.email == email).first()
    if not user:
        raise HTTPException(status_code=404, detail="Usuário não encontrado")
    if not verify_password(credentials.password, user.password):
        raise HTTPException(status_code=401, detail="Senha incorreta")

    return build_token(user)

@router.get("/me", response_model=UserOut)
def me(current_user: User = Depends(get_current_user)):
    return UserOut(
        id=current_user.id,
        name=current_user.name,
        email=current_user.email,
    )
